# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import pytest

from ideproject.util.strutil import bullet_list, comma_separated_list, pluralize, softwrap


@pytest.mark.parametrize(
    "count, item, expected",
    [
        (1, "target", "1 target"),
        (0, "target", "0 targets"),
        (2, "class", "2 classes"),
        (3, "dependency", "3 dependencies"),
    ],
)
def test_pluralize(count: int, item: str, expected: str) -> None:
    assert pluralize(count, item) == expected


def test_comma_separated_list() -> None:
    assert comma_separated_list([]) == ""
    assert comma_separated_list(["xcode"]) == "xcode"
    assert comma_separated_list(["xcode", "intellij"], "or") == "xcode or intellij"
    assert comma_separated_list(["a", "b", "c"]) == "a, b, and c"


def test_bullet_list() -> None:
    assert bullet_list(["//a:a", "//b:b"]) == "  * //a:a\n  * //b:b"
    assert bullet_list([]) == ""


def test_softwrap() -> None:
    assert (
        softwrap(
            """
            Passed targets contain both Xcode and
            IntelliJ projects.

            Please pass only one kind.
            """
        )
        == "Passed targets contain both Xcode and IntelliJ projects.\n\nPlease pass only one kind."
    )


def test_softwrap_keeps_bullets() -> None:
    text = softwrap(
        f"""
        Missing targets:

        {bullet_list(["//a:a", "//b:b"])}
        """
    )
    assert text == "Missing targets:\n\n  * //a:a\n  * //b:b"


def test_softwrap_keeps_indented_lines() -> None:
    text = softwrap(
        """
        Usage:
            project //app:workspace
        Then open the generated
        workspace.
        """
    )
    assert text == "Usage:\n    project //app:workspace\nThen open the generated workspace."
