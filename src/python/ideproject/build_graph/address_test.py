# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import pytest

from ideproject.base.exceptions import BuildTargetParseError, GraphConstructionError
from ideproject.build_graph.address import BuildTarget


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("//apps/ios:app", BuildTarget("", "apps/ios", "app")),
        ("//apps/ios", BuildTarget("", "apps/ios", "ios")),
        ("//:root", BuildTarget("", "", "root")),
        ("other//lib:lib", BuildTarget("other", "lib", "lib")),
        ("//lib:lib#iphoneos,debug", BuildTarget("", "lib", "lib", ("debug", "iphoneos"))),
    ],
)
def test_parse(spec: str, expected: BuildTarget) -> None:
    assert BuildTarget.parse(spec) == expected


def test_parse_relative() -> None:
    assert BuildTarget.parse(":lib", relative_to="apps/ios") == BuildTarget.of("apps/ios", "lib")
    assert BuildTarget.parse("//a:b", cell="other").cell == "other"


@pytest.mark.parametrize(
    "spec",
    ["", "apps/ios:app", ":lib", "//:", "//a:b:c", "//a:b#", "//../a:b", "//a/:b", "//"],
)
def test_parse_invalid(spec: str) -> None:
    with pytest.raises(BuildTargetParseError) as e:
        BuildTarget.parse(spec)
    assert isinstance(e.value, GraphConstructionError)


def test_spec_round_trips_flavors_in_sorted_order() -> None:
    build_target = BuildTarget.parse("cell//lib:lib#b,a")
    assert build_target.flavors == ("a", "b")
    assert str(build_target) == "cell//lib:lib#a,b"
    assert build_target.unflavored == BuildTarget.parse("cell//lib:lib")
    assert build_target.unflavored.with_flavors("b", "a") == build_target


def test_base_path_with_slash() -> None:
    assert BuildTarget.parse("//:root").base_path_with_slash == ""
    assert BuildTarget.parse("//a/b:c").base_path_with_slash == "a/b/"
    assert BuildTarget.parse("//a/b:c").base_name == "//a/b"


def test_ordering() -> None:
    targets = [BuildTarget.parse(s) for s in ("//b:a", "//a:b", "//a:a", "//:z")]
    assert [str(t) for t in sorted(targets)] == ["//:z", "//a:a", "//a:b", "//b:a"]
