# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Formatting helpers for log lines and error messages."""

from __future__ import annotations

from typing import Iterable


def pluralize(count: int, noun: str) -> str:
    """E.g. `pluralize(1, "root")` is "1 root" and `pluralize(3, "dependency")` "3 dependencies"."""
    if count != 1:
        if noun.endswith("s"):
            noun = f"{noun}es"
        elif noun.endswith("y"):
            noun = f"{noun[:-1]}ies"
        else:
            noun = f"{noun}s"
    return f"{count} {noun}"


def comma_separated_list(items: Iterable[str], conjunction: str = "and") -> str:
    *head, last = list(items) or [""]
    if not head:
        return last
    if len(head) == 1:
        return f"{head[0]} {conjunction} {last}"
    return f"{', '.join(head)}, {conjunction} {last}"


def bullet_list(items: Iterable[str]) -> str:
    """One indented `* item` line per item; surround it with blank lines in a message."""
    return "\n".join(f"  * {item}" for item in items)


def _joinable(line: str) -> bool:
    return bool(line) and not line.startswith((" ", "* "))


def softwrap(text: str) -> str:
    """Reflows an indented triple-quoted message.

    The indentation of the first non-blank line is removed from every line that carries it. Runs of
    plain lines become one line, blank lines separate paragraphs, and indented or `* ` lines are
    kept as they are.
    """
    lines = [line.rstrip() for line in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return ""

    margin = " " * (len(lines[0]) - len(lines[0].lstrip(" ")))
    out: list[str] = []
    for line in lines:
        if line.startswith(margin):
            line = line[len(margin) :]
        if not line:
            if out and out[-1]:
                out.append("")
        elif out and _joinable(out[-1]) and _joinable(line):
            out[-1] = f"{out[-1]} {line}"
        else:
            out.append(line)
    return "\n".join(out)
