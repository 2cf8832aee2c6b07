# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

from enum import Enum
from typing import Mapping, TypeVar

E = TypeVar("E", bound=Enum)
R = TypeVar("R")


class EnumMatchError(ValueError):
    pass


def match(member: E, cases: Mapping[E, R]) -> R:
    """Looks up the case for `member`, where `cases` must name every member of its enum, and only
    those."""
    members = set(type(member))
    if set(cases) != members:
        missing = sorted(m.name for m in members if m not in cases)
        extra = sorted(repr(c) for c in cases if c not in members)
        raise EnumMatchError(
            f"Cases for {type(member).__name__} don't match its members. "
            f"Missing: {missing or 'none'}. Unknown: {extra or 'none'}."
        )
    return cases[member]
