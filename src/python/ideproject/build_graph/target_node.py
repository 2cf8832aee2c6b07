# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_types import BuildRuleType, ConstructorArg

A = TypeVar("A", bound=ConstructorArg)


@dataclass(frozen=True)
class TargetNode(Generic[A]):
    """The parsed declaration of a single build target."""

    build_target: BuildTarget
    type: BuildRuleType
    constructor_arg: A = field(default_factory=ConstructorArg)  # type: ignore[assignment]
    declared_deps: tuple[BuildTarget, ...] = ()

    def __post_init__(self) -> None:
        # Declared order is kept, duplicates are not.
        object.__setattr__(self, "declared_deps", tuple(dict.fromkeys(self.declared_deps)))

    @property
    def extra_deps(self) -> tuple[BuildTarget, ...]:
        return self.constructor_arg.extra_deps()

    @property
    def deps(self) -> tuple[BuildTarget, ...]:
        """The declared deps followed by the deps implied by the payload, without duplicates."""
        return tuple(dict.fromkeys((*self.declared_deps, *self.extra_deps)))

    @property
    def referenced_targets(self) -> tuple[BuildTarget, ...]:
        """Targets the payload names besides `declared_deps`, such as tests."""
        return self.constructor_arg.referenced_targets()

    def cast_arg(self, arg_type: type[ConstructorArg]) -> TargetNode | None:
        """Returns this node if its payload is an instance of `arg_type`, else None."""
        if isinstance(self.constructor_arg, arg_type):
            return self
        return None

    def __str__(self) -> str:
        return f"{self.build_target} ({self.type})"
