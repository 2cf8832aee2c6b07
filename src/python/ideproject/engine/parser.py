# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""The interface of the (external) build file parser.

Parsing is the expensive part of project generation, so the parser is handed the executor it may
fan work out onto. Its concurrency limit is configured by the caller, never here.
"""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from typing_extensions import Protocol

from ideproject.build_graph.address import BuildTarget, Cell
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.util.ordered_set import FrozenOrderedSet


@dataclass(frozen=True)
class FullGraphSpec:
    """Every target declared anywhere under `base_path`, recursively."""

    base_path: str = ""

    def __str__(self) -> str:
        return f"//{self.base_path}/..." if self.base_path else "//..."


@dataclass(frozen=True)
class SeededGraphSpec:
    """Only `targets` and their transitive dependencies."""

    targets: FrozenOrderedSet[BuildTarget]

    def __init__(self, targets: Iterable[BuildTarget]) -> None:
        object.__setattr__(self, "targets", FrozenOrderedSet(sorted(targets)))
        if not self.targets:
            raise ValueError("A seeded graph spec needs at least one target.")

    def __str__(self) -> str:
        return " ".join(str(t) for t in self.targets)


TargetGraphSpec = Union[FullGraphSpec, SeededGraphSpec]


class Parser(Protocol):
    def resolve_target_specs(
        self,
        cell: Cell,
        specs: Sequence[str],
        *,
        enable_profiling: bool,
        executor: Executor,
    ) -> FrozenOrderedSet[BuildTarget]:
        """Expands command-line style target specs into concrete BuildTargets.

        Raises a GraphConstructionError for malformed specs or build files.
        """
        ...

    def build_target_graph(
        self,
        cell: Cell,
        spec: TargetGraphSpec,
        *,
        enable_profiling: bool,
        executor: Executor,
    ) -> TargetGraph:
        """Parses build files into a TargetGraph.

        Raises a GraphConstructionError for malformed declarations, unresolvable dependencies or
        cyclic declarations.
        """
        ...
