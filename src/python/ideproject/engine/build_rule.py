# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from typing_extensions import Protocol

from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_types import BuildRuleType
from ideproject.util.ordered_set import OrderedSet

# Generated outputs live under this directory, relative to the cell root.
GEN_DIR = "ide-out/gen"


def gen_path(build_target: BuildTarget, name_format: str = "%s") -> str:
    """The conventional output location of a rule: `ide-out/gen/<base path>/<formatted name>`."""
    name = name_format % build_target.short_name
    if build_target.flavors:
        name = f"{name}#{','.join(build_target.flavors)}"
    parts = [GEN_DIR, build_target.base_path, name]
    return "/".join(p for p in parts if p)


class Step(Protocol):
    """A single unit of work executed by the (external) build engine."""

    @property
    def short_name(self) -> str: ...

    def description(self) -> str: ...


@dataclass(frozen=True)
class MakeCleanDirectoryStep:
    path: str

    @property
    def short_name(self) -> str:
        return "mkdir_clean"

    def description(self) -> str:
        return f"rm -rf {self.path} && mkdir -p {self.path}"


@dataclass
class BuildableContext:
    """Collects the artifacts a rule declares before any of its steps execute."""

    recorded_artifacts: OrderedSet[str] = field(default_factory=OrderedSet)

    def record_artifact(self, path: str) -> None:
        self.recorded_artifacts.add(path)


@dataclass(frozen=True)
class BuildContext:
    """Read-only information handed to rules when they produce build steps."""

    cell_root: str = "."


class BuildRule(ABC):
    """A concrete, buildable instance derived from a TargetNode.

    A rule must record its output artifacts in `get_build_steps` before those steps execute, and
    reports a single canonical output path (or None if it produces nothing).
    """

    def __init__(
        self,
        build_target: BuildTarget,
        rule_type: BuildRuleType,
        deps: Iterable[BuildRule] = (),
    ) -> None:
        self._build_target = build_target
        self._type = rule_type
        self._deps = tuple(sorted(deps, key=lambda r: r.build_target))

    @property
    def build_target(self) -> BuildTarget:
        return self._build_target

    @property
    def type(self) -> BuildRuleType:
        return self._type

    @property
    def deps(self) -> tuple[BuildRule, ...]:
        return self._deps

    @abstractmethod
    def get_build_steps(
        self, context: BuildContext, buildable_context: BuildableContext
    ) -> Sequence[Step]:
        """Returns the ordered steps that build this rule."""

    @property
    @abstractmethod
    def path_to_output(self) -> str | None:
        """The path, relative to the cell root, of this rule's output."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._build_target})"


class NoopBuildRule(BuildRule):
    """A rule for a target that only matters through its dependencies."""

    def get_build_steps(
        self, context: BuildContext, buildable_context: BuildableContext
    ) -> Sequence[Step]:
        return ()

    @property
    def path_to_output(self) -> str | None:
        return None


class GeneratedOutputRule(BuildRule):
    """A rule that materializes a single output directory under the gen dir."""

    @property
    def path_to_output(self) -> str:
        return gen_path(self.build_target)

    def get_build_steps(
        self, context: BuildContext, buildable_context: BuildableContext
    ) -> Sequence[Step]:
        buildable_context.record_artifact(self.path_to_output)
        return (MakeCleanDirectoryStep(self.path_to_output),)
