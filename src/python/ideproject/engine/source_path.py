# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from ideproject.base.exceptions import HumanReadableException
from ideproject.build_graph.address import BuildTarget
from ideproject.engine.action_graph import BuildRuleResolver
from ideproject.engine.build_rule import BuildRule


@dataclass(frozen=True)
class PathSourcePath:
    """A source file checked into the repository."""

    relative_path: str

    def __str__(self) -> str:
        return self.relative_path


@dataclass(frozen=True)
class BuildTargetSourcePath:
    """The output of another rule, or an explicit path inside that output."""

    build_target: BuildTarget
    resolved_path: str | None = None

    def __str__(self) -> str:
        if self.resolved_path:
            return f"{self.build_target}[{self.resolved_path}]"
        return str(self.build_target)


SourcePath = Union[PathSourcePath, BuildTargetSourcePath]


class SourcePathResolver:
    """Resolves declared source references to paths relative to the cell root."""

    def __init__(self, rule_resolver: BuildRuleResolver) -> None:
        self._rule_resolver = rule_resolver

    @property
    def rule_resolver(self) -> BuildRuleResolver:
        return self._rule_resolver

    def get_path(self, source_path: SourcePath) -> str:
        if isinstance(source_path, PathSourcePath):
            return source_path.relative_path
        if source_path.resolved_path is not None:
            return source_path.resolved_path
        rule = self._rule_resolver.get_rule(source_path.build_target)
        output = rule.path_to_output
        if output is None:
            raise HumanReadableException(
                f"No known output for: {source_path.build_target}. {rule} produces no output."
            )
        return output

    def get_rule(self, source_path: SourcePath) -> BuildRule | None:
        if isinstance(source_path, BuildTargetSourcePath):
            return self._rule_resolver.get_rule(source_path.build_target)
        return None

    def filter_build_rule_inputs(self, source_paths: Iterable[SourcePath]) -> tuple[BuildRule, ...]:
        """The rules whose outputs the given source paths refer to."""
        rules = (self.get_rule(sp) for sp in source_paths)
        return tuple(dict.fromkeys(r for r in rules if r is not None))
