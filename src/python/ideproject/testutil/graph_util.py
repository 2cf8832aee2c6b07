# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""In-memory stand-ins for the parser, generators and builder, for use in tests."""

from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import Executor
from typing import Iterable, Sequence

from ideproject.base.exceptions import BuildFileParseError
from ideproject.build_graph.address import BuildTarget, Cell
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import BuildRuleType, ConstructorArg
from ideproject.engine.parser import FullGraphSpec, TargetGraphSpec
from ideproject.project.generator_state import GeneratorState
from ideproject.project.project_command import IntellijGenerationRequest
from ideproject.project.target_graph_builder import TargetGraphParser
from ideproject.project.workspaces import WorkspaceGenerationRequest
from ideproject.util.ordered_set import FrozenOrderedSet, OrderedSet


def target(spec: str) -> BuildTarget:
    return BuildTarget.parse(spec)


def node(
    spec: str,
    rule_type: BuildRuleType,
    arg: ConstructorArg | None = None,
    deps: Iterable[str] = (),
) -> TargetNode:
    return TargetNode(
        target(spec),
        rule_type,
        arg if arg is not None else ConstructorArg(),
        tuple(target(d) for d in deps),
    )


class InMemoryParser:
    """A parser over a fixed set of declarations, which records every parse it performs."""

    def __init__(self, nodes: Iterable[TargetNode]) -> None:
        self._nodes = {n.build_target: n for n in nodes}
        self._lock = threading.Lock()
        self.parses: list[TargetGraphSpec] = []

    @property
    def declarations(self) -> tuple[TargetNode, ...]:
        return tuple(self._nodes.values())

    @property
    def full_parse_count(self) -> int:
        return sum(1 for spec in self.parses if isinstance(spec, FullGraphSpec))

    @property
    def seeded_parse_count(self) -> int:
        return len(self.parses) - self.full_parse_count

    def resolve_target_specs(
        self,
        cell: Cell,
        specs: Sequence[str],
        *,
        enable_profiling: bool,
        executor: Executor,
    ) -> FrozenOrderedSet[BuildTarget]:
        resolved: OrderedSet[BuildTarget] = OrderedSet()
        for spec in specs:
            if spec.endswith("/..."):
                base = spec[: -len("/...")].lstrip("/")
                resolved.update(t for t in self._nodes if self._is_under(t, base))
                continue
            build_target = BuildTarget.parse(spec, cell=cell.name)
            if build_target not in self._nodes:
                raise BuildFileParseError(
                    f"No rule found when resolving target {build_target}",
                    build_target=build_target,
                )
            resolved.add(build_target)
        return FrozenOrderedSet(resolved)

    def build_target_graph(
        self,
        cell: Cell,
        spec: TargetGraphSpec,
        *,
        enable_profiling: bool,
        executor: Executor,
    ) -> TargetGraph:
        with self._lock:
            self.parses.append(spec)
        if isinstance(spec, FullGraphSpec):
            seeds = [t for t in self._nodes if self._is_under(t, spec.base_path)]
        else:
            seeds = list(spec.targets)

        parsed: dict[BuildTarget, TargetNode] = {}
        to_walk = list(seeds)
        while to_walk:
            build_target = to_walk.pop()
            if build_target in parsed:
                continue
            declared = self._nodes.get(build_target)
            if declared is None:
                raise BuildFileParseError(
                    f"No rule found when resolving target {build_target}",
                    build_target=build_target,
                )
            parsed[build_target] = declared
            to_walk.extend(declared.deps)
        return TargetGraph(parsed.values(), description=str(spec))

    @staticmethod
    def _is_under(build_target: BuildTarget, base_path: str) -> bool:
        base_path = base_path.strip("/")
        return not base_path or build_target.base_path_with_slash.startswith(f"{base_path}/")


def graph_parser(parser: InMemoryParser, executor: Executor) -> TargetGraphParser:
    return TargetGraphParser(parser, Cell(), executor)


class RecordingBuilder:
    """Records build requests and answers each with a fixed exit code."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.builds: list[tuple[tuple[str, ...], bool, bool]] = []

    def build(
        self, targets: Sequence[str], *, keep_going: bool = False, disable_caching: bool = False
    ) -> int:
        self.builds.append((tuple(targets), keep_going, disable_caching))
        return self.exit_code


class FakeWorkspaceGenerator:
    """Writes one project per target in the workspace's closure, via the shared state.

    Rules with an output are reported as required build targets.
    """

    def __init__(self, request: WorkspaceGenerationRequest, generated: Counter[str]) -> None:
        self.request = request
        self.generated = generated
        self.test_groups: tuple[FrozenOrderedSet[TargetNode], ...] = ()
        self._required: OrderedSet[BuildTarget] = OrderedSet()

    def set_groupable_tests(self, groups: tuple[FrozenOrderedSet[TargetNode], ...]) -> None:
        self.test_groups = groups

    def generate_workspace_and_dependent_projects(self, generator_state: GeneratorState) -> None:
        arg = self.request.workspace_arg
        members = [t for t in (arg.src_target, *arg.extra_targets) if t is not None]
        target_graph = self.request.target_graph
        for member in target_graph.transitive_closure(members):
            path = f"{member.build_target.base_path_with_slash}{member.build_target.short_name}"

            def generate(path: str = path) -> str:
                self.generated[path] += 1
                return path

            generator_state.get_or_generate(f"{path}.xcodeproj", generate)
            resolver = self.request.source_path_resolver_for_node(member)
            rule = resolver.rule_resolver.get_rule(member.build_target)
            if rule.path_to_output is not None:
                self._required.add(member.build_target)

    @property
    def required_build_targets(self) -> FrozenOrderedSet[BuildTarget]:
        return FrozenOrderedSet(self._required)


class FakeWorkspaceGeneratorFactory:
    def __init__(self) -> None:
        self.generated: Counter[str] = Counter()
        self.generators: list[FakeWorkspaceGenerator] = []

    def __call__(self, request: WorkspaceGenerationRequest) -> FakeWorkspaceGenerator:
        generator = FakeWorkspaceGenerator(request, self.generated)
        self.generators.append(generator)
        return generator


class FakeIntellijGenerator:
    """Reports every rule with an output as required, and remembers each request."""

    def __init__(self) -> None:
        self.requests: list[IntellijGenerationRequest] = []

    def write(self, request: IntellijGenerationRequest) -> FrozenOrderedSet[BuildTarget]:
        self.requests.append(request)
        return FrozenOrderedSet(
            rule.build_target
            for rule in request.action_graph_and_resolver.action_graph
            if rule.path_to_output is not None
        )
