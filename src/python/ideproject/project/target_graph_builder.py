# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Obtains the target graph a project is generated from.

A full recursive parse of the repository is expensive, so whenever the request names explicit
targets (and the IDE does not need whole-repository context) only those targets and their
dependencies are parsed. Tests are not dependencies of the code they exercise, so when tests are
requested against such a narrow graph, a second parse seeded with the roots and the discovered
tests produces the final graph.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable, Iterable

from ideproject.base.exceptions import BuildFileParseError
from ideproject.build_graph.address import BuildTarget, Cell
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import HasSourceUnderTest, HasTests
from ideproject.engine.parser import FullGraphSpec, Parser, SeededGraphSpec, TargetGraphSpec
from ideproject.project.ide import AssociatedTargetNodePredicate, Ide
from ideproject.project.roots import replace_workspaces_with_source_targets_if_possible
from ideproject.util.ordered_set import FrozenOrderedSet, OrderedSet
from ideproject.util.strutil import pluralize

logger = logging.getLogger(__name__)


def needs_full_recursive_parse(
    ide: Ide | None,
    explicit_targets: Iterable[BuildTarget],
    *,
    experimental_ij_generation: bool = False,
) -> bool:
    """Whether the whole repository must be parsed rather than just the explicit targets.

    An unknown IDE is treated as one that needs whole-repository context.
    """
    ide_needs_full_graph = not experimental_ij_generation and ide != Ide.XCODE
    return ide_needs_full_graph or not FrozenOrderedSet(explicit_targets)


@dataclass(frozen=True)
class TargetGraphParser:
    """Issues parse requests on behalf of the project command."""

    parser: Parser
    cell: Cell
    executor: Executor
    enable_profiling: bool = False

    def parse(self, spec: TargetGraphSpec) -> TargetGraph:
        logger.debug(f"Parsing target graph for {spec}")
        try:
            return self.parser.build_target_graph(
                self.cell, spec, enable_profiling=self.enable_profiling, executor=self.executor
            )
        except OSError as e:
            raise BuildFileParseError(
                f"Failed to read build files for {spec} in {self.cell}: {e}", cause=e
            ) from e

    def resolve_target_specs(self, specs: Iterable[str]) -> FrozenOrderedSet[BuildTarget]:
        specs = tuple(specs)
        if not specs:
            return FrozenOrderedSet()
        return self.parser.resolve_target_specs(
            self.cell, specs, enable_profiling=self.enable_profiling, executor=self.executor
        )


def build_project_graph(
    parser: TargetGraphParser,
    explicit_targets: Iterable[BuildTarget],
    needs_full_parse: bool,
) -> TargetGraph:
    if needs_full_parse:
        return parser.parse(FullGraphSpec())
    explicit_targets = FrozenOrderedSet(explicit_targets)
    if not explicit_targets:
        raise AssertionError("A scoped parse requires at least one explicit target.")
    return parser.parse(SeededGraphSpec(explicit_targets))


def _associated_test_predicate(
    tested_targets: FrozenOrderedSet[BuildTarget],
) -> Callable[[TargetNode], bool]:
    """Matches test nodes that declare one of `tested_targets` as their source under test."""

    def predicate(node: TargetNode) -> bool:
        if not node.type.is_test_rule or not isinstance(node.constructor_arg, HasSourceUnderTest):
            return False
        return any(t in tested_targets for t in node.constructor_arg.source_under_test)

    return predicate


def _tested_targets(
    build_targets: Iterable[BuildTarget],
    project_graph: TargetGraph,
    include_dependencies_tests: bool,
) -> FrozenOrderedSet[TargetNode]:
    roots = project_graph.get_all(build_targets)
    if include_dependencies_tests:
        return project_graph.transitive_closure(roots)
    return roots


def get_explicit_test_targets(
    build_targets: Iterable[BuildTarget],
    project_graph: TargetGraph,
    include_dependencies_tests: bool,
) -> FrozenOrderedSet[BuildTarget]:
    """The tests associated with `build_targets`, computed against `project_graph`.

    A test is associated when the tested code lists it in its `tests`, or when it names the tested
    code as its source under test. With `include_dependencies_tests` the tested code also covers
    every transitive dependency of `build_targets`.
    """
    tested_nodes = _tested_targets(build_targets, project_graph, include_dependencies_tests)
    test_targets: OrderedSet[BuildTarget] = OrderedSet()
    for node in tested_nodes:
        if isinstance(node.constructor_arg, HasTests):
            test_targets.update(node.constructor_arg.tests)

    predicate = _associated_test_predicate(FrozenOrderedSet(n.build_target for n in tested_nodes))
    test_targets.update(node.build_target for node in project_graph.filter(predicate))
    return FrozenOrderedSet(test_targets)


def attach_tests(
    parser: TargetGraphParser,
    project_graph: TargetGraph,
    graph_roots: Iterable[BuildTarget],
    *,
    include_tests: bool,
    include_dependencies_tests: bool,
    needs_full_parse: bool,
) -> tuple[TargetGraph, FrozenOrderedSet[BuildTarget]]:
    """Discovers the tests of `graph_roots` and makes sure the graph contains them.

    A full graph already holds every test. A scoped graph is re-parsed once, seeded with the roots
    and their tests.
    """
    graph_roots = FrozenOrderedSet(graph_roots)
    if not include_tests:
        return project_graph, FrozenOrderedSet()

    source_roots = replace_workspaces_with_source_targets_if_possible(graph_roots, project_graph)
    test_targets = get_explicit_test_targets(
        source_roots, project_graph, include_dependencies_tests
    )
    logger.debug(f"Found {pluralize(len(test_targets), 'explicit test target')}.")
    if not needs_full_parse:
        project_graph = parser.parse(SeededGraphSpec(graph_roots.union(test_targets)))
    return project_graph, test_targets


@dataclass(frozen=True)
class TargetGraphAndTargets:
    """The final graph of a project, along with its roots and its associated tests."""

    target_graph: TargetGraph
    project_roots: FrozenOrderedSet[TargetNode]
    associated_tests: FrozenOrderedSet[TargetNode]

    @classmethod
    def create(
        cls,
        graph_roots: Iterable[BuildTarget],
        project_graph: TargetGraph,
        associated_project_predicate: AssociatedTargetNodePredicate,
        *,
        include_tests: bool,
        include_dependencies_tests: bool,
        explicit_tests: Iterable[BuildTarget],
    ) -> TargetGraphAndTargets:
        graph_roots = FrozenOrderedSet(graph_roots)
        project_roots = project_graph.get_all(graph_roots)

        associated_tests: FrozenOrderedSet[TargetNode] = FrozenOrderedSet()
        if include_tests:
            source_roots = replace_workspaces_with_source_targets_if_possible(
                graph_roots, project_graph
            )
            tested = _tested_targets(source_roots, project_graph, include_dependencies_tests)
            predicate = _associated_test_predicate(
                FrozenOrderedSet(node.build_target for node in tested)
            )
            associated_tests = project_graph.get_all(explicit_tests).union(
                project_graph.filter(predicate)
            )

        # Projects are associated with the code (and tests) they describe.
        context_graph = project_graph.subgraph(project_roots.union(associated_tests))
        associated_projects = project_graph.filter(
            lambda node: associated_project_predicate(node, context_graph)
        )

        target_graph = project_graph.subgraph(
            project_roots.union(associated_tests, associated_projects)
        )
        return cls(target_graph, project_roots, associated_tests)


def create_target_graph(
    parser: TargetGraphParser,
    project_graph: TargetGraph,
    graph_roots: Iterable[BuildTarget],
    associated_project_predicate: AssociatedTargetNodePredicate,
    *,
    include_tests: bool,
    include_dependencies_tests: bool,
    needs_full_parse: bool,
) -> TargetGraphAndTargets:
    graph_roots = FrozenOrderedSet(graph_roots)
    final_graph, test_targets = attach_tests(
        parser,
        project_graph,
        graph_roots,
        include_tests=include_tests,
        include_dependencies_tests=include_dependencies_tests,
        needs_full_parse=needs_full_parse,
    )
    return TargetGraphAndTargets.create(
        graph_roots,
        final_graph,
        associated_project_predicate,
        include_tests=include_tests,
        include_dependencies_tests=include_dependencies_tests,
        explicit_tests=test_targets,
    )
