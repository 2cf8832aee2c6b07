# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Iterable

from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import BuildRuleType, XcodeWorkspaceConfigArg
from ideproject.project.ide import Ide, ProjectPredicates, RootsPredicate
from ideproject.util.ordered_set import FrozenOrderedSet

logger = logging.getLogger(__name__)


def get_roots_from_predicate(
    project_graph: TargetGraph,
    roots_predicate: RootsPredicate,
    *,
    executor: Executor | None = None,
) -> FrozenOrderedSet[BuildTarget]:
    """Every target in the graph whose node satisfies `roots_predicate`, in graph order.

    The predicate is evaluated independently per node, so it may be fanned out on `executor`.
    """
    nodes = project_graph.nodes
    if executor is None:
        matches: Iterable[bool] = map(roots_predicate, nodes)
    else:
        matches = executor.map(roots_predicate, nodes)
    return FrozenOrderedSet(node.build_target for node, ok in zip(nodes, matches) if ok)


def _is_at_repository_root(node: TargetNode) -> bool:
    return node.build_target.base_path_with_slash == ""


def get_root_build_targets_for_intellij(
    ide: Ide,
    project_graph: TargetGraph,
    project_predicates: ProjectPredicates,
    *,
    executor: Executor | None = None,
) -> FrozenOrderedSet[BuildTarget]:
    """The project roots declared at the repository root, which IntelliJ always needs."""
    if ide != Ide.INTELLIJ:
        return FrozenOrderedSet()
    roots_predicate = project_predicates.project_roots_predicate
    return get_roots_from_predicate(
        project_graph,
        lambda node: _is_at_repository_root(node) and roots_predicate(node),
        executor=executor,
    )


def resolve_roots(
    project_graph: TargetGraph,
    explicit_targets: Iterable[BuildTarget],
    roots_predicate: RootsPredicate,
    *,
    supplemental_roots: Iterable[BuildTarget] = (),
    executor: Executor | None = None,
) -> FrozenOrderedSet[BuildTarget]:
    """Determines the root targets of the generated project.

    Explicit targets are the roots verbatim (each must exist in the graph), plus any
    `supplemental_roots`. Without explicit targets, the roots are every node satisfying
    `roots_predicate`.
    """
    explicit_targets = FrozenOrderedSet(explicit_targets)
    if explicit_targets:
        # Raises NoSuchTargetError naming the graph and the first missing target.
        project_graph.get_all(explicit_targets)
        graph_roots = explicit_targets.union(supplemental_roots)
    else:
        graph_roots = get_roots_from_predicate(project_graph, roots_predicate, executor=executor)
    logger.debug(f"Resolved {len(graph_roots)} graph roots from {project_graph}.")
    return graph_roots


def replace_workspaces_with_source_targets_if_possible(
    build_targets: Iterable[BuildTarget], project_graph: TargetGraph
) -> FrozenOrderedSet[BuildTarget]:
    """Swaps each workspace config for the target it is a workspace of, when it names one."""
    result = []
    for node in project_graph.get_all(build_targets):
        arg = node.constructor_arg
        if (
            node.type == BuildRuleType.XCODE_WORKSPACE_CONFIG
            and isinstance(arg, XcodeWorkspaceConfigArg)
            and arg.src_target is not None
        ):
            result.append(arg.src_target)
        else:
            result.append(node.build_target)
    return FrozenOrderedSet(result)
