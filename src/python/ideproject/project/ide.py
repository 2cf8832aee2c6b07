# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from ideproject.base.exceptions import InvalidIdeError, MissingIdeError, MixedIdeTargetsError
from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import (
    BuildRuleType,
    ProjectConfigArg,
    can_generate_implicit_workspace_for_type,
)
from ideproject.util.enums import match

logger = logging.getLogger(__name__)


class Ide(Enum):
    INTELLIJ = "intellij"
    XCODE = "xcode"

    @classmethod
    def from_string(cls, value: str) -> Ide:
        try:
            return cls(value.lower())
        except ValueError:
            raise InvalidIdeError(value, (ide.value for ide in cls))

    def __str__(self) -> str:
        return self.value


RootsPredicate = Callable[[TargetNode], bool]
# Decides whether a node is associated with a project, given the graph of that project.
AssociatedTargetNodePredicate = Callable[[TargetNode, TargetGraph], bool]


def _is_project_config(node: TargetNode) -> bool:
    return node.type == BuildRuleType.PROJECT_CONFIG


def _is_xcode_workspace_config(node: TargetNode) -> bool:
    return node.type == BuildRuleType.XCODE_WORKSPACE_CONFIG


def _project_config_points_into(node: TargetNode, target_graph: TargetGraph) -> bool:
    if not isinstance(node.constructor_arg, ProjectConfigArg):
        return False
    arg = node.constructor_arg
    project_target = arg.src_target if arg.src_target is not None else arg.test_target
    return project_target is not None and target_graph.get_optional(project_target) is not None


def _never_associated(node: TargetNode, target_graph: TargetGraph) -> bool:
    return False


@dataclass(frozen=True)
class ProjectPredicates:
    """The per-IDE answers to "is this node a project root?" and "is this node an associated
    project of a given graph?"."""

    project_roots_predicate: RootsPredicate
    associated_project_predicate: AssociatedTargetNodePredicate

    @classmethod
    def for_ide(cls, ide: Ide) -> ProjectPredicates:
        return match(
            ide,
            {
                Ide.INTELLIJ: cls(_is_project_config, _project_config_points_into),
                Ide.XCODE: cls(_is_xcode_workspace_config, _never_associated),
            },
        )


_XCODE_ONLY_TYPES = frozenset(
    t
    for t in BuildRuleType
    if can_generate_implicit_workspace_for_type(t) or t == BuildRuleType.XCODE_WORKSPACE_CONFIG
)
_INTELLIJ_ONLY_TYPES = frozenset(
    {
        BuildRuleType.JAVA_BINARY,
        BuildRuleType.JAVA_LIBRARY,
        BuildRuleType.JAVA_TEST,
        BuildRuleType.ANDROID_BINARY,
        BuildRuleType.ANDROID_LIBRARY,
        BuildRuleType.ANDROID_RESOURCE,
        BuildRuleType.ROBOLECTRIC_TEST,
        BuildRuleType.PROJECT_CONFIG,
    }
)


def ide_for_type(rule_type: BuildRuleType) -> Ide | None:
    """The only IDE a target of this type can produce a project for, or None if ambiguous."""
    if rule_type in _XCODE_ONLY_TYPES:
        return Ide.XCODE
    if rule_type in _INTELLIJ_ONLY_TYPES:
        return Ide.INTELLIJ
    return None


def infer_ide(
    selected_ide: Ide | None,
    configured_ide: Ide | None,
    explicit_targets: Iterable[BuildTarget],
    project_graph: TargetGraph | None,
) -> Ide:
    """Decides which IDE to generate for.

    An explicitly selected IDE wins, then the configured default. Failing both, the IDE is
    guessed from the explicit targets: every one of them must agree, and the scan fails on the
    first target that disagrees with an earlier one.
    """
    if selected_ide is not None:
        return selected_ide
    if configured_ide is not None:
        return configured_ide

    explicit_targets = tuple(explicit_targets)
    if not explicit_targets or project_graph is None:
        raise MissingIdeError()

    guessed_ide: Ide | None = None
    for build_target in explicit_targets:
        node = project_graph.get(build_target)
        ide = ide_for_type(node.type)
        if ide is None:
            continue
        if guessed_ide is None:
            guessed_ide = ide
        elif guessed_ide != ide:
            raise MixedIdeTargetsError(explicit_targets)

    if guessed_ide is None:
        raise MissingIdeError()
    logger.debug(f"Inferred ide {guessed_ide} from {len(explicit_targets)} passed targets.")
    return guessed_ide
