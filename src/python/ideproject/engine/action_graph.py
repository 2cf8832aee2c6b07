# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterator

from typing_extensions import Protocol

from ideproject.base.exceptions import DuplicateBuildRuleError, NoSuchBuildRuleError
from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import BuildRuleType
from ideproject.engine.build_rule import BuildRule, GeneratedOutputRule, NoopBuildRule

logger = logging.getLogger(__name__)


class BuildRuleResolver:
    """Maps BuildTargets to the concrete rules built for them."""

    def __init__(self) -> None:
        self._rules: dict[BuildTarget, BuildRule] = {}
        self._lock = threading.Lock()

    def add_to_index(self, rule: BuildRule) -> BuildRule:
        with self._lock:
            if rule.build_target in self._rules:
                raise DuplicateBuildRuleError(rule.build_target)
            self._rules[rule.build_target] = rule
        return rule

    def get_rule(self, build_target: BuildTarget) -> BuildRule:
        rule = self._rules.get(build_target)
        if rule is None:
            raise NoSuchBuildRuleError(build_target)
        return rule

    def get_rule_optional(self, build_target: BuildTarget) -> BuildRule | None:
        return self._rules.get(build_target)

    def __contains__(self, build_target: object) -> bool:
        return build_target in self._rules

    def __len__(self) -> int:
        return len(self._rules)


class ActionGraph:
    """The rules built from a target graph, in dependency order."""

    def __init__(self, rules: tuple[BuildRule, ...]) -> None:
        self._rules = rules

    @property
    def nodes(self) -> tuple[BuildRule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[BuildRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


@dataclass(frozen=True)
class ActionGraphAndResolver:
    action_graph: ActionGraph
    resolver: BuildRuleResolver


class TargetNodeToBuildRuleTransformer(Protocol):
    def transform(
        self, target_graph: TargetGraph, rule_resolver: BuildRuleResolver, node: TargetNode
    ) -> BuildRule:
        """Builds the rule for `node`; the rules of all of its dependencies are already indexed."""
        ...


# Types whose rules produce a file-system output that other rules (or IDEs) may reference.
_OUTPUT_PRODUCING_TYPES = frozenset(
    {
        BuildRuleType.GENRULE,
        BuildRuleType.EXPORT_FILE,
        BuildRuleType.APPLE_BINARY,
        BuildRuleType.APPLE_BUNDLE,
        BuildRuleType.APPLE_LIBRARY,
        BuildRuleType.CXX_LIBRARY,
        BuildRuleType.JAVA_BINARY,
        BuildRuleType.JAVA_LIBRARY,
        BuildRuleType.ANDROID_BINARY,
        BuildRuleType.ANDROID_LIBRARY,
        BuildRuleType.ANDROID_RESOURCE,
    }
)


class DefaultTargetNodeToBuildRuleTransformer:
    def transform(
        self, target_graph: TargetGraph, rule_resolver: BuildRuleResolver, node: TargetNode
    ) -> BuildRule:
        deps = [rule_resolver.get_rule(dep) for dep in node.deps]
        if node.type in _OUTPUT_PRODUCING_TYPES:
            return GeneratedOutputRule(node.build_target, node.type, deps)
        return NoopBuildRule(node.build_target, node.type, deps)


class TargetGraphToActionGraph:
    """Transforms a target graph into an action graph, one rule per node.

    Nodes are visited dependencies-first, so a transformer can always look up the rules of a
    node's dependencies.
    """

    def __init__(self, transformer: TargetNodeToBuildRuleTransformer) -> None:
        self._transformer = transformer

    def apply(self, target_graph: TargetGraph) -> ActionGraphAndResolver:
        logger.debug(f"Transforming {target_graph} into an action graph.")
        resolver = BuildRuleResolver()
        rules = tuple(
            resolver.add_to_index(self._transformer.transform(target_graph, resolver, node))
            for node in target_graph.topologically_sorted()
        )
        return ActionGraphAndResolver(ActionGraph(rules), resolver)
