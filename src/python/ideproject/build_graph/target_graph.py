# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, Iterator, Union

from ideproject.base.exceptions import (
    CycleException,
    DuplicateTargetDeclarationError,
    NoSuchTargetError,
    UnresolvableDependencyError,
)
from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_node import TargetNode
from ideproject.util.ordered_set import FrozenOrderedSet, OrderedSet

logger = logging.getLogger(__name__)

TargetOrNode = Union[BuildTarget, TargetNode]


class TargetGraph:
    """A directed acyclic graph of TargetNodes, keyed by BuildTarget.

    A TargetGraph is immutable once constructed and may be shared freely between threads. Nodes
    iterate in BuildTarget order regardless of the order they were supplied in.
    """

    def __init__(self, nodes: Iterable[TargetNode], *, description: str | None = None) -> None:
        by_target: dict[BuildTarget, TargetNode] = {}
        for node in nodes:
            existing = by_target.get(node.build_target)
            if existing is not None and existing != node:
                raise DuplicateTargetDeclarationError(node.build_target, existing, node)
            by_target[node.build_target] = node
        self._nodes = {t: by_target[t] for t in sorted(by_target)}
        self._description = description
        self._topologically_sorted: tuple[TargetNode, ...] | None = None

        for node in self._nodes.values():
            missing = [dep for dep in node.deps if dep not in self._nodes]
            if missing:
                raise UnresolvableDependencyError(node.build_target, missing)

    @classmethod
    def empty(cls) -> TargetGraph:
        return cls(())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, TargetNode):
            return self._nodes.get(item.build_target) == item
        return item in self._nodes

    def __iter__(self) -> Iterator[TargetNode]:
        return iter(self._nodes.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetGraph):
            return NotImplemented
        return self._nodes == other._nodes

    def __hash__(self) -> int:
        return hash(tuple(self._nodes))

    def __str__(self) -> str:
        if self._description:
            return f"TargetGraph({self._description}, {len(self)} nodes)"
        return f"TargetGraph({len(self)} nodes)"

    __repr__ = __str__

    @property
    def nodes(self) -> tuple[TargetNode, ...]:
        return tuple(self._nodes.values())

    @property
    def build_targets(self) -> tuple[BuildTarget, ...]:
        return tuple(self._nodes)

    def get(self, build_target: BuildTarget) -> TargetNode:
        node = self._nodes.get(build_target)
        if node is None:
            raise NoSuchTargetError(self, build_target)
        return node

    def get_optional(self, build_target: BuildTarget) -> TargetNode | None:
        return self._nodes.get(build_target)

    def get_all(self, build_targets: Iterable[BuildTarget]) -> FrozenOrderedSet[TargetNode]:
        return FrozenOrderedSet(self.get(t) for t in build_targets)

    def filter(self, predicate: Callable[[TargetNode], bool]) -> FrozenOrderedSet[TargetNode]:
        return FrozenOrderedSet(node for node in self._nodes.values() if predicate(node))

    def dependencies_of(self, node: TargetOrNode) -> tuple[TargetNode, ...]:
        node = self._resolve(node)
        return tuple(self._nodes[dep] for dep in node.deps)

    def transitive_closure(self, roots: Iterable[TargetOrNode]) -> FrozenOrderedSet[TargetNode]:
        """Returns `roots` and everything they transitively depend on, breadth first."""
        closure: OrderedSet[TargetNode] = OrderedSet()
        to_walk = deque(self._resolve(root) for root in roots)
        while to_walk:
            node = to_walk.popleft()
            if node in closure:
                continue
            closure.add(node)
            to_walk.extend(self.dependencies_of(node))
        return FrozenOrderedSet(closure)

    def subgraph(self, roots: Iterable[TargetOrNode]) -> TargetGraph:
        """The induced subgraph over `roots` and their transitive dependencies."""
        roots = tuple(roots)
        closure = self.transitive_closure(roots)
        logger.debug(f"Extracted a subgraph of {len(closure)} nodes from {len(roots)} roots.")
        return TargetGraph(closure, description=self._description)

    def topologically_sorted(self) -> tuple[TargetNode, ...]:
        """All nodes, each one after all of its dependencies.

        Raises CycleException naming the offending path if the graph is not acyclic.
        """
        if self._topologically_sorted is None:
            self._topologically_sorted = self._sort_topologically()
        return self._topologically_sorted

    def _sort_topologically(self) -> tuple[TargetNode, ...]:
        ordered: list[TargetNode] = []
        visited: set[BuildTarget] = set()
        # The targets on the current path, in walk order, for cycle reporting.
        path_stack: OrderedSet[BuildTarget] = OrderedSet()
        frames: list[tuple[BuildTarget, Iterator[BuildTarget]]] = []

        def enter(build_target: BuildTarget) -> None:
            path_stack.add(build_target)
            frames.append((build_target, iter(self._nodes[build_target].deps)))

        for root in self._nodes:
            if root in visited:
                continue
            enter(root)
            while frames:
                build_target, deps = frames[-1]
                dep = next(deps, None)
                if dep is None:
                    frames.pop()
                    path_stack.discard(build_target)
                    visited.add(build_target)
                    ordered.append(self._nodes[build_target])
                elif dep in path_stack:
                    raise CycleException(dep, (*path_stack, dep))
                elif dep not in visited:
                    enter(dep)
        return tuple(ordered)

    def _resolve(self, node: TargetOrNode) -> TargetNode:
        if isinstance(node, TargetNode):
            return self.get(node.build_target)
        return self.get(node)
