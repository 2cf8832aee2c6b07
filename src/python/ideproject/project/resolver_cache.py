# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
from typing import Callable

from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.engine.action_graph import (
    DefaultTargetNodeToBuildRuleTransformer,
    TargetGraphToActionGraph,
)
from ideproject.engine.source_path import SourcePathResolver
from ideproject.util.memo import LoadingCache, memoized_supplier

logger = logging.getLogger(__name__)

TransformerSupplier = Callable[[], TargetGraphToActionGraph]
SourcePathResolverForNode = Callable[[TargetNode], SourcePathResolver]


def default_transformer_supplier() -> TransformerSupplier:
    """A supplier that constructs the default target graph to action graph transformer once."""
    return memoized_supplier(
        lambda: TargetGraphToActionGraph(DefaultTargetNodeToBuildRuleTransformer())
    )


class SourcePathResolverCache:
    """Resolvers for single nodes, each backed by the action graph of that node's subgraph.

    Entries are computed at most once per node, even under concurrent requests. An instance lives
    for a single workspace materialization and is then discarded.
    """

    def __init__(
        self,
        target_graph: TargetGraph,
        transformer_supplier: TransformerSupplier | None = None,
    ) -> None:
        self._target_graph = target_graph
        self._transformer_supplier = transformer_supplier or default_transformer_supplier()
        self._cache: LoadingCache[BuildTarget, SourcePathResolver] = LoadingCache(
            self._load, name="source_path_resolvers"
        )

    @property
    def load_count(self) -> int:
        return self._cache.load_count

    def _load(self, build_target: BuildTarget) -> SourcePathResolver:
        subgraph = self._target_graph.subgraph([build_target])
        action_graph_and_resolver = self._transformer_supplier().apply(subgraph)
        logger.debug(
            f"Built {len(action_graph_and_resolver.action_graph)} rules for {build_target}."
        )
        return SourcePathResolver(action_graph_and_resolver.resolver)

    def resolver_for(self, node: TargetNode) -> SourcePathResolver:
        return self._cache.get(node.build_target)

    def __call__(self, node: TargetNode) -> SourcePathResolver:
        return self.resolver_for(node)
