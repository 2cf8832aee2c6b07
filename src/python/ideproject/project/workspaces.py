# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Generates one IDE workspace (and the projects it depends on) per root target."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from typing_extensions import Protocol

from ideproject.base.exceptions import UnsupportedWorkspaceRootError
from ideproject.build_graph.address import BuildTarget
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import (
    IMPLICIT_WORKSPACE_TYPES,
    BuildRuleType,
    XcodeWorkspaceConfigArg,
    can_generate_implicit_workspace_for_type,
)
from ideproject.project.generator_state import GeneratorState
from ideproject.project.resolver_cache import (
    SourcePathResolverCache,
    SourcePathResolverForNode,
    TransformerSupplier,
)
from ideproject.project.target_graph_builder import TargetGraphAndTargets
from ideproject.project.test_grouping import (
    filter_groupable_tests,
    group_tests_by_bundle_settings,
)
from ideproject.util.ordered_set import FrozenOrderedSet, OrderedSet
from ideproject.util.strutil import pluralize

logger = logging.getLogger(__name__)


class GeneratorOption(Enum):
    GENERATE_READ_ONLY_FILES = "generate_read_only_files"
    INCLUDE_TESTS = "include_tests"
    INCLUDE_DEPENDENCIES_TESTS = "include_dependencies_tests"
    CREATE_DIRECTORY_STRUCTURE = "create_directory_structure"
    USE_SHORT_NAMES_FOR_TARGETS = "use_short_names_for_targets"
    DISABLE_HEADER_MAPS = "disable_header_maps"


SEPARATED_PROJECT_OPTIONS = frozenset({GeneratorOption.USE_SHORT_NAMES_FOR_TARGETS})
COMBINED_PROJECT_OPTIONS = frozenset(
    {GeneratorOption.CREATE_DIRECTORY_STRUCTURE, GeneratorOption.USE_SHORT_NAMES_FOR_TARGETS}
)


def build_workspace_generator_options(
    *,
    read_only: bool,
    include_tests: bool,
    include_dependencies_tests: bool,
    combined_project: bool,
    use_header_maps: bool,
) -> frozenset[GeneratorOption]:
    options = set()
    if read_only:
        options.add(GeneratorOption.GENERATE_READ_ONLY_FILES)
    if include_tests:
        options.add(GeneratorOption.INCLUDE_TESTS)
    if include_dependencies_tests:
        options.add(GeneratorOption.INCLUDE_DEPENDENCIES_TESTS)
    options.update(COMBINED_PROJECT_OPTIONS if combined_project else SEPARATED_PROJECT_OPTIONS)
    if not use_header_maps:
        options.add(GeneratorOption.DISABLE_HEADER_MAPS)
    return frozenset(options)


@dataclass(frozen=True)
class WorkspaceGenerationRequest:
    """Everything a workspace generator is constructed with, for one root."""

    target_graph: TargetGraph
    workspace_arg: XcodeWorkspaceConfigArg
    workspace_target: BuildTarget
    options: frozenset[GeneratorOption]
    combined_project: bool
    build_with_external_tool: bool
    build_with_external_tool_flags: tuple[str, ...]
    source_path_resolver_for_node: SourcePathResolverForNode


class WorkspaceGenerator(Protocol):
    def set_groupable_tests(self, groups: tuple[FrozenOrderedSet[TargetNode], ...]) -> None:
        """Receives the groupable tests, partitioned into groups that can share one bundle."""
        ...

    def generate_workspace_and_dependent_projects(self, generator_state: GeneratorState) -> None:
        """Writes the workspace, consulting `generator_state` before writing any shared project."""
        ...

    @property
    def required_build_targets(self) -> FrozenOrderedSet[BuildTarget]:
        """The targets that must be built before the generated workspace is usable."""
        ...


WorkspaceGeneratorFactory = Callable[[WorkspaceGenerationRequest], WorkspaceGenerator]


def workspace_arg_for_root(node: TargetNode) -> XcodeWorkspaceConfigArg:
    """The workspace descriptor for a root: its own, or an implicit one wrapping it."""
    workspace_node = node.cast_arg(XcodeWorkspaceConfigArg)
    if node.type == BuildRuleType.XCODE_WORKSPACE_CONFIG and workspace_node is not None:
        return workspace_node.constructor_arg
    if can_generate_implicit_workspace_for_type(node.type):
        return XcodeWorkspaceConfigArg.implicit_for(node.build_target)
    raise UnsupportedWorkspaceRootError(
        node,
        (BuildRuleType.XCODE_WORKSPACE_CONFIG.value, *(t.value for t in IMPLICIT_WORKSPACE_TYPES)),
    )


def generate_workspaces_for_targets(
    target_graph_and_targets: TargetGraphAndTargets,
    passed_targets: Iterable[BuildTarget],
    options: frozenset[GeneratorOption],
    generator_factory: WorkspaceGeneratorFactory,
    generator_state: GeneratorState,
    *,
    combined_project: bool = False,
    build_with_external_tool: bool = False,
    build_with_external_tool_flags: Iterable[str] = (),
    combine_test_bundles: bool = False,
    transformer_supplier: TransformerSupplier | None = None,
) -> FrozenOrderedSet[BuildTarget]:
    """Generates a workspace for every root and returns the union of their required targets.

    The roots are the passed targets, or the project roots when none were passed. The first
    failing root aborts the whole run.
    """
    target_graph = target_graph_and_targets.target_graph
    passed_targets = FrozenOrderedSet(passed_targets)
    if passed_targets:
        targets = passed_targets
    else:
        targets = FrozenOrderedSet(n.build_target for n in target_graph_and_targets.project_roots)

    resolver_cache = SourcePathResolverCache(target_graph, transformer_supplier)
    logger.debug(f"Generating workspace for config targets {', '.join(map(str, targets))}")

    test_groups: tuple[FrozenOrderedSet[TargetNode], ...] = ()
    if combine_test_bundles:
        groupable = filter_groupable_tests(target_graph_and_targets.associated_tests)
        test_groups = group_tests_by_bundle_settings(groupable)
        logger.debug(
            f"Combining {pluralize(len(groupable), 'test')} into "
            f"{pluralize(len(test_groups), 'bundle')}."
        )

    required_build_targets: OrderedSet[BuildTarget] = OrderedSet()
    for input_target in targets:
        workspace_arg = workspace_arg_for_root(target_graph.get(input_target))
        generator = generator_factory(
            WorkspaceGenerationRequest(
                target_graph=target_graph,
                workspace_arg=workspace_arg,
                workspace_target=input_target,
                options=options,
                combined_project=combined_project,
                build_with_external_tool=build_with_external_tool,
                build_with_external_tool_flags=tuple(build_with_external_tool_flags),
                source_path_resolver_for_node=resolver_cache.resolver_for,
            )
        )
        generator.set_groupable_tests(test_groups)
        generator.generate_workspace_and_dependent_projects(generator_state)
        required = generator.required_build_targets
        logger.debug(
            f"Required build targets for workspace {input_target}: {', '.join(map(str, required))}"
        )
        required_build_targets.update(required)

    return FrozenOrderedSet(required_build_targets)
