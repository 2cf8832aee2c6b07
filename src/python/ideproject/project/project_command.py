# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Generates IDE project files for a set of targets.

The command parses as little of the repository as the IDE allows, decides which IDE to generate
for, works out the root targets and their tests, and then hands the resulting graph to the IDE's
project generator. Whatever the generated project needs prebuilt is finally built.
"""

from __future__ import annotations

import logging
import sys
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Sequence, TextIO

from typing_extensions import Protocol

from ideproject.base.exceptions import GraphConstructionError
from ideproject.build_graph.address import BuildTarget, Cell
from ideproject.build_graph.target_graph import TargetGraph
from ideproject.build_graph.target_node import TargetNode
from ideproject.build_graph.target_types import BuildRuleType, JavaLibraryArg
from ideproject.engine.action_graph import (
    ActionGraphAndResolver,
    DefaultTargetNodeToBuildRuleTransformer,
    TargetGraphToActionGraph,
)
from ideproject.engine.parser import Parser
from ideproject.engine.source_path import SourcePathResolver
from ideproject.project.generator_state import GeneratorState
from ideproject.project.ide import Ide, ProjectPredicates, infer_ide
from ideproject.project.project_config import AggregationMode, ProjectConfig
from ideproject.project.roots import (
    get_root_build_targets_for_intellij,
    get_roots_from_predicate,
    resolve_roots,
)
from ideproject.project.target_graph_builder import (
    TargetGraphAndTargets,
    TargetGraphParser,
    build_project_graph,
    create_target_graph,
    needs_full_recursive_parse,
)
from ideproject.project.workspaces import (
    WorkspaceGeneratorFactory,
    build_workspace_generator_options,
    generate_workspaces_for_targets,
)
from ideproject.util.enums import match
from ideproject.util.ordered_set import FrozenOrderedSet
from ideproject.util.strutil import pluralize, softwrap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectCommandOptions:
    ide: Ide | None = None
    combined_project: bool = False
    build_with_external_tool: bool = False
    build_with_external_tool_flags: tuple[str, ...] = ()
    process_annotations: bool = False
    without_tests: bool = False
    without_dependencies_tests: bool = False
    combine_test_bundles: bool = False
    read_only: bool = False
    dry_run: bool = False
    experimental_ij_generation: bool = False
    enable_profiling: bool = False

    @property
    def with_tests(self) -> bool:
        return not self.without_tests

    @property
    def with_dependencies_tests(self) -> bool:
        return not self.without_dependencies_tests

    def get_read_only(self, config: ProjectConfig) -> bool:
        return self.read_only or config.read_only


class Builder(Protocol):
    def build(
        self, targets: Sequence[str], *, keep_going: bool = False, disable_caching: bool = False
    ) -> int:
        """Builds `targets`, returning the build's exit code."""
        ...


@dataclass(frozen=True)
class IntellijGenerationRequest:
    target_graph_and_targets: TargetGraphAndTargets
    action_graph_and_resolver: ActionGraphAndResolver
    source_path_resolver: SourcePathResolver
    aggregation_mode: AggregationMode
    experimental: bool
    # True when the project is a slice of the repository around the passed targets.
    minimal: bool


class IntellijProjectGenerator(Protocol):
    def write(self, request: IntellijGenerationRequest) -> FrozenOrderedSet[BuildTarget]:
        """Writes the project files and returns the targets they need prebuilt."""
        ...


@dataclass(frozen=True)
class ProjectCommandResult:
    exit_code: int
    ide: Ide | None = None
    target_graph_and_targets: TargetGraphAndTargets | None = None
    required_build_targets: FrozenOrderedSet[BuildTarget] = FrozenOrderedSet()


def is_target_with_annotations(node: TargetNode) -> bool:
    return (
        node.type == BuildRuleType.JAVA_LIBRARY
        and isinstance(node.constructor_arg, JavaLibraryArg)
        and bool(node.constructor_arg.annotation_processors)
    )


def get_targets_with_annotations(
    target_graph: TargetGraph, build_targets: Iterable[BuildTarget]
) -> FrozenOrderedSet[BuildTarget]:
    """The subset of `build_targets` that run annotation processors."""
    return FrozenOrderedSet(
        t
        for t in build_targets
        if (node := target_graph.get_optional(t)) is not None and is_target_with_annotations(node)
    )


def get_annotation_processing_targets(
    project_graph: TargetGraph, passed_targets: Iterable[BuildTarget]
) -> tuple[str, ...]:
    """The targets whose generated sources the IDE needs: the passed targets, or else every
    annotation-processing library in the graph."""
    passed_targets = FrozenOrderedSet(passed_targets)
    build_targets = passed_targets or get_roots_from_predicate(
        project_graph, is_target_with_annotations
    )
    return tuple(str(t) for t in build_targets)


def should_force_building_with_external_tool(
    config: ProjectConfig, passed_targets: Iterable[BuildTarget]
) -> bool:
    """True when every passed target is configured to always be built by the external tool."""
    passed_targets = FrozenOrderedSet(passed_targets)
    if not passed_targets:
        return False
    forced = FrozenOrderedSet(
        BuildTarget.parse(spec) for spec in config.force_build_with_external_tool_targets
    )
    return passed_targets.issubset(forced)


class ProjectCommand:
    def __init__(
        self,
        options: ProjectCommandOptions,
        config: ProjectConfig,
        parser: Parser,
        cell: Cell,
        builder: Builder,
        *,
        intellij_generator: IntellijProjectGenerator | None = None,
        workspace_generator_factory: WorkspaceGeneratorFactory | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._options = options
        self._config = config
        self._parser = parser
        self._cell = cell
        self._builder = builder
        self._intellij_generator = intellij_generator
        self._workspace_generator_factory = workspace_generator_factory
        self._stdout = stdout or sys.stdout

    def run(self, specs: Sequence[str]) -> ProjectCommandResult:
        with ThreadPoolExecutor(
            max_workers=self._config.concurrency_limit, thread_name_prefix="project"
        ) as executor:
            return self._run(specs, executor)

    def _run(self, specs: Sequence[str], executor: Executor) -> ProjectCommandResult:
        options = self._options
        graph_parser = TargetGraphParser(
            self._parser, self._cell, executor, enable_profiling=options.enable_profiling
        )
        try:
            passed_targets = graph_parser.resolve_target_specs(specs)
            needs_full_parse = needs_full_recursive_parse(
                options.ide or self._config.ide,
                passed_targets,
                experimental_ij_generation=options.experimental_ij_generation,
            )
            project_graph = build_project_graph(graph_parser, passed_targets, needs_full_parse)
        except GraphConstructionError as e:
            logger.error(str(e))
            return ProjectCommandResult(exit_code=1)

        ide = infer_ide(options.ide, self._config.ide, passed_targets, project_graph)
        predicates = ProjectPredicates.for_ide(ide)

        supplemental_roots: FrozenOrderedSet[BuildTarget] = FrozenOrderedSet()
        if needs_full_parse:
            supplemental_roots = get_root_build_targets_for_intellij(
                ide, project_graph, predicates, executor=executor
            )
        try:
            graph_roots = resolve_roots(
                project_graph,
                passed_targets,
                predicates.project_roots_predicate,
                supplemental_roots=supplemental_roots,
                executor=executor,
            )
            target_graph_and_targets = create_target_graph(
                graph_parser,
                project_graph,
                graph_roots,
                predicates.associated_project_predicate,
                include_tests=options.with_tests,
                include_dependencies_tests=options.with_dependencies_tests,
                needs_full_parse=needs_full_parse,
            )
        except GraphConstructionError as e:
            logger.error(str(e))
            return ProjectCommandResult(exit_code=1, ide=ide)

        if options.dry_run:
            for node in target_graph_and_targets.target_graph.nodes:
                print(str(node), file=self._stdout)
            return ProjectCommandResult(0, ide, target_graph_and_targets)

        logger.info(f"Generating {ide} project for {pluralize(len(graph_roots), 'root')}.")
        exit_code, required = match(
            ide,
            {
                Ide.INTELLIJ: self._run_intellij_project_generator,
                Ide.XCODE: self._run_xcode_project_generator,
            },
        )(project_graph, target_graph_and_targets, passed_targets)
        return ProjectCommandResult(exit_code, ide, target_graph_and_targets, required)

    def _run_intellij_project_generator(
        self,
        project_graph: TargetGraph,
        target_graph_and_targets: TargetGraphAndTargets,
        passed_targets: FrozenOrderedSet[BuildTarget],
    ) -> tuple[int, FrozenOrderedSet[BuildTarget]]:
        if self._intellij_generator is None:
            raise AssertionError("An IntelliJ project generator is required for IntelliJ projects.")
        options = self._options

        # Only the targets that can be represented as IDE configuration are in this graph.
        action_graph_and_resolver = TargetGraphToActionGraph(
            DefaultTargetNodeToBuildRuleTransformer()
        ).apply(target_graph_and_targets.target_graph)
        required = self._intellij_generator.write(
            IntellijGenerationRequest(
                target_graph_and_targets=target_graph_and_targets,
                action_graph_and_resolver=action_graph_and_resolver,
                source_path_resolver=SourcePathResolver(action_graph_and_resolver.resolver),
                aggregation_mode=self._config.intellij_aggregation_mode,
                experimental=options.experimental_ij_generation,
                minimal=bool(passed_targets),
            )
        )

        if options.experimental_ij_generation:
            if not required:
                return 0, required
            if options.process_annotations:
                exit_code = self._build_without_cache_for_annotated_targets(
                    target_graph_and_targets.target_graph, required
                )
            else:
                exit_code = self._builder.build([str(t) for t in required], keep_going=True)
            return exit_code, required

        additional_initial_targets: tuple[str, ...] = ()
        if options.process_annotations:
            additional_initial_targets = get_annotation_processing_targets(
                project_graph, passed_targets
            )
        initial_targets = (*self._config.initial_targets, *additional_initial_targets)
        exit_code = 0
        if initial_targets:
            exit_code = self._builder.build(initial_targets, disable_caching=True)

        if exit_code == 0 and not passed_targets:
            logger.info(
                softwrap(
                    """
                    You can pass targets to generate a minimal project just for them, which keeps
                    the IDE fast when working on large repositories.
                    """
                )
            )
        return exit_code, required

    def _build_without_cache_for_annotated_targets(
        self, target_graph: TargetGraph, required: FrozenOrderedSet[BuildTarget]
    ) -> int:
        annotated = get_targets_with_annotations(target_graph, required)
        unannotated = required - annotated

        exit_code = self._builder.build([str(t) for t in unannotated], keep_going=True)
        if exit_code != 0:
            self._warn_build_failed()
        if not annotated:
            return exit_code

        annotation_exit_code = self._builder.build(
            [str(t) for t in annotated], keep_going=True, disable_caching=True
        )
        if exit_code == 0 and annotation_exit_code != 0:
            self._warn_build_failed()
        return exit_code if exit_code != 0 else annotation_exit_code

    def _warn_build_failed(self) -> None:
        logger.warning(
            softwrap(
                """
                Because the build did not complete successfully some parts of the project may not
                work correctly with IntelliJ. Please fix the errors and run this command again.
                """
            )
        )

    def _run_xcode_project_generator(
        self,
        project_graph: TargetGraph,
        target_graph_and_targets: TargetGraphAndTargets,
        passed_targets: FrozenOrderedSet[BuildTarget],
    ) -> tuple[int, FrozenOrderedSet[BuildTarget]]:
        if self._workspace_generator_factory is None:
            raise AssertionError("A workspace generator factory is required for Xcode projects.")
        options = self._options
        generator_options = build_workspace_generator_options(
            read_only=options.get_read_only(self._config),
            include_tests=options.with_tests,
            include_dependencies_tests=options.with_dependencies_tests,
            combined_project=options.combined_project,
            use_header_maps=self._config.use_header_maps_in_xcode_project,
        )
        required = generate_workspaces_for_targets(
            target_graph_and_targets,
            passed_targets,
            generator_options,
            self._workspace_generator_factory,
            GeneratorState(),
            combined_project=options.combined_project,
            build_with_external_tool=(
                options.build_with_external_tool
                or should_force_building_with_external_tool(self._config, passed_targets)
            ),
            build_with_external_tool_flags=options.build_with_external_tool_flags,
            combine_test_bundles=options.combine_test_bundles,
        )
        if not required:
            return 0, required
        return self._builder.build([str(t) for t in required]), required
