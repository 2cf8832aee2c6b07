# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from concurrent.futures import Executor

import pytest

from ideproject.base.exceptions import BuildFileParseError, GraphConstructionError
from ideproject.build_graph.address import Cell
from ideproject.build_graph.target_types import (
    AppleTestArg,
    BuildRuleType,
    JavaLibraryArg,
    JavaTestArg,
    LibraryArg,
    ProjectConfigArg,
    XcodeWorkspaceConfigArg,
)
from ideproject.engine.parser import FullGraphSpec, SeededGraphSpec
from ideproject.project.ide import Ide, ProjectPredicates, infer_ide
from ideproject.project.roots import resolve_roots
from ideproject.project.target_graph_builder import (
    TargetGraphParser,
    attach_tests,
    build_project_graph,
    create_target_graph,
    get_explicit_test_targets,
    needs_full_recursive_parse,
)
from ideproject.testutil.graph_util import InMemoryParser, graph_parser, node, target
from ideproject.util.ordered_set import FrozenOrderedSet

XCODE_PREDICATES = ProjectPredicates.for_ide(Ide.XCODE)
INTELLIJ_PREDICATES = ProjectPredicates.for_ide(Ide.INTELLIJ)


@pytest.fixture
def parser() -> InMemoryParser:
    return InMemoryParser(
        [
            node(
                "//lib:base",
                BuildRuleType.APPLE_LIBRARY,
                LibraryArg(tests=(target("//lib:base_test"),)),
            ),
            node(
                "//lib:base_test",
                BuildRuleType.APPLE_TEST,
                AppleTestArg(source_under_test=(target("//lib:base"),)),
            ),
            node(
                "//app:lib",
                BuildRuleType.APPLE_LIBRARY,
                LibraryArg(tests=(target("//app:lib_test"),)),
                deps=["//lib:base"],
            ),
            node(
                "//app:lib_test",
                BuildRuleType.APPLE_TEST,
                AppleTestArg(source_under_test=(target("//app:lib"),)),
            ),
            node(
                "//app:other_test",
                BuildRuleType.APPLE_TEST,
                AppleTestArg(source_under_test=(target("//app:lib"),)),
            ),
            node(
                "//app:workspace",
                BuildRuleType.XCODE_WORKSPACE_CONFIG,
                XcodeWorkspaceConfigArg(src_target=target("//app:lib")),
            ),
            node("//unrelated:lib", BuildRuleType.CXX_LIBRARY),
        ]
    )


def _specs(graph) -> list[str]:
    return [str(t) for t in graph.build_targets]


@pytest.mark.parametrize(
    "ide, explicit, experimental, expected",
    [
        (Ide.XCODE, ["//app:lib"], False, False),
        (Ide.XCODE, [], False, True),
        (Ide.INTELLIJ, ["//java:lib"], False, True),
        (Ide.INTELLIJ, ["//java:lib"], True, False),
        (Ide.INTELLIJ, [], True, True),
        (None, ["//app:lib"], False, True),
    ],
)
def test_needs_full_recursive_parse(
    ide: Ide, explicit: list[str], experimental: bool, expected: bool
) -> None:
    explicit_targets = [target(s) for s in explicit]
    assert (
        needs_full_recursive_parse(
            ide, explicit_targets, experimental_ij_generation=experimental
        )
        is expected
    )


def test_seeded_parse_is_scoped(parser: InMemoryParser, executor: Executor) -> None:
    graph = build_project_graph(graph_parser(parser, executor), [target("//app:workspace")], False)
    assert _specs(graph) == ["//app:lib", "//app:workspace", "//lib:base"]
    assert parser.parses == [SeededGraphSpec([target("//app:workspace")])]


def test_full_parse(parser: InMemoryParser, executor: Executor) -> None:
    graph = build_project_graph(graph_parser(parser, executor), [target("//app:lib")], True)
    assert len(graph) == 7
    assert parser.parses == [FullGraphSpec()]


def test_seeded_parse_requires_targets(parser: InMemoryParser, executor: Executor) -> None:
    with pytest.raises(AssertionError):
        build_project_graph(graph_parser(parser, executor), [], False)


def test_explicit_test_targets(parser: InMemoryParser, executor: Executor) -> None:
    full_graph = build_project_graph(graph_parser(parser, executor), [], True)
    direct = get_explicit_test_targets([target("//app:lib")], full_graph, False)
    assert set(direct) == {target("//app:lib_test"), target("//app:other_test")}

    with_deps = get_explicit_test_targets([target("//app:lib")], full_graph, True)
    assert set(with_deps) == {
        target("//app:lib_test"),
        target("//app:other_test"),
        target("//lib:base_test"),
    }


def test_explicit_test_targets_only_see_the_current_graph(
    parser: InMemoryParser, executor: Executor
) -> None:
    scoped = build_project_graph(graph_parser(parser, executor), [target("//app:lib")], False)
    # `other_test` only names the library as its source under test, and was not parsed.
    assert get_explicit_test_targets([target("//app:lib")], scoped, False) == FrozenOrderedSet(
        [target("//app:lib_test")]
    )


def test_scoped_graph_is_reparsed_with_tests(parser: InMemoryParser, executor: Executor) -> None:
    targets_parser = graph_parser(parser, executor)
    roots = [target("//app:workspace")]
    project_graph = build_project_graph(targets_parser, roots, False)

    result = create_target_graph(
        targets_parser,
        project_graph,
        roots,
        XCODE_PREDICATES.associated_project_predicate,
        include_tests=True,
        include_dependencies_tests=False,
        needs_full_parse=False,
    )

    assert parser.seeded_parse_count == 2
    assert parser.full_parse_count == 0
    assert parser.parses[-1] == SeededGraphSpec(
        [target("//app:workspace"), target("//app:lib_test")]
    )
    assert _specs(result.target_graph) == [
        "//app:lib",
        "//app:lib_test",
        "//app:workspace",
        "//lib:base",
    ]
    assert [str(n.build_target) for n in result.project_roots] == ["//app:workspace"]
    assert [str(n.build_target) for n in result.associated_tests] == ["//app:lib_test"]


def test_dependencies_tests(parser: InMemoryParser, executor: Executor) -> None:
    targets_parser = graph_parser(parser, executor)
    roots = [target("//app:workspace")]
    result = create_target_graph(
        targets_parser,
        build_project_graph(targets_parser, roots, False),
        roots,
        XCODE_PREDICATES.associated_project_predicate,
        include_tests=True,
        include_dependencies_tests=True,
        needs_full_parse=False,
    )
    assert {str(n.build_target) for n in result.associated_tests} == {
        "//app:lib_test",
        "//lib:base_test",
    }
    assert target("//lib:base_test") in result.target_graph


def test_full_graph_is_not_reparsed(parser: InMemoryParser, executor: Executor) -> None:
    targets_parser = graph_parser(parser, executor)
    roots = [target("//app:workspace")]
    result = create_target_graph(
        targets_parser,
        build_project_graph(targets_parser, roots, True),
        roots,
        XCODE_PREDICATES.associated_project_predicate,
        include_tests=True,
        include_dependencies_tests=False,
        needs_full_parse=True,
    )
    assert parser.parses == [FullGraphSpec()]
    assert {str(n.build_target) for n in result.associated_tests} == {
        "//app:lib_test",
        "//app:other_test",
    }
    assert target("//unrelated:lib") not in result.target_graph


def test_without_tests(parser: InMemoryParser, executor: Executor) -> None:
    targets_parser = graph_parser(parser, executor)
    roots = [target("//app:workspace")]
    project_graph = build_project_graph(targets_parser, roots, False)
    graph, tests = attach_tests(
        targets_parser,
        project_graph,
        roots,
        include_tests=False,
        include_dependencies_tests=True,
        needs_full_parse=False,
    )
    assert graph is project_graph
    assert not tests
    assert parser.seeded_parse_count == 1


def test_attach_tests_is_deterministic(parser: InMemoryParser, executor: Executor) -> None:
    targets_parser = graph_parser(parser, executor)
    roots = [target("//app:workspace"), target("//lib:base")]
    project_graph = build_project_graph(targets_parser, roots, False)

    def attach():
        return attach_tests(
            targets_parser,
            project_graph,
            roots,
            include_tests=True,
            include_dependencies_tests=True,
            needs_full_parse=False,
        )

    first_graph, first_tests = attach()
    second_graph, second_tests = attach()
    assert first_graph == second_graph
    assert first_tests == second_tests
    assert list(first_tests) == list(second_tests)


def test_intellij_associated_projects(executor: Executor) -> None:
    parser = InMemoryParser(
        [
            node(
                "//java/a:a",
                BuildRuleType.JAVA_LIBRARY,
                JavaLibraryArg(tests=(target("//java/a:test"),)),
            ),
            node(
                "//java/a:test",
                BuildRuleType.JAVA_TEST,
                JavaTestArg(source_under_test=(target("//java/a:a"),)),
            ),
            node(
                "//java/a:test_project",
                BuildRuleType.PROJECT_CONFIG,
                ProjectConfigArg(test_target=target("//java/a:test")),
            ),
            node(
                "//java/a:project",
                BuildRuleType.PROJECT_CONFIG,
                ProjectConfigArg(src_target=target("//java/a:a")),
            ),
            node("//java/b:b", BuildRuleType.JAVA_LIBRARY),
            node(
                "//java/b:project",
                BuildRuleType.PROJECT_CONFIG,
                ProjectConfigArg(src_target=target("//java/b:b")),
            ),
        ]
    )
    targets_parser = graph_parser(parser, executor)
    roots = [target("//java/a:a")]
    result = create_target_graph(
        targets_parser,
        build_project_graph(targets_parser, roots, True),
        roots,
        INTELLIJ_PREDICATES.associated_project_predicate,
        include_tests=True,
        include_dependencies_tests=True,
        needs_full_parse=True,
    )
    assert _specs(result.target_graph) == [
        "//java/a:a",
        "//java/a:project",
        "//java/a:test",
        "//java/a:test_project",
    ]


def test_scenario_a_full_intellij_repository(executor: Executor) -> None:
    parser = InMemoryParser(
        [
            node(f"//java/{name}:{name}", BuildRuleType.JAVA_LIBRARY)
            for name in ("a", "b", "c", "d")
        ]
        + [
            node(
                f"//java/{name}:project",
                BuildRuleType.PROJECT_CONFIG,
                ProjectConfigArg(src_target=target(f"//java/{name}:{name}")),
            )
            for name in ("a", "b", "c")
        ]
    )
    explicit: list = []
    needs_full_parse = needs_full_recursive_parse(Ide.INTELLIJ, explicit)
    assert needs_full_parse

    graph = build_project_graph(graph_parser(parser, executor), explicit, needs_full_parse)
    assert infer_ide(None, Ide.INTELLIJ, explicit, None) == Ide.INTELLIJ
    roots = resolve_roots(graph, explicit, INTELLIJ_PREDICATES.project_roots_predicate)
    assert [str(t) for t in roots] == ["//java/a:project", "//java/b:project", "//java/c:project"]


def test_missing_root_is_a_graph_construction_error(
    parser: InMemoryParser, executor: Executor
) -> None:
    targets_parser = graph_parser(parser, executor)
    project_graph = build_project_graph(targets_parser, [target("//app:lib")], False)
    with pytest.raises(GraphConstructionError):
        create_target_graph(
            targets_parser,
            project_graph,
            [target("//unrelated:lib")],
            XCODE_PREDICATES.associated_project_predicate,
            include_tests=False,
            include_dependencies_tests=False,
            needs_full_parse=False,
        )


def test_io_errors_are_graph_construction_errors(executor: Executor) -> None:
    class UnreadableParser(InMemoryParser):
        def build_target_graph(self, cell, spec, *, enable_profiling, executor):
            raise OSError("BUILD: permission denied")

    targets_parser = TargetGraphParser(UnreadableParser([]), Cell(), executor)
    with pytest.raises(BuildFileParseError, match="permission denied") as e:
        build_project_graph(targets_parser, [], True)
    assert isinstance(e.value.cause, OSError)
