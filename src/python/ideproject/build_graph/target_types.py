# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""The fixed vocabulary of target types, and the argument payloads the project generators read.

Argument payloads are the parsed keyword arguments of a declaration in a build file. Only the
fields that graph resolution and workspace generation consult are modeled; everything else a
declaration carries lives in `extra`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from ideproject.build_graph.address import BuildTarget
from ideproject.util.frozendict import FrozenDict


class BuildRuleType(Enum):
    APPLE_BINARY = "apple_binary"
    APPLE_BUNDLE = "apple_bundle"
    APPLE_LIBRARY = "apple_library"
    APPLE_RESOURCE = "apple_resource"
    APPLE_TEST = "apple_test"
    XCODE_WORKSPACE_CONFIG = "xcode_workspace_config"
    CXX_LIBRARY = "cxx_library"
    JAVA_BINARY = "java_binary"
    JAVA_LIBRARY = "java_library"
    JAVA_TEST = "java_test"
    ANDROID_BINARY = "android_binary"
    ANDROID_LIBRARY = "android_library"
    ANDROID_RESOURCE = "android_resource"
    ROBOLECTRIC_TEST = "robolectric_test"
    PROJECT_CONFIG = "project_config"
    GENRULE = "genrule"
    EXPORT_FILE = "export_file"

    @property
    def is_test_rule(self) -> bool:
        return self.value.endswith("_test")

    @classmethod
    def from_string(cls, value: str) -> BuildRuleType:
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown target type `{value}`. Known types: "
                + ", ".join(sorted(t.value for t in cls))
            )

    def __str__(self) -> str:
        return self.value


def _sorted_targets(targets: Iterable[BuildTarget]) -> tuple[BuildTarget, ...]:
    return tuple(sorted(set(targets)))


@dataclass(frozen=True)
class ConstructorArg:
    """The argument payload of a target declaration."""

    extra: FrozenDict[str, Any] = field(default_factory=FrozenDict)

    def referenced_targets(self) -> tuple[BuildTarget, ...]:
        """Every target this payload names outside of its declared `deps`."""
        return self.extra_deps()

    def extra_deps(self) -> tuple[BuildTarget, ...]:
        """The named targets that are dependencies even though they are not listed in `deps`.

        Tests are the exception: they depend on the code they exercise, not the other way round.
        """
        return ()


@dataclass(frozen=True)
class HasTests(ConstructorArg):
    """A payload that names the tests which exercise the declaring target."""

    tests: tuple[BuildTarget, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tests", _sorted_targets(self.tests))

    def referenced_targets(self) -> tuple[BuildTarget, ...]:
        return (*self.tests, *self.extra_deps())


@dataclass(frozen=True)
class HasSourceUnderTest(ConstructorArg):
    """A test payload that names the targets it exercises."""

    source_under_test: tuple[BuildTarget, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "source_under_test", _sorted_targets(self.source_under_test))

    def extra_deps(self) -> tuple[BuildTarget, ...]:
        return self.source_under_test


@dataclass(frozen=True)
class LibraryArg(HasTests):
    """Payload of apple/cxx/android libraries, binaries and bundles."""


@dataclass(frozen=True)
class JavaLibraryArg(HasTests):
    annotation_processors: tuple[str, ...] = ()


@dataclass(frozen=True)
class JavaTestArg(HasSourceUnderTest):
    pass


@dataclass(frozen=True)
class AppleTestArg(HasSourceUnderTest):
    """Payload of an `apple_test`.

    The bundle settings decide whether two tests may share a single test bundle.
    """

    info_plist: str | None = None
    test_host_app: BuildTarget | None = None
    configs: FrozenDict[str, FrozenDict[str, str]] = field(default_factory=FrozenDict)
    linker_flags: tuple[str, ...] = ()
    can_group: bool = False

    def extra_deps(self) -> tuple[BuildTarget, ...]:
        host = (self.test_host_app,) if self.test_host_app is not None else ()
        return (*self.source_under_test, *host)

    @property
    def bundle_settings(self) -> tuple[Any, ...]:
        return (self.info_plist, self.test_host_app, self.configs, self.linker_flags)


@dataclass(frozen=True)
class ProjectConfigArg(ConstructorArg):
    src_target: BuildTarget | None = None
    test_target: BuildTarget | None = None

    def extra_deps(self) -> tuple[BuildTarget, ...]:
        return tuple(t for t in (self.src_target, self.test_target) if t is not None)


class SchemeActionType(Enum):
    BUILD = "Build"
    LAUNCH = "Launch"
    TEST = "Test"
    PROFILE = "Profile"
    ANALYZE = "Analyze"
    ARCHIVE = "Archive"


@dataclass(frozen=True)
class XcodeWorkspaceConfigArg(ConstructorArg):
    """The workspace descriptor: what goes into one generated IDE workspace."""

    src_target: BuildTarget | None = None
    extra_targets: tuple[BuildTarget, ...] = ()
    extra_tests: tuple[BuildTarget, ...] = ()
    extra_schemes: FrozenDict[str, BuildTarget] = field(default_factory=FrozenDict)
    action_config_names: FrozenDict[SchemeActionType, str] = field(default_factory=FrozenDict)
    workspace_name: str | None = None
    is_remote_runnable: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra_targets", _sorted_targets(self.extra_targets))
        object.__setattr__(self, "extra_tests", _sorted_targets(self.extra_tests))
        object.__setattr__(
            self, "extra_schemes", FrozenDict(sorted(self.extra_schemes.items()))
        )

    @classmethod
    def implicit_for(cls, src_target: BuildTarget) -> XcodeWorkspaceConfigArg:
        """A workspace containing just `src_target` (and, downstream, its tests)."""
        return cls(src_target=src_target)

    def extra_deps(self) -> tuple[BuildTarget, ...]:
        src = (self.src_target,) if self.src_target is not None else ()
        return (*src, *self.extra_targets, *self.extra_tests, *self.extra_schemes.values())


# Workspace-style generation can wrap one of these in an implicit workspace.
IMPLICIT_WORKSPACE_TYPES = (
    BuildRuleType.APPLE_BINARY,
    BuildRuleType.APPLE_BUNDLE,
    BuildRuleType.APPLE_LIBRARY,
)


def can_generate_implicit_workspace_for_type(rule_type: BuildRuleType) -> bool:
    return rule_type in IMPLICIT_WORKSPACE_TYPES
