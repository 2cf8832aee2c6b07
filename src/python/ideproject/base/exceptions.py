# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ideproject.util.strutil import bullet_list, comma_separated_list, softwrap

if TYPE_CHECKING:
    from ideproject.build_graph.address import BuildTarget


class IdeProjectException(Exception):
    """Base exception type for project generation."""


class HumanReadableException(IdeProjectException):
    """An error whose message is fit to be shown to the user as-is, without a stack trace."""


# -----------------------------------------------------------------------
# Configuration errors
# -----------------------------------------------------------------------


class ConfigurationError(HumanReadableException):
    """A user-facing, non-retryable problem with the requested IDE, targets or config."""


class InvalidIdeError(ConfigurationError):
    def __init__(self, value: str, known: Iterable[str]) -> None:
        super().__init__(
            f"Invalid ide value {value}. Expected one of: {comma_separated_list(known, 'or')}."
        )


class MissingIdeError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__(
            "Please specify ide using the --ide option or set `ide` in the [project] section of "
            "your config."
        )


class MixedIdeTargetsError(ConfigurationError):
    def __init__(self, passed_targets: Iterable[BuildTarget]) -> None:
        targets = ", ".join(str(t) for t in passed_targets)
        super().__init__(
            softwrap(
                f"""
                Passed targets ({targets}) contain both Xcode and IntelliJ projects.

                Can't choose an IDE from this mixed set. Please pass only Xcode targets or only
                IntelliJ targets.
                """
            )
        )


class UnsupportedWorkspaceRootError(ConfigurationError):
    def __init__(self, node: object, allowed_types: Iterable[str]) -> None:
        super().__init__(f"{node} must be a {comma_separated_list(allowed_types, 'or')}")


# -----------------------------------------------------------------------
# Graph construction errors
# -----------------------------------------------------------------------


class GraphConstructionError(HumanReadableException):
    """Building or querying a target graph failed.

    Carries the offending identifier (when one is known) and the underlying cause.
    """

    def __init__(
        self,
        message: str,
        *,
        build_target: BuildTarget | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.build_target = build_target
        self.cause = cause


class BuildTargetParseError(GraphConstructionError):
    """A target spec could not be resolved to a cell, base path and name."""

    def __init__(self, spec: str, reason: str) -> None:
        super().__init__(f"Unable to parse build target `{spec}`: {reason}", build_target=spec)


class BuildFileParseError(GraphConstructionError):
    """A build file contained a malformed declaration."""


class NoSuchTargetError(GraphConstructionError):
    """A target was looked up in a graph that does not contain it."""

    def __init__(self, graph: object, build_target: BuildTarget) -> None:
        super().__init__(
            f"{graph} doesn't contain build target {build_target}", build_target=build_target
        )


class DuplicateTargetDeclarationError(GraphConstructionError):
    """One build target was declared twice with different contents."""

    def __init__(self, build_target: BuildTarget, existing: object, duplicate: object) -> None:
        super().__init__(
            f"Two different declarations for {build_target}:\n\n"
            + bullet_list([str(existing), str(duplicate)]),
            build_target=build_target,
        )


class UnresolvableDependencyError(GraphConstructionError):
    def __init__(self, dependent: BuildTarget, missing: Iterable[BuildTarget]) -> None:
        missing = tuple(missing)
        super().__init__(
            f"{dependent} depends on targets that are not part of the target graph:\n\n"
            + bullet_list(str(m) for m in missing),
            build_target=missing[0] if missing else dependent,
        )
        self.dependent = dependent
        self.missing = missing


class CycleException(GraphConstructionError):
    """Thrown when a circular dependency is detected."""

    def __init__(self, subject: BuildTarget, path: tuple[BuildTarget, ...]) -> None:
        path_string = "\n".join((f"-> {a}" if a == subject else f"   {a}") for a in path)
        super().__init__(
            f"The dependency graph contained a cycle:\n{path_string}", build_target=subject
        )
        self.subject = subject
        self.path = path


# -----------------------------------------------------------------------
# Action graph errors
# -----------------------------------------------------------------------


class NoSuchBuildRuleError(IdeProjectException):
    def __init__(self, build_target: BuildTarget) -> None:
        super().__init__(f"Rule for target '{build_target}' could not be resolved.")
        self.build_target = build_target


class DuplicateBuildRuleError(IdeProjectException):
    def __init__(self, build_target: BuildTarget) -> None:
        super().__init__(f"Multiple build rules registered for target '{build_target}'.")
        self.build_target = build_target
