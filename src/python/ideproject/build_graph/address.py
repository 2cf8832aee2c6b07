# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from ideproject.base.exceptions import BuildTargetParseError

BUILD_TARGET_PREFIX = "//"
FLAVOR_DELIMITER = "#"


@dataclass(frozen=True)
class Cell:
    """A named repository root that build targets are resolved against.

    The root cell of a repository has the empty name.
    """

    name: str = ""
    root: str = "."
    build_file_name: str = "BUILD"

    def __str__(self) -> str:
        return self.name or "<root cell>"


@dataclass(frozen=True, order=True)
class BuildTarget:
    """The unique identifier of a buildable unit: `cell//base/path:short_name#flavor1,flavor2`.

    Instances are immutable and totally ordered (by cell, then base path, short name and flavors),
    so they are safe to use as map keys and to sort for deterministic iteration.
    """

    cell: str
    base_path: str
    short_name: str
    flavors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.short_name:
            raise BuildTargetParseError(self._raw_spec(), "the short name must not be empty")
        if FLAVOR_DELIMITER in self.short_name or ":" in self.short_name:
            raise BuildTargetParseError(
                self._raw_spec(),
                f"the short name `{self.short_name}` contains a reserved character",
            )
        if self.base_path.startswith("/") or self.base_path.endswith("/"):
            raise BuildTargetParseError(
                self._raw_spec(), "the base path must not begin or end with a slash"
            )
        if ".." in self.base_path.split("/"):
            raise BuildTargetParseError(self._raw_spec(), "the base path must not contain `..`")
        # NB: Flavors are normalized so that `#a,b` and `#b,a` name the same target.
        object.__setattr__(self, "flavors", tuple(sorted(set(self.flavors))))
        if any(not flavor for flavor in self.flavors):
            raise BuildTargetParseError(self._raw_spec(), "flavors must not be empty")

    @classmethod
    def of(
        cls, base_path: str, short_name: str, *, cell: str = "", flavors: Iterable[str] = ()
    ) -> BuildTarget:
        return cls(cell=cell, base_path=base_path, short_name=short_name, flavors=tuple(flavors))

    @classmethod
    def parse(cls, spec: str, *, relative_to: str | None = None, cell: str = "") -> BuildTarget:
        """Parses a target spec.

        Accepted forms are `cell//base/path:name#flavors`, `//base/path:name`, `//base/path`
        (shorthand for `//base/path:path`), and `:name`, which requires `relative_to`.
        """
        if not spec:
            raise BuildTargetParseError(spec, "the spec must not be empty")

        body, _, flavor_str = spec.partition(FLAVOR_DELIMITER)
        flavors = tuple(flavor_str.split(",")) if flavor_str else ()
        if FLAVOR_DELIMITER in spec and not flavor_str:
            raise BuildTargetParseError(spec, "flavors must not be empty")

        if body.startswith(":"):
            if relative_to is None:
                raise BuildTargetParseError(
                    spec, "relative specs must be resolved against a base path"
                )
            base_path = relative_to.strip("/")
            short_name = body[1:]
        else:
            if BUILD_TARGET_PREFIX not in body:
                raise BuildTargetParseError(spec, f"expected a `{BUILD_TARGET_PREFIX}` prefix")
            cell_name, _, path_and_name = body.partition(BUILD_TARGET_PREFIX)
            cell = cell_name or cell
            base_path, colon, short_name = path_and_name.partition(":")
            if not colon:
                short_name = os.path.basename(base_path)
                if not short_name:
                    raise BuildTargetParseError(
                        spec, "a target at the repository root must name itself explicitly"
                    )

        if ":" in short_name:
            raise BuildTargetParseError(spec, "the spec contains more than one `:`")
        return cls(cell=cell, base_path=base_path, short_name=short_name, flavors=flavors)

    @property
    def base_path_with_slash(self) -> str:
        return f"{self.base_path}/" if self.base_path else ""

    @property
    def base_name(self) -> str:
        return f"{self.cell}{BUILD_TARGET_PREFIX}{self.base_path}"

    @property
    def unflavored(self) -> BuildTarget:
        if not self.flavors:
            return self
        return BuildTarget(cell=self.cell, base_path=self.base_path, short_name=self.short_name)

    def with_flavors(self, *flavors: str) -> BuildTarget:
        return BuildTarget(
            cell=self.cell,
            base_path=self.base_path,
            short_name=self.short_name,
            flavors=(*self.flavors, *flavors),
        )

    @property
    def spec(self) -> str:
        flavors = f"{FLAVOR_DELIMITER}{','.join(self.flavors)}" if self.flavors else ""
        return f"{self.base_name}:{self.short_name}{flavors}"

    def _raw_spec(self) -> str:
        return f"{self.cell}{BUILD_TARGET_PREFIX}{self.base_path}:{self.short_name}"

    def __str__(self) -> str:
        return self.spec
