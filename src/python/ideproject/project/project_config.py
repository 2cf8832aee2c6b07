# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from ideproject.option.config import Config
from ideproject.option.errors import ConfigError
from ideproject.project.ide import Ide
from ideproject.util.strutil import comma_separated_list

PROJECT_SECTION = "project"
APPLE_SECTION = "apple"

# The options each section may contain. Anything else is rejected by `Config.verify`.
VALID_OPTIONS = {
    PROJECT_SECTION: (
        "ide",
        "read_only",
        "ide_prompt",
        "initial_targets",
        "force_build_with_external_tool_targets",
        "intellij_aggregation_mode",
        "concurrency_limit",
    ),
    APPLE_SECTION: ("use_header_maps_in_xcode_project",),
}

CONFIG_FILE_NAME = "ideproject.toml"
LOCAL_CONFIG_FILE_NAME = "ideproject.local.toml"


class AggregationMode(Enum):
    """How IntelliJ modules are merged into parent modules."""

    NONE = "none"
    SHALLOW = "shallow"
    AUTO = "auto"

    @classmethod
    def from_string(cls, value: str) -> AggregationMode:
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigError(
                f"Invalid intellij_aggregation_mode {value}. Expected one of: "
                f"{comma_separated_list((m.value for m in cls), 'or')}."
            )


@dataclass(frozen=True)
class ProjectConfig:
    ide: Ide | None = None
    read_only: bool = False
    ide_prompt: bool = True
    initial_targets: tuple[str, ...] = ()
    force_build_with_external_tool_targets: tuple[str, ...] = ()
    intellij_aggregation_mode: AggregationMode = AggregationMode.NONE
    concurrency_limit: int = os.cpu_count() or 1
    use_header_maps_in_xcode_project: bool = True

    @classmethod
    def from_config(cls, config: Config) -> ProjectConfig:
        config.verify(VALID_OPTIONS)
        ide = config.get_str(PROJECT_SECTION, "ide")
        aggregation_mode = config.get_str(PROJECT_SECTION, "intellij_aggregation_mode")
        concurrency_limit = config.get_int(PROJECT_SECTION, "concurrency_limit")
        if concurrency_limit is not None and concurrency_limit < 1:
            raise ConfigError(
                f"concurrency_limit under [{PROJECT_SECTION}] must be at least 1, got "
                f"{concurrency_limit}."
            )
        return cls(
            ide=Ide.from_string(ide) if ide else None,
            read_only=config.get_bool(PROJECT_SECTION, "read_only", cls.read_only),
            ide_prompt=config.get_bool(PROJECT_SECTION, "ide_prompt", cls.ide_prompt),
            initial_targets=config.get_str_list(PROJECT_SECTION, "initial_targets"),
            force_build_with_external_tool_targets=config.get_str_list(
                PROJECT_SECTION, "force_build_with_external_tool_targets"
            ),
            intellij_aggregation_mode=(
                AggregationMode.from_string(aggregation_mode)
                if aggregation_mode
                else cls.intellij_aggregation_mode
            ),
            concurrency_limit=concurrency_limit or cls.concurrency_limit,
            use_header_maps_in_xcode_project=config.get_bool(
                APPLE_SECTION,
                "use_header_maps_in_xcode_project",
                cls.use_header_maps_in_xcode_project,
            ),
        )

    @classmethod
    def load(cls, buildroot: str) -> ProjectConfig:
        """Reads the repository config, then the uncommitted local overrides, if present."""
        return cls.from_config(
            Config.load_files(
                [
                    os.path.join(buildroot, CONFIG_FILE_NAME),
                    os.path.join(buildroot, LOCAL_CONFIG_FILE_NAME),
                ]
            )
        )
