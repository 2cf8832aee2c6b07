# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from pathlib import Path

import pytest

from ideproject.option.config import Config, FileContent
from ideproject.option.errors import ConfigError, ConfigValidationError, OptionTypeError

_REPO_CONFIG = b"""\
[project]
ide = "xcode"
read_only = false
initial_targets = "//app:app  //lib:lib"
concurrency_limit = 4

[apple]
use_header_maps_in_xcode_project = true
"""

_LOCAL_CONFIG = b"""\
[project]
read_only = true
initial_targets = ["//tools:tools"]
"""


@pytest.fixture
def config() -> Config:
    return Config.load(
        [
            FileContent("ideproject.toml", _REPO_CONFIG),
            FileContent("ideproject.local.toml", _LOCAL_CONFIG),
        ]
    )


def test_later_files_win(config: Config) -> None:
    assert config.get("project", "read_only") == [False, True]
    assert config.get_bool("project", "read_only", False) is True
    assert config.get_str("project", "ide") == "xcode"
    assert config.get_str_list("project", "initial_targets") == ("//tools:tools",)
    assert config.sources() == ["ideproject.toml", "ideproject.local.toml"]


def test_defaults(config: Config) -> None:
    assert config.get_bool("project", "ide_prompt", True) is True
    assert config.get_str("project", "missing") is None
    assert config.get_last("missing_section", "missing", "default") == "default"
    assert config.get_str_list("project", "force_build_with_external_tool_targets") == ()
    assert Config.empty().get_int("project", "concurrency_limit", 8) == 8


def test_space_separated_list() -> None:
    config = Config.load([FileContent("ideproject.toml", _REPO_CONFIG)])
    assert config.get_str_list("project", "initial_targets") == ("//app:app", "//lib:lib")


def test_type_errors(config: Config) -> None:
    with pytest.raises(OptionTypeError, match="must be a boolean"):
        config.get_bool("project", "ide", False)
    with pytest.raises(OptionTypeError, match="ideproject.local.toml"):
        config.get_int("project", "read_only")
    assert config.get_int("project", "concurrency_limit") == 4


def test_malformed_toml() -> None:
    with pytest.raises(ConfigError, match="could not be parsed as TOML"):
        Config.load([FileContent("broken.toml", b"[project\nide = ")])


def test_verify(config: Config, caplog) -> None:
    config.verify(
        {
            "project": ["ide", "read_only", "initial_targets", "concurrency_limit"],
            "apple": ["use_header_maps_in_xcode_project"],
        }
    )

    with pytest.raises(ConfigValidationError):
        config.verify({"project": ["ide"]})
    messages = [record.getMessage() for record in caplog.records]
    assert "Invalid section [apple] in ideproject.toml" in messages
    assert "Invalid option 'read_only' under [project] in ideproject.local.toml" in messages


def test_load_files_skips_missing(tmp_path: Path) -> None:
    present = tmp_path / "ideproject.toml"
    present.write_bytes(_LOCAL_CONFIG)
    config = Config.load_files([str(present), str(tmp_path / "ideproject.local.toml")])
    assert config.sources() == [str(present)]
    assert config.get_bool("project", "read_only", False) is True
