# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import toml
from typing_extensions import Protocol

from ideproject.option.errors import ConfigError, ConfigValidationError, OptionTypeError
from ideproject.util.strutil import softwrap

logger = logging.getLogger(__name__)


class ConfigSource(Protocol):
    """Anything with a path and raw TOML content, e.g. a file read during bootstrapping."""

    @property
    def path(self) -> str:
        raise NotImplementedError()

    @property
    def content(self) -> bytes:
        raise NotImplementedError()


@dataclass(frozen=True)
class FileContent:
    path: str
    content: bytes

    @classmethod
    def read(cls, path: str) -> FileContent:
        with open(path, "rb") as fp:
            return cls(path, fp.read())


@dataclass(frozen=True, eq=False)
class Config:
    """Encapsulates config file loading and access across multiple config files.

    Later files override earlier ones, one option at a time.
    """

    values: tuple[_ConfigValues, ...]

    @classmethod
    def load(cls, file_contents: Iterable[ConfigSource]) -> Config:
        """Loads config from the given string payloads, with later payloads overriding earlier
        ones."""
        config_values = []
        for file_content in file_contents:
            try:
                toml_values = toml.loads(file_content.content.decode())
            except (toml.TomlDecodeError, UnicodeDecodeError) as e:
                raise ConfigError(
                    f"Config file {file_content.path} could not be parsed as TOML:\n  {e}"
                ) from e
            config_values.append(_ConfigValues(file_content.path, toml_values))
        return cls(tuple(config_values))

    @classmethod
    def load_files(cls, paths: Iterable[str]) -> Config:
        """Loads the config files that exist among `paths`, silently skipping missing ones."""
        existing = [p for p in paths if os.path.isfile(p)]
        logger.debug(f"Loading config from {existing}")
        return cls.load(FileContent.read(p) for p in existing)

    @classmethod
    def empty(cls) -> Config:
        return cls(())

    def verify(self, section_to_valid_options: Mapping[str, Iterable[str]]) -> None:
        valid = {section: set(options) for section, options in section_to_valid_options.items()}
        error_log = []
        for config_values in self.values:
            error_log.extend(config_values.get_verification_errors(valid))
        if error_log:
            for error in error_log:
                logger.error(error)
            raise ConfigValidationError(
                softwrap(
                    """
                    Invalid config entries detected. See log for details on which entries to update
                    or remove.
                    """
                )
            )

    def get(self, section: str, option: str) -> list[Any]:
        """Retrieves an option value from each config file in which it appears."""
        return [
            vals.get_value(section, option)
            for vals in self.values
            if vals.has_option(section, option)
        ]

    def get_last(self, section: str, option: str, default: Any = None) -> Any:
        """The value with the highest precedence, or `default` if no file sets it."""
        available = self.get(section, option)
        return available[-1] if available else default

    def get_bool(self, section: str, option: str, default: bool) -> bool:
        return self._get_typed(section, option, default, bool, "a boolean")

    def get_str(self, section: str, option: str, default: str | None = None) -> str | None:
        return self._get_typed(section, option, default, str, "a string")

    def get_int(self, section: str, option: str, default: int | None = None) -> int | None:
        return self._get_typed(section, option, default, int, "an integer")

    def get_str_list(self, section: str, option: str) -> tuple[str, ...]:
        """A list option, given either as a TOML array or as a space-separated string."""
        value = self.get_last(section, option)
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(v.strip() for v in value.split(" ") if v.strip())
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return tuple(value)
        raise OptionTypeError(
            section, option, "a list of strings", value, self._source(section, option)
        )

    def sources(self) -> list[str]:
        return [vals.path for vals in self.values]

    def _get_typed(self, section: str, option: str, default: Any, typ: type, expected: str) -> Any:
        value = self.get_last(section, option)
        if value is None:
            return default
        # NB: `bool` is a subclass of `int`, which must not be accepted for integer options.
        if not isinstance(value, typ) or (typ is int and isinstance(value, bool)):
            raise OptionTypeError(section, option, expected, value, self._source(section, option))
        return value

    def _source(self, section: str, option: str) -> str:
        for vals in reversed(self.values):
            if vals.has_option(section, option):
                return vals.path
        return "<unknown>"


@dataclass(frozen=True)
class _ConfigValues:
    """The parsed contents of a TOML config file."""

    path: str
    section_to_values: dict[str, dict[str, Any]]

    def has_option(self, section: str, option: str) -> bool:
        return option in self.section_to_values.get(section, {})

    def get_value(self, section: str, option: str) -> Any:
        return self.section_to_values.get(section, {}).get(option)

    def get_verification_errors(self, section_to_valid_options: dict[str, set[str]]) -> list[str]:
        error_log = []
        for section, vals in self.section_to_values.items():
            valid_options_in_section = section_to_valid_options.get(section)
            if valid_options_in_section is None:
                error_log.append(f"Invalid section [{section}] in {self.path}")
                continue
            for option in sorted(set(vals.keys()) - valid_options_in_section):
                error_log.append(f"Invalid option '{option}' under [{section}] in {self.path}")
        return error_log
