# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from ideproject.base.exceptions import ConfigurationError


class OptionsError(ConfigurationError):
    """An options system-related error."""


class ConfigError(OptionsError):
    """An error encountered while parsing a config file."""


class ConfigValidationError(ConfigError):
    """A config file is invalid."""


class OptionTypeError(ConfigError):
    def __init__(self, section: str, option: str, expected: str, value: object, path: str) -> None:
        super().__init__(
            f"Option `{option}` under [{section}] in {path} must be {expected}, got {value!r}."
        )
