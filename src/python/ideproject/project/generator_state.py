# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from ideproject.util.memo import SingleFlightMap

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GeneratorState(SingleFlightMap[str, T]):
    """Projects already generated during one materialization, keyed by their output path.

    The state is shared by the generators of every root, so a dependency project needed by several
    roots is generated by whichever asks first and reused by the rest.
    """

    def get_or_generate(self, path: str, generate: Callable[[], T]) -> tuple[T, bool]:
        """Returns the project at `path`, generating it first if nobody has yet.

        The second element is True only for the single caller that ran `generate`. If `generate`
        fails, its error reaches every concurrent caller for `path` and nothing is recorded.
        """
        project, created = self.get_or_compute(path, generate)
        if created:
            logger.debug(f"Generated project {path}")
        return project, created

    def get(self, path: str) -> T | None:
        return self.get_if_present(path)
