# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Compute-once helpers that are safe to share between threads."""

from __future__ import annotations

import functools
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Generic, Hashable, Iterator, Mapping, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")
V = TypeVar("V")


def memoized_supplier(factory: Callable[[], T]) -> Callable[[], T]:
    """Returns a no-arg callable that invokes `factory` on first use and then returns that value.

    Concurrent first callers block on a lock, so the factory never runs twice. A factory that
    raises is retried by the next caller.
    """
    lock = threading.Lock()
    box: list[T] = []

    @functools.wraps(factory)
    def supplier() -> T:
        if box:
            return box[0]
        with lock:
            if not box:
                box.append(factory())
            return box[0]

    return supplier


class SingleFlightMap(Generic[K, V]):
    """A thread-safe map whose missing entries are computed at most once at a time.

    When several threads ask for the same missing key, the first one computes it and the rest
    wait on a Future for that result. A failed computation reaches every waiter and leaves no
    entry behind, so the next request computes again. Entries are never replaced or removed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[K, V] = {}
        self._in_flight: dict[K, Future[V]] = {}

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> tuple[V, bool]:
        """Returns the value for `key` and whether this call computed it."""
        with self._lock:
            if key in self._values:
                return self._values[key], False
            future = self._in_flight.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._in_flight[key] = future

        if not owner:
            return future.result(), False

        try:
            value = compute()
        except BaseException as e:
            with self._lock:
                del self._in_flight[key]
            future.set_exception(e)
            raise

        with self._lock:
            self._values[key] = value
            del self._in_flight[key]
        future.set_result(value)
        return value, True

    def get_if_present(self, key: K) -> V | None:
        with self._lock:
            return self._values.get(key)

    def snapshot(self) -> Mapping[K, V]:
        with self._lock:
            return dict(self._values)

    def __contains__(self, key: Any) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __iter__(self) -> Iterator[K]:
        with self._lock:
            return iter(tuple(self._values))


class LoadingCache(SingleFlightMap[K, V]):
    """A SingleFlightMap whose entries all come from one loader function."""

    def __init__(self, loader: Callable[[K], V], *, name: str | None = None) -> None:
        super().__init__()
        self._loader = loader
        self._name = name or getattr(loader, "__name__", "loader")
        self._load_count = 0

    @property
    def load_count(self) -> int:
        """The number of times the loader has been invoked."""
        return self._load_count

    def get(self, key: K) -> V:
        value, _ = self.get_or_compute(key, lambda: self._load(key))
        return value

    def _load(self, key: K) -> V:
        with self._lock:
            self._load_count += 1
        logger.debug(f"{self._name}: loading {key}")
        return self._loader(key)
