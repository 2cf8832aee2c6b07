# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

"""Sets of targets that iterate in first-insertion order.

`OrderedSet` is for accumulating inside one function; `FrozenOrderedSet` is what gets returned.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")
S = TypeVar("S", bound="_OrderedItems")


class _OrderedItems(Generic[T]):
    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: dict[T, None] = dict.fromkeys(items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        contents = repr(list(self._items)) if self._items else ""
        return f"{type(self).__name__}({contents})"

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return list(self._items) == list(other._items)

    def union(self: S, *others: Iterable[T]) -> S:
        """Everything in this set followed by whatever the others add, in order of first sight."""
        merged = dict(self._items)
        for other in others:
            merged.update(dict.fromkeys(other))
        return type(self)(merged)

    def __sub__(self: S, other: Iterable[T]) -> S:
        excluded = set(other)
        return type(self)(item for item in self._items if item not in excluded)

    def issubset(self, other: Iterable[T]) -> bool:
        container = other if isinstance(other, (set, frozenset, _OrderedItems)) else set(other)
        return all(item in container for item in self._items)


class OrderedSet(_OrderedItems[T]):
    def add(self, item: T) -> None:
        self._items[item] = None

    def update(self, items: Iterable[T]) -> None:
        self._items.update(dict.fromkeys(items))

    def discard(self, item: T) -> None:
        self._items.pop(item, None)


class FrozenOrderedSet(_OrderedItems[T]):
    """An immutable OrderedSet, usable as a dict key or a dataclass field."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        super().__init__(items)
        self._hash: int | None = None

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._items))
        return self._hash
