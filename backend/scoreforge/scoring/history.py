"""Bounded undo history for the live scoring engine."""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterable, Iterator, Optional, TypeVar

from .errors import NothingToUndo

HISTORY_DEPTH = 10

T = TypeVar("T")


class HistoryRing(Generic[T]):
    """Fixed-capacity stack of snapshots; the oldest entry is evicted first."""

    def __init__(self, items: Iterable[T] = (), maxlen: int = HISTORY_DEPTH) -> None:
        self._items: deque[T] = deque(items, maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        assert self._items.maxlen is not None
        return self._items.maxlen

    def push(self, item: T) -> None:
        self._items.append(item)

    def pop(self) -> T:
        if not self._items:
            raise NothingToUndo()
        return self._items.pop()

    def peek(self) -> Optional[T]:
        return self._items[-1] if self._items else None

    def to_list(self) -> list[T]:
        return list(self._items)

    @classmethod
    def from_list(cls, items: Iterable[T], maxlen: int = HISTORY_DEPTH) -> "HistoryRing[T]":
        """Rebuild a ring; when ``items`` is longer than ``maxlen`` only the newest survive."""

        return cls(items, maxlen=maxlen)

    def copy(self) -> "HistoryRing[T]":
        # Entries are immutable snapshots, so a shallow copy is enough.
        return HistoryRing(self._items, maxlen=self.maxlen)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"HistoryRing(len={len(self)}, maxlen={self.maxlen})"
