"""Growable array with chunked, element-counted capacity.

Large trees produce millions of records, so capacity grows in fixed chunks
rather than one slot at a time. The number of growth events is tracked so
callers can log it.
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Callable, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GrowableArray(Generic[T]):
    """Ordered container whose size never exceeds its capacity."""

    def __init__(self, initial_capacity: int, chunk_size: int) -> None:
        if initial_capacity <= 0:
            raise ValueError(f"Invalid initial_capacity: {initial_capacity}. Must be >= 1.")
        if chunk_size <= 0:
            raise ValueError(f"Invalid chunk_size: {chunk_size}. Must be >= 1.")
        self.chunk_size = chunk_size
        self._slots: list[T | None] = [None] * initial_capacity
        self._size = 0
        self.grow_events = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[T]:
        return islice(self._slots, self._size)  # type: ignore[return-value]

    def __getitem__(self, index: int) -> T:
        if index < 0:
            index += self._size
        if index < 0 or index >= self._size:
            raise IndexError(f"index {index} out of range for size {self._size}")
        return self._slots[index]  # type: ignore[return-value]

    def append(self, item: T) -> None:
        if self._size >= len(self._slots):
            self._grow()
        self._slots[self._size] = item
        self._size += 1

    def _grow(self) -> None:
        old = len(self._slots)
        self._slots.extend([None] * self.chunk_size)
        self.grow_events += 1
        logger.debug(f"Growing array from {old} to {len(self._slots)} slots")

    def sort(self, key: Callable[[T], Any], reverse: bool = False) -> None:
        live = self._slots[: self._size]
        live.sort(key=key, reverse=reverse)  # type: ignore[arg-type]
        self._slots[: self._size] = live

    def clear(self) -> None:
        """Release every item; capacity is kept."""
        for i in range(self._size):
            self._slots[i] = None
        self._size = 0
