"""Extents of allocated payloads, used to detect misplaced or overlapping blocks."""
from __future__ import annotations

import bisect
from collections.abc import Iterator
from dataclasses import dataclass

from .config import ALIGNMENT
from .memlib import SimulatedHeap


class RangeError(Exception):
    """Raised when a payload is misaligned, outside the heap, or overlaps another."""


@dataclass(frozen=True)
class Range:
    """Payload from ``lo`` to ``hi`` inclusive, belonging to block ``index``."""

    lo: int
    hi: int
    index: int


class RangeSet:
    """Payload ranges kept in address order."""

    def __init__(self) -> None:
        self._keys: list[int] = []
        self._ranges: dict[int, Range] = {}

    def add(
        self,
        lo: int,
        size: int,
        heap: SimulatedHeap,
        index: int,
        check_overlap: bool = True,
    ) -> None:
        """Check the payload at ``lo`` and, if overlap checking is on, record it."""
        if size <= 0:
            raise ValueError("size must be positive")
        hi = lo + size - 1

        if lo % ALIGNMENT != 0:
            raise RangeError(
                f"Payload address ({lo:#x}) not aligned to {ALIGNMENT} bytes"
            )

        heap_lo, heap_hi = heap.lo(), heap.hi()
        if lo < heap_lo or lo > heap_hi or hi < heap_lo or hi > heap_hi:
            raise RangeError(
                f"Payload ({lo:#x}:{hi:#x}) lies outside heap ({heap_lo:#x}:{heap_hi:#x})"
            )

        if not check_overlap:
            return

        position = bisect.bisect_right(self._keys, lo)
        if position > 0:
            prev = self._ranges[self._keys[position - 1]]
            if lo <= prev.hi:
                raise RangeError(
                    f"Payload ({lo:#x}:{hi:#x}) overlaps another payload "
                    f"({prev.lo:#x}:{prev.hi:#x})"
                )
        if position < len(self._keys):
            nxt = self._ranges[self._keys[position]]
            if hi >= nxt.lo:
                raise RangeError(
                    f"Payload ({lo:#x}:{hi:#x}) overlaps another payload "
                    f"({nxt.lo:#x}:{nxt.hi:#x})"
                )

        self._keys.insert(position, lo)
        self._ranges[lo] = Range(lo, hi, index)

    def remove(self, lo: int | None) -> None:
        """Forget the range starting at ``lo``; unknown addresses are ignored."""
        if lo is None or self._ranges.pop(lo, None) is None:
            return
        del self._keys[bisect.bisect_left(self._keys, lo)]

    def reset(self) -> None:
        """Forget every range."""
        self._keys.clear()
        self._ranges.clear()

    def __iter__(self) -> Iterator[Range]:
        return (self._ranges[key] for key in list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)