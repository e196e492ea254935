"""A simulated, byte-addressed heap that can only grow."""
from __future__ import annotations

import mmap

from .config import MAX_HEAP_SIZE

HEAP_BASE = 0x800000000
WORD = 8


class HeapError(Exception):
    """Raised when the heap cannot grow or an access falls outside it."""


class SimulatedHeap:
    """A heap of at most ``max_size`` bytes with an sbrk-style break pointer.

    Storage is allocated lazily, so a very large reservation costs nothing
    until it is touched. Untouched bytes read as zero.
    """

    def __init__(self, max_size: int = MAX_HEAP_SIZE) -> None:
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        self.max_size = max_size
        self._base = HEAP_BASE
        self._brk = HEAP_BASE
        self._data = bytearray()

    def sbrk(self, incr: int) -> int:
        """Grow the heap by ``incr`` bytes and return the start of the new area."""
        if incr < 0:
            raise HeapError(
                f"sbrk failed.  Attempt to expand heap by negative value {incr}"
            )
        if self._brk + incr > self._base + self.max_size:
            needed = self._brk - self._base + incr
            raise HeapError(
                "sbrk failed. Ran out of memory.  "
                f"Would require heap size of {needed} ({needed:#x}) bytes"
            )
        old_brk = self._brk
        self._brk += incr
        return old_brk

    def reset_brk(self) -> None:
        """Move the break back to the start, leaving an empty heap."""
        self._brk = self._base

    def lo(self) -> int:
        """Address of the first heap byte."""
        return self._base

    def hi(self) -> int:
        """Address of the last heap byte."""
        return self._brk - 1

    def size(self) -> int:
        """Current heap size in bytes."""
        return self._brk - self._base

    def pagesize(self) -> int:
        """Page size of the system."""
        return mmap.PAGESIZE

    def _offset(self, addr: int, length: int) -> int:
        offset = addr - self._base
        if offset < 0 or offset + length > self.max_size:
            raise HeapError(f"Access of {length} bytes at {addr:#x} lies outside the heap")
        return offset

    def read(self, addr: int, length: int) -> int:
        """Read ``length`` (0..8) bytes, little-endian, zero-extended."""
        if not 0 <= length <= WORD:
            raise ValueError("length must be between 0 and 8")
        offset = self._offset(addr, length)
        chunk = bytes(self._data[offset:offset + length]).ljust(length, b"\0")
        return int.from_bytes(chunk, "little")

    def write(self, addr: int, value: int, length: int) -> None:
        """Write the low-order ``length`` (0..8) bytes of ``value``."""
        if not 0 <= length <= WORD:
            raise ValueError("length must be between 0 and 8")
        offset = self._offset(addr, length)
        end = offset + length
        if len(self._data) < end:
            self._data.extend(bytes(end - len(self._data)))
        value &= (1 << (8 * length)) - 1
        self._data[offset:end] = value.to_bytes(length, "little")

    def memcpy(self, dst: int, src: int, n: int) -> int:
        """Copy ``n`` bytes from ``src`` to ``dst`` a word at a time; return ``dst``."""
        whole = n - n % WORD
        for offset in range(0, whole, WORD):
            self.write(dst + offset, self.read(src + offset, WORD), WORD)
        if n % WORD:
            tail = n % WORD
            self.write(dst + whole, self.read(src + whole, tail), tail)
        return dst

    def memset(self, dst: int, c: int, n: int) -> int:
        """Set ``n`` bytes at ``dst`` to the low byte of ``c``; return ``dst``."""
        data = int.from_bytes(bytes([c & 0xFF]) * WORD, "little")
        whole = n - n % WORD
        for offset in range(0, whole, WORD):
            self.write(dst + offset, data, WORD)
        if n % WORD:
            self.write(dst + whole, data, n % WORD)
        return dst

    def probe(self, ptr: int, offset: int, count: int) -> str:
        """Describe ``count`` bytes at ``ptr + offset``, highest address first."""
        lo_addr = ptr + offset
        hi_addr = lo_addr + count - 1
        if lo_addr < self.lo():
            raise HeapError(
                f"Invalid probe.  Address {lo_addr:#x} is below start of heap"
            )
        if hi_addr > self.hi():
            raise HeapError(
                f"Invalid probe.  Address {lo_addr:#x} is beyond end of heap"
            )
        digits = "".join(
            f"{self.read(addr, 1):02x}" for addr in range(hi_addr, lo_addr - 1, -1)
        )
        return f"Bytes {hi_addr:#x}...{lo_addr:#x}: 0x{digits}"