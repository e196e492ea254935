import pytest

from syslab.memlib import HeapError, SimulatedHeap


@pytest.fixture
def heap():
    return SimulatedHeap(max_size=4096)


def test_new_heap_is_empty(heap):
    assert heap.size() == 0
    assert heap.hi() == heap.lo() - 1


def test_sbrk_returns_old_break(heap):
    first = heap.sbrk(32)
    second = heap.sbrk(64)
    assert first == heap.lo()
    assert second == first + 32
    assert heap.size() == 96
    assert heap.hi() == heap.lo() + 95


def test_sbrk_negative_raises(heap):
    with pytest.raises(HeapError):
        heap.sbrk(-1)
    assert heap.size() == 0


def test_sbrk_beyond_limit_raises(heap):
    heap.sbrk(4000)
    with pytest.raises(HeapError):
        heap.sbrk(100)
    assert heap.size() == 4000


def test_sbrk_up_to_limit_is_allowed(heap):
    heap.sbrk(4096)
    assert heap.size() == 4096


def test_reset_brk_empties_heap(heap):
    heap.sbrk(128)
    heap.reset_brk()
    assert heap.size() == 0
    assert heap.sbrk(16) == heap.lo()


def test_pagesize_is_power_of_two(heap):
    size = heap.pagesize()
    assert size > 0
    assert size & (size - 1) == 0


def test_write_read_round_trip(heap):
    base = heap.sbrk(64)
    value = 0x1122334455667788
    heap.write(base, value, 8)
    assert heap.read(base, 8) == value
    assert heap.read(base, 1) == value & 0xFF
    assert heap.read(base, 2) == value & 0xFFFF
    assert heap.read(base + 7, 1) == value >> 56


def test_write_truncates_to_length(heap):
    base = heap.sbrk(16)
    heap.write(base, 0xABCD, 1)
    assert heap.read(base, 2) == 0xCD


def test_untouched_memory_reads_zero(heap):
    base = heap.sbrk(32)
    assert heap.read(base + 16, 8) == 0


def test_read_outside_heap_raises(heap):
    with pytest.raises(HeapError):
        heap.read(heap.lo() - 1, 1)
    with pytest.raises(HeapError):
        heap.write(heap.lo() + 4096, 1, 1)


def test_bad_length_raises(heap):
    with pytest.raises(ValueError):
        heap.read(heap.lo(), 9)


def test_memcpy_copies_bytes(heap):
    base = heap.sbrk(64)
    for offset, byte in enumerate(b"hello, world!"):
        heap.write(base + offset, byte, 1)
    assert heap.memcpy(base + 32, base, 13) == base + 32
    copied = bytes(heap.read(base + 32 + i, 1) for i in range(13))
    assert copied == b"hello, world!"
    assert heap.read(base + 45, 1) == 0


def test_memset_fills_bytes(heap):
    base = heap.sbrk(32)
    assert heap.memset(base, 0x141, 11) == base
    assert heap.read(base, 8) == int.from_bytes(b"A" * 8, "little")
    assert heap.read(base + 8, 3) == int.from_bytes(b"AAA", "little")
    assert heap.read(base + 11, 1) == 0


def test_probe_lists_bytes_high_first(heap):
    base = heap.sbrk(16)
    heap.write(base, 0x01, 1)
    heap.write(base + 1, 0x02, 1)
    text = heap.probe(base, 0, 2)
    assert text.startswith(f"Bytes {base + 1:#x}...{base:#x}: ")
    assert text.endswith(": 0x0201")


def test_probe_outside_heap_raises(heap):
    base = heap.sbrk(16)
    with pytest.raises(HeapError):
        heap.probe(base, -1, 2)
    with pytest.raises(HeapError):
        heap.probe(base, 10, 8)