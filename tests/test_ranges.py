import pytest

from syslab.memlib import SimulatedHeap
from syslab.ranges import Range, RangeError, RangeSet


@pytest.fixture
def heap():
    h = SimulatedHeap(1 << 20)
    h.sbrk(4096)
    return h


def test_add_records_range(heap):
    ranges = RangeSet()
    lo = heap.lo() + 64
    ranges.add(lo, 32, heap, 0)
    assert list(ranges) == [Range(lo, lo + 31, 0)]
    assert len(ranges) == 1


def test_iteration_in_address_order(heap):
    ranges = RangeSet()
    base = heap.lo()
    ranges.add(base + 256, 16, heap, 2)
    ranges.add(base, 16, heap, 0)
    ranges.add(base + 128, 16, heap, 1)
    assert [r.index for r in ranges] == [0, 1, 2]
    los = [r.lo for r in ranges]
    assert los == sorted(los)


def test_misaligned_payload(heap):
    ranges = RangeSet()
    with pytest.raises(RangeError, match="not aligned to 16 bytes"):
        ranges.add(heap.lo() + 8, 16, heap, 0)
    assert len(ranges) == 0


def test_payload_outside_heap(heap):
    ranges = RangeSet()
    with pytest.raises(RangeError, match="lies outside heap"):
        ranges.add(heap.hi() - 15, 32, heap, 0)


def test_payload_below_heap(heap):
    ranges = RangeSet()
    with pytest.raises(RangeError, match="lies outside heap"):
        ranges.add(heap.lo() - 16, 16, heap, 0)


def test_overlap_with_previous(heap):
    ranges = RangeSet()
    base = heap.lo()
    ranges.add(base, 48, heap, 0)
    with pytest.raises(RangeError, match="overlaps another payload"):
        ranges.add(base + 32, 16, heap, 1)
    assert len(ranges) == 1


def test_overlap_with_next(heap):
    ranges = RangeSet()
    base = heap.lo()
    ranges.add(base + 64, 16, heap, 0)
    with pytest.raises(RangeError, match="overlaps another payload"):
        ranges.add(base + 32, 48, heap, 1)


def test_same_start_overlaps(heap):
    ranges = RangeSet()
    ranges.add(heap.lo(), 16, heap, 0)
    with pytest.raises(RangeError):
        ranges.add(heap.lo(), 16, heap, 1)


def test_adjacent_ranges_allowed(heap):
    ranges = RangeSet()
    base = heap.lo()
    ranges.add(base, 16, heap, 0)
    ranges.add(base + 16, 16, heap, 1)
    assert len(ranges) == 2


def test_without_overlap_check_nothing_recorded(heap):
    ranges = RangeSet()
    ranges.add(heap.lo(), 16, heap, 0, check_overlap=False)
    assert len(ranges) == 0
    with pytest.raises(RangeError, match="not aligned"):
        ranges.add(heap.lo() + 4, 16, heap, 0, check_overlap=False)


def test_zero_size_rejected(heap):
    with pytest.raises(ValueError):
        RangeSet().add(heap.lo(), 0, heap, 0)


def test_remove_and_readd(heap):
    ranges = RangeSet()
    base = heap.lo()
    ranges.add(base, 32, heap, 0)
    ranges.add(base + 64, 32, heap, 1)
    ranges.remove(base)
    assert [r.index for r in ranges] == [1]
    ranges.add(base, 32, heap, 2)
    assert [r.index for r in ranges] == [2, 1]


def test_remove_unknown_is_ignored(heap):
    ranges = RangeSet()
    ranges.add(heap.lo(), 16, heap, 0)
    ranges.remove(heap.lo() + 512)
    ranges.remove(None)
    assert len(ranges) == 1


def test_reset(heap):
    ranges = RangeSet()
    ranges.add(heap.lo(), 16, heap, 0)
    ranges.add(heap.lo() + 32, 16, heap, 1)
    ranges.reset()
    assert len(ranges) == 0
    assert list(ranges) == []