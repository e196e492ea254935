import pytest

from syslab.config import ThroughputTargets, throughput_targets


def test_zero_reference_gives_zero_targets():
    targets = throughput_targets(0.0)
    assert targets == ThroughputTargets(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


def test_reference_is_kept():
    assert throughput_targets(12345.0).reference == 12345.0


@pytest.mark.parametrize("ref", [1.0, 500.0, 20000.0])
def test_targets_are_ordered(ref):
    targets = throughput_targets(ref)
    assert targets.min_checkpoint <= targets.max_checkpoint
    assert targets.req_checkpoint <= targets.max_checkpoint
    assert targets.req <= targets.min <= targets.max
    assert targets.max < targets.reference


def test_targets_scale_linearly():
    one = throughput_targets(1000.0)
    two = throughput_targets(2000.0)
    assert two.max == pytest.approx(2 * one.max)
    assert two.min == pytest.approx(2 * one.min)
    assert two.max_checkpoint == pytest.approx(2 * one.max_checkpoint)
    assert two.req == pytest.approx(2 * one.req)