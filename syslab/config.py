"""Settings for the allocator driver: default traces, grading thresholds and heap limits."""
from __future__ import annotations

from dataclasses import dataclass

TRACEDIR = "./traces/"

_TRACE_STEMS = """
    syn-example-short syn-array-short syn-struct-short syn-string-short
    syn-mix-short syn-largemem-short ngram-fox1 syn-mix-realloc
    bdd-aa4 bdd-aa32 bdd-ma4 bdd-nq7
    cbit-abs cbit-parity cbit-satadd cbit-xyz
    ngram-gulliver1 ngram-gulliver2 ngram-moby1 ngram-shake1
    syn-array syn-mix syn-string syn-struct
"""

# Traces run when none is named on the command line, in this order.
DEFAULT_TRACEFILES: tuple[str, ...] = tuple(
    f"{stem}.rep" for stem in _TRACE_STEMS.split()
)

# Program run to measure a reference throughput when none is on record.
REF_DRIVER = "./mdriver-ref"

# Every part of the grade is out of the same number of points.
POINTS_CHECKPOINT1 = POINTS_CHECKPOINT2 = POINTS_FINAL = 100.0

# Throughput thresholds as fractions of the reference throughput:
# (required, zero-point floor, full-point ceiling).
REQ_SPEED_RATIO_CHECKPOINT, MIN_SPEED_RATIO_CHECKPOINT, MAX_SPEED_RATIO_CHECKPOINT = (
    0.0,
    0.0,
    0.05,
)
REQ_SPEED_RATIO, MIN_SPEED_RATIO, MAX_SPEED_RATIO = 0.01, 0.3, 0.9

# Space utilisation thresholds, 1 being a perfect allocator:
# (required, zero-point floor, full-point ceiling).
REQ_SPACE_CHECKPOINT, MIN_SPACE_CHECKPOINT, MAX_SPACE_CHECKPOINT = 0.3, 0.4, 0.42
REQ_SPACE, MIN_SPACE, MAX_SPACE = 0.4, 0.5, 0.5

# Share of the performance index given to utilisation; throughput gets the rest.
UTIL_WEIGHT = 0.6

# Largest number of random bytes written at each end of a checked block.
MAXFILL = 2**10

# Payload alignment in bytes.
ALIGNMENT = 2**4

# Upper bound of the simulated heap: one terabyte.
MAX_HEAP_SIZE = 2**40

# Where the CPU model is looked up, and the key its line carries once
# whitespace is removed.
CPU_FILE = "/proc/cpuinfo"
CPU_KEY = "modelname"

# Table of recorded reference throughputs and the benchmark column used.
THROUGHPUT_FILE = "./throughputs.txt"
BENCH_KEY = "regular"


@dataclass(frozen=True)
class ThroughputTargets:
    """Throughput thresholds in Kops/sec derived from a reference throughput."""

    reference: float
    req_checkpoint: float
    min_checkpoint: float
    max_checkpoint: float
    req: float
    min: float
    max: float


def throughput_targets(ref_throughput: float) -> ThroughputTargets:
    """Scale the configured speed ratios by the reference throughput."""
    checkpoint = (
        REQ_SPEED_RATIO_CHECKPOINT,
        MIN_SPEED_RATIO_CHECKPOINT,
        MAX_SPEED_RATIO_CHECKPOINT,
    )
    final = (REQ_SPEED_RATIO, MIN_SPEED_RATIO, MAX_SPEED_RATIO)
    req_cp, min_cp, max_cp = (ref_throughput * ratio for ratio in checkpoint)
    req, low, high = (ref_throughput * ratio for ratio in final)
    return ThroughputTargets(
        reference=ref_throughput,
        req_checkpoint=req_cp,
        min_checkpoint=min_cp,
        max_checkpoint=max_cp,
        req=req,
        min=low,
        max=high,
    )