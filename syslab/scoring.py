"""Per-trace statistics, result tables, grading and reference throughput lookup."""
from __future__ import annotations

import math
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import (
    BENCH_KEY,
    CPU_FILE,
    CPU_KEY,
    MAX_SPACE,
    MAX_SPACE_CHECKPOINT,
    MIN_SPACE,
    MIN_SPACE_CHECKPOINT,
    POINTS_CHECKPOINT1,
    POINTS_CHECKPOINT2,
    POINTS_FINAL,
    REQ_SPACE,
    REQ_SPACE_CHECKPOINT,
    THROUGHPUT_FILE,
    UTIL_WEIGHT,
    ThroughputTargets,
)
from .traces import Weight

PLIMIT = 10
POINTS_PER_CORRECT_TRACE = 3.0

_WHITESPACE = str.maketrans("", "", " \t\n\r")
_FLOAT_PREFIX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

_WEIGHT_MARKS = {
    Weight.NONE: (" ", "0\t0\t"),
    Weight.ALL: ("*", "1\t1\t"),
    Weight.UTIL: ("u", "0\t1\t"),
    Weight.PERF: ("p", "1\t0\t"),
}


@dataclass
class TraceStats:
    """Results of running one trace; ``secs`` and ``util`` count only when valid."""

    filename: str
    weight: Weight = Weight.NONE
    ops: float = 0.0
    valid: bool = False
    secs: float = 0.0
    util: float = 0.0


@dataclass(frozen=True)
class SummaryStats:
    """Aggregate over a set of traces: utilisation in percent, throughput in Kops/s."""

    util: float = 0.0
    ops: float = 0.0
    secs: float = 0.0
    tput: float = 0.0


@dataclass(frozen=True)
class Grade:
    """Points for each checkpoint and the averages they were computed from."""

    checkpoint1: float
    checkpoint2_util: float
    checkpoint2_throughput: float
    checkpoint2: float
    final_util: float
    final_throughput: float
    final: float
    avg_util: float
    avg_throughput: float


def score_component(perf: float, min_perf: float, max_perf: float) -> float:
    """Map ``perf`` linearly onto 0..1 between ``min_perf`` and ``max_perf``."""
    if perf < min_perf:
        return 0.0
    if perf > max_perf:
        return 1.0
    if max_perf == min_perf:
        # perf sits exactly on a zero-width target: it has reached the maximum.
        return 1.0
    return (perf - min_perf) / (max_perf - min_perf)


def _ratio(num: float, den: float) -> float:
    if den != 0:
        return num / den
    if num == 0:
        return math.nan
    return math.copysign(math.inf, num)


def format_results(
    stats: Sequence[TraceStats], tab_mode: bool = False, errors: int = 0
) -> tuple[str, SummaryStats]:
    """Render the per-trace results table and return it with the summary."""
    lines: list[str] = []
    if tab_mode:
        lines.append("valid\tthru?\tutil?\tutil\tops\tmsecs\tKops\ttrace\n")
    else:
        lines.append(
            "  %5s  %6s %7s%8s%8s  %s\n" % ("valid", "util", "ops", "msecs", "Kops", "trace")
        )

    sumsecs = sumops = sumutil = 0.0
    perf_weight = util_weight = 0

    for stat in stats:
        if not stat.valid:
            if tab_mode:
                lines.append(f"no\t\t\t\t\t\t\t{stat.filename}\n")
            else:
                lines.append(
                    "%2s%4s%7s%10s%7s%10s %s\n"
                    % ("*" if stat.weight != Weight.NONE else "", "no",
                       "-", "-", "-", "-", stat.filename)
                )
            continue

        weight = Weight(stat.weight)
        mark, tabstr = _WEIGHT_MARKS[weight]
        parts = [f"1\t{tabstr}" if tab_mode else "%2c%4s" % (mark, "yes")]

        if tab_mode:
            parts.append("%.1f\t" % (stat.util * 100.0))
        elif weight in (Weight.NONE, Weight.ALL, Weight.UTIL):
            parts.append(" %7.1f%%" % (stat.util * 100.0))
        else:
            parts.append(" %8s" % "--")

        msecs = stat.secs * 1000.0
        kops = _ratio(stat.ops * 1e-3, stat.secs)
        if tab_mode:
            parts.append("%.0f\t%.3f\t%.0f\t" % (stat.ops, msecs, kops))
        elif weight in (Weight.NONE, Weight.ALL, Weight.PERF):
            parts.append("%8.0f%10.3f%7.0f " % (stat.ops, msecs, kops))
        else:
            parts.append("%8s%10s%7s " % ("--", "--", "--"))

        parts.append(f"{stat.filename}\n")
        lines.append("".join(parts))

        if weight in (Weight.ALL, Weight.PERF):
            perf_weight += 1
            sumsecs += stat.secs
            sumops += stat.ops
        if weight in (Weight.ALL, Weight.UTIL):
            util_weight += 1
            sumutil += stat.util

    if errors:
        if not tab_mode:
            lines.append("     %8s%10s%7s\n" % ("-", "-", "-"))
        return "".join(lines), SummaryStats()

    perf_weight = perf_weight or 1
    util_weight = util_weight or 1
    util = sumutil / util_weight * 100.0
    tput = 0.0 if sumsecs == 0.0 else (sumops / 1e3) / sumsecs
    if tab_mode:
        lines.append(
            "Sum\t%d\t%d\t%.1f\t%.0f\t%.2f\n"
            % (perf_weight, util_weight, sumutil * 100.0, sumops, sumsecs * 1000.0)
        )
        lines.append("Avg\t\t\t%.1f\t\t\t%.0f\n" % (util, tput))
    else:
        lines.append(
            "%2d %2d  %7.1f%%%8.0f%10.3f%7.0f\n"
            % (util_weight, perf_weight, util, sumops, sumsecs * 1000.0, tput)
        )
    return "".join(lines), SummaryStats(util=util, ops=sumops, secs=sumsecs, tput=tput)


def compute_grade(
    stats: Sequence[TraceStats], errors: int, targets: ThroughputTargets
) -> Grade:
    """Compute the correctness index and both performance indices."""
    secs = ops = util = 0.0
    perf_weight = util_weight = 0
    numcorrect = 0
    for stat in stats:
        if stat.weight in (Weight.ALL, Weight.PERF):
            secs += stat.secs
            ops += stat.ops
            perf_weight += 1
        if stat.weight in (Weight.ALL, Weight.UTIL):
            util += stat.util
            util_weight += 1
        if stat.valid:
            numcorrect += 1

    checkpoint1 = POINTS_PER_CORRECT_TRACE * numcorrect
    if errors:
        return Grade(checkpoint1, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    avg_util = util / util_weight if util_weight else 0.0
    if perf_weight == 0 or secs == 0:
        avg_tput = 0.0
    else:
        avg_tput = ops / secs * 0.001

    cp2_util = cp2_tput = cp2 = 0.0
    if avg_util >= REQ_SPACE_CHECKPOINT and avg_tput >= targets.req_checkpoint:
        checkpoint1 += POINTS_CHECKPOINT1 - POINTS_PER_CORRECT_TRACE * len(stats)
        cp2_util = score_component(avg_util, MIN_SPACE_CHECKPOINT, MAX_SPACE_CHECKPOINT)
        cp2_tput = score_component(avg_tput, targets.min_checkpoint, targets.max_checkpoint)
        cp2 = (cp2_util * UTIL_WEIGHT + cp2_tput * (1.0 - UTIL_WEIGHT)) * POINTS_CHECKPOINT2

    final_util = final_tput = final = 0.0
    if avg_util >= REQ_SPACE and avg_tput >= targets.req:
        final_util = score_component(avg_util, MIN_SPACE, MAX_SPACE)
        final_tput = score_component(avg_tput, targets.min, targets.max)
        final = (final_util * UTIL_WEIGHT + final_tput * (1.0 - UTIL_WEIGHT)) * POINTS_FINAL

    return Grade(
        checkpoint1=checkpoint1,
        checkpoint2_util=cp2_util,
        checkpoint2_throughput=cp2_tput,
        checkpoint2=cp2,
        final_util=final_util,
        final_throughput=final_tput,
        final=final,
        avg_util=avg_util,
        avg_throughput=avg_tput,
    )


def cparse(line: str) -> list[str]:
    """Drop whitespace and split on ':' into at most ten tokens."""
    return line.translate(_WHITESPACE).split(":")[:PLIMIT]


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(0)) if match else 0.0


def lookup_ref_throughput(
    cpu_file: str | Path = CPU_FILE, throughput_file: str | Path = THROUGHPUT_FILE
) -> float:
    """Find the benchmark throughput for this CPU; 0.0 when it is not known."""
    try:
        cpu_lines = Path(cpu_file).read_text().splitlines()
    except OSError:
        print(f"Warning: Could not find file '{cpu_file}'", file=sys.stderr)
        return 0.0

    cpu_type = next(
        (tokens[1] for tokens in map(cparse, cpu_lines)
         if len(tokens) >= 2 and tokens[0] == CPU_KEY),
        None,
    )
    if cpu_type is None:
        print(f"Warning: Could not find CPU type in file '{cpu_file}'", file=sys.stderr)
        return 0.0

    try:
        tput_lines = Path(throughput_file).read_text().splitlines()
    except OSError:
        print(
            f"Warning: Could not open throughput file '{throughput_file}'",
            file=sys.stderr,
        )
        return 0.0

    tput = 0.0
    for tokens in map(cparse, tput_lines):
        if len(tokens) >= 3 and tokens[0] == cpu_type and tokens[1] == BENCH_KEY:
            tput = _atof(tokens[2])
            break
    if tput == 0.0:
        print(
            f"Warning: Could not find CPU '{cpu_type}' benchmark '{BENCH_KEY}' "
            f"in throughput file '{throughput_file}'",
            file=sys.stderr,
        )
    return tput