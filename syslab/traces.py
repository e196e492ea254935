"""Allocator trace files: a header followed by alloc, realloc and free requests."""
from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

HEADER_LINES = 4


class OpType(enum.Enum):
    """Kind of allocator request."""

    ALLOC = "a"
    FREE = "f"
    REALLOC = "r"


class Weight(enum.IntEnum):
    """Which parts of the performance index a trace counts towards."""

    NONE = 0
    ALL = 1
    UTIL = 2
    PERF = 3


class TraceError(Exception):
    """Raised when a trace file cannot be read or is malformed."""


@dataclass(frozen=True)
class TraceOp:
    """One request: ``index`` names the block, ``size`` is in bytes."""

    type: OpType
    index: int
    size: int = 0


def line_number(opnum: int) -> int:
    """Line of the trace file (origin 1) that holds request ``opnum``."""
    return opnum + HEADER_LINES + 1


@dataclass
class Trace:
    """A parsed trace plus the per-block state used while replaying it."""

    filename: str
    weight: Weight
    num_ids: int
    num_ops: int
    data_bytes: int
    ops: list[TraceOp]
    blocks: list[int | None] = field(default_factory=list)
    block_sizes: list[int] = field(default_factory=list)
    block_rand_base: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.reset()
        self.block_rand_base = [0] * self.num_ids

    def reset(self) -> None:
        """Forget every block address and size, ready for another run."""
        self.blocks = [None] * self.num_ids
        self.block_sizes = [0] * self.num_ids


def _next_int(tokens: Iterator[str], name: str, what: str) -> int:
    try:
        token = next(tokens)
    except StopIteration:
        raise TraceError(f"{name}: missing {what}") from None
    try:
        return int(token)
    except ValueError:
        raise TraceError(f"{name}: invalid {what} {token!r}") from None


def parse_trace(text: str, name: str) -> Trace:
    """Parse the contents of a trace file; ``name`` is used in messages."""
    tokens = iter(text.split())
    raw_weight = _next_int(tokens, name, "weight")
    num_ids = _next_int(tokens, name, "number of ids")
    num_ops = _next_int(tokens, name, "number of operations")
    data_bytes = _next_int(tokens, name, "data bytes")

    if not 0 <= raw_weight <= 3:
        raise TraceError(f"{name}: weight can only be in {{0, 1, 2 3}}")

    ops: list[TraceOp] = []
    max_index = 0
    while len(ops) < num_ops:
        type_token = next(tokens, None)
        if type_token is None:
            break
        kind = type_token[0]
        if kind in ("a", "r"):
            index = _next_int(tokens, name, "block index")
            size = _next_int(tokens, name, "block size")
            op_type = OpType.ALLOC if kind == "a" else OpType.REALLOC
            ops.append(TraceOp(op_type, index, size))
            max_index = max(max_index, index)
        elif kind == "f":
            index = _next_int(tokens, name, "block index")
            ops.append(TraceOp(OpType.FREE, index))
        else:
            raise TraceError(f"Bogus type character ({kind}) in tracefile {name}")

    if max_index != num_ids - 1:
        raise TraceError(
            f"{name}: largest block index {max_index} does not match {num_ids} ids"
        )
    if len(ops) != num_ops:
        raise TraceError(
            f"{name}: expected {num_ops} operations, found {len(ops)}"
        )

    return Trace(
        filename=name,
        weight=Weight(raw_weight),
        num_ids=num_ids,
        num_ops=num_ops,
        data_bytes=data_bytes,
        ops=ops,
    )


def read_trace(tracedir: str, filename: str) -> Trace:
    """Read ``tracedir + filename`` and parse it."""
    path = tracedir + filename
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise TraceError(f"Could not open {path} in read_trace: {exc.strerror}") from exc
    return parse_trace(text, path)