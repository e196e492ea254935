# syslab

Building blocks for two systems-programming teaching tools: evaluating a
memory allocator against trace files, and running parsed shell command trees.

## Allocator evaluation

### Simulated heap

`syslab.memlib.SimulatedHeap(max_size)` is a byte-addressed heap that only
grows. `sbrk(incr)` extends it and returns the start of the new area; it
raises `HeapError` for a negative increment or when the heap would exceed
`max_size`. `reset_brk()` empties it again. `lo()`, `hi()` and `size()`
report its extent, and `pagesize()` the system page size.

`read(addr, length)` and `write(addr, value, length)` move 0 to 8 bytes,
little-endian; bytes never written read as zero. `memcpy` and `memset` work a
word at a time, and `probe(ptr, offset, count)` returns a hex dump of a
region, highest address first.

    from syslab.memlib import SimulatedHeap

    heap = SimulatedHeap(1 << 20)
    start = heap.sbrk(64)
    heap.write(start, 0x1122, 2)
    print(heap.probe(start, 0, 2))

### Trace files

A trace starts with four header numbers (weight, number of block ids, number
of operations, peak data bytes), followed by one request per line:
`a <id> <size>`, `r <id> <size>` or `f <id>`.
`syslab.traces.parse_trace(text, name)` and
`syslab.traces.read_trace(tracedir, filename)` return a `Trace` holding its
`TraceOp` list, with `OpType` and `Weight` enums. Malformed input raises
`TraceError`. `Trace.reset()` clears the per-block addresses and sizes before
a replay.

### Payload checks

`syslab.ranges.RangeSet` records allocated payloads in address order.
`add(lo, size, heap, index, check_overlap=True)` raises `RangeError` when a
payload is misaligned, lies outside the heap, or overlaps a recorded one;
`remove(lo)` forgets a payload, and the set can be iterated for its `Range`
records.

### Scoring

`syslab.scoring` holds the grading logic:

- `TraceStats` describes one trace's run; `format_results(stats, tab_mode, errors)`
  renders the results table (plain or tab-separated) and returns it with a
  `SummaryStats`.
- `compute_grade(stats, errors, targets)` returns a `Grade` with the
  correctness index and both performance indices; `score_component` maps a
  measurement onto 0..1 between two thresholds.
- `lookup_ref_throughput(cpu_file, throughput_file)` finds a recorded reference
  throughput for the CPU model, using `cparse` to split lines.

`syslab.config` holds the default trace list, thresholds and heap limits;
`throughput_targets(ref_throughput)` scales the speed ratios into a
`ThroughputTargets`.

## Shell command trees

`syslab.command` models a parsed command line: `Word`s made of `WordPart`s
(literal or environment-expanded), `SimpleCommand`s with a verb, parameters
and redirections (`IOFlags` for append modes), and `Command` nodes joined by an
`Operator`. `Word.value(env)` and `SimpleCommand.argv(env)` expand them.

`syslab.executor.execute(command)` runs a tree and returns its status:

- `exit` and `quit` return `SHELL_EXIT`;
- `cd` changes directory through `change_directory(params)` when given exactly
  one argument;
- `NAME=value` sets an environment variable;
- anything else runs as an external program, with input, output and error
  redirection (a shared target for output and error opens one file);
- sequential, conditional, parallel and pipe nodes are run accordingly,
  parallel and pipe halves in forked children.

## What is not included

There is no allocator to evaluate and no command-line driver that replays
traces and prints a score; the pieces above are meant to be combined by your
own code. The shell side has no line parser or interactive prompt: command
trees must be built directly from the `syslab.command` classes.

## Tests

    pip install -e .[test]
    pytest