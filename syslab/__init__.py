"""Simulated heap, trace parsing, range checks and scoring for allocator evaluation, plus a shell command-tree executor."""

__version__ = "0.1.0"