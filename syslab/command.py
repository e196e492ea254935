"""Parse-tree types for shell command lines and expansion of their words."""
from __future__ import annotations

import enum
import os
from collections.abc import Mapping
from dataclasses import dataclass, field


class IOFlags(enum.IntFlag):
    """Special redirection modes of a simple command."""

    REGULAR = 0x00
    OUT_APPEND = 0x01
    ERR_APPEND = 0x02


class Operator(enum.Enum):
    """How the two halves of a command node are combined."""

    NONE = 0
    SEQUENTIAL = 1
    PARALLEL = 2
    CONDITIONAL_ZERO = 3
    CONDITIONAL_NZERO = 4
    PIPE = 5
    DUMMY = 6


@dataclass(frozen=True)
class WordPart:
    """A piece of a word; when ``expand`` is set, ``string`` names an environment variable."""

    string: str
    expand: bool = False


@dataclass
class Word:
    """A string literal made of one or more parts."""

    parts: list[WordPart] = field(default_factory=list)

    def value(self, env: Mapping[str, str] | None = None) -> str:
        """Concatenate the parts, expanding variables from ``env`` (the process environment by default)."""
        if env is None:
            env = os.environ
        return "".join(
            env.get(part.string, "") if part.expand else part.string
            for part in self.parts
        )


@dataclass
class SimpleCommand:
    """A verb with its parameters and redirections.

    Each redirection list holds the targets in the order they were given;
    only the first of each is used when the command runs.
    """

    verb: Word | None = None
    params: list[Word] = field(default_factory=list)
    redirect_in: list[Word] = field(default_factory=list)
    redirect_out: list[Word] = field(default_factory=list)
    redirect_err: list[Word] = field(default_factory=list)
    io_flags: IOFlags = IOFlags.REGULAR
    up: Command | None = field(default=None, repr=False, compare=False)

    def argv(self, env: Mapping[str, str] | None = None) -> list[str]:
        """The expanded verb followed by the expanded parameters."""
        if self.verb is None:
            raise ValueError("simple command has no verb")
        return [self.verb.value(env), *(param.value(env) for param in self.params)]


@dataclass
class Command:
    """A node of the parse tree: a simple command, or two commands joined by an operator."""

    op: Operator = Operator.NONE
    scmd: SimpleCommand | None = None
    cmd1: Command | None = None
    cmd2: Command | None = None
    up: Command | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        for child in (self.cmd1, self.cmd2):
            if child is not None:
                child.up = self
        if self.scmd is not None:
            self.scmd.up = self