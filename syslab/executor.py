"""Running parsed shell commands: built-ins, external programs, pipes and operators."""
from __future__ import annotations

import contextlib
import os
import subprocess
import sys
from collections.abc import Callable, Sequence

from .command import Command, IOFlags, Operator, SimpleCommand, Word

SHELL_EXIT = -100

_WRITE = os.O_WRONLY | os.O_CREAT


class _RedirectionError(Exception):
    pass


def _flush() -> None:
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(Exception):
            stream.flush()


def _error_text(exc: OSError) -> str:
    return exc.strerror or str(exc)


def change_directory(params: Sequence[Word]) -> bool:
    """Built-in ``cd``: needs exactly one argument, otherwise does nothing."""
    if len(params) != 1:
        return True
    path = params[0].value()
    try:
        os.chdir(path)
    except OSError:
        print("no such file or directory", file=sys.stderr)
        return False
    return True


def _open(stack: contextlib.ExitStack, path: str, flags: int, what: str) -> int:
    try:
        fd = os.open(path, flags, 0o644)
    except OSError as exc:
        raise _RedirectionError(f"{what}: {_error_text(exc)}") from exc
    stack.callback(os.close, fd)
    return fd


def _redirect(
    scmd: SimpleCommand, stack: contextlib.ExitStack
) -> tuple[int | None, int | None, int | None]:
    stdin = stdout = stderr = None
    out = scmd.redirect_out[0] if scmd.redirect_out else None
    err = scmd.redirect_err[0] if scmd.redirect_err else None

    if scmd.redirect_in:
        stdin = _open(stack, scmd.redirect_in[0].value(), os.O_RDONLY, "open input")

    if out is not None and err is not None:
        out_path = out.value()
        if out_path == err.value():
            stdout = stderr = _open(stack, out_path, _WRITE | os.O_TRUNC, "open")
            out = err = None

    if out is not None:
        mode = os.O_APPEND if scmd.io_flags == IOFlags.OUT_APPEND else os.O_TRUNC
        stdout = _open(stack, out.value(), _WRITE | mode, "open output")

    if err is not None:
        mode = os.O_APPEND if scmd.io_flags == IOFlags.ERR_APPEND else os.O_TRUNC
        stderr = _open(stack, err.value(), _WRITE | mode, "open error")

    return stdin, stdout, stderr


def _run_external(scmd: SimpleCommand) -> int:
    argv = scmd.argv()
    with contextlib.ExitStack() as stack:
        try:
            stdin, stdout, stderr = _redirect(scmd, stack)
        except _RedirectionError as exc:
            print(exc, file=sys.stderr)
            return 1
        _flush()
        try:
            completed = subprocess.run(
                argv, stdin=stdin, stdout=stdout, stderr=stderr, check=False
            )
        except OSError as exc:
            print(f"execvp: {_error_text(exc)}", file=sys.stderr)
            return 1
    return completed.returncode if completed.returncode >= 0 else 1


def _execute_simple(scmd: SimpleCommand | None) -> int:
    if scmd is None or scmd.verb is None:
        return 0
    command = scmd.verb.value()
    if command in ("quit", "exit"):
        return SHELL_EXIT
    if command == "cd":
        return 0 if change_directory(scmd.params) else 1
    if "=" in command:
        name, _, value = command.partition("=")
        with contextlib.suppress(ValueError):
            os.environ[name] = value
        return 0
    return _run_external(scmd)


def _spawn(
    command: Command | None,
    level: int,
    father: Command | None,
    setup: Callable[[], None] | None = None,
) -> int:
    """Run ``command`` in a forked child and return the child's pid."""
    _flush()
    pid = os.fork()
    if pid == 0:
        status = 1
        try:
            if setup is not None:
                setup()
            status = execute(command, level, father) & 0xFF
        finally:
            _flush()
            os._exit(status)
    return pid


def _wait(pid: int) -> int | None:
    _, status = os.waitpid(pid, 0)
    return os.WEXITSTATUS(status) if os.WIFEXITED(status) else None


def _run_in_parallel(
    cmd1: Command | None, cmd2: Command | None, level: int, father: Command | None
) -> bool:
    try:
        pid1 = _spawn(cmd1, level + 1, father)
    except OSError as exc:
        print(f"fork cmd1: {_error_text(exc)}", file=sys.stderr)
        return False
    try:
        pid2 = _spawn(cmd2, level + 1, father)
    except OSError as exc:
        print(f"fork cmd2: {_error_text(exc)}", file=sys.stderr)
        _wait(pid1)
        return False
    status1 = _wait(pid1)
    status2 = _wait(pid2)
    return status1 == 0 and status2 == 0


def _run_on_pipe(
    cmd1: Command | None, cmd2: Command | None, level: int, father: Command | None
) -> int:
    try:
        read_fd, write_fd = os.pipe()
    except OSError as exc:
        print(f"pipe: {_error_text(exc)}", file=sys.stderr)
        return 1

    def writer() -> None:
        os.dup2(write_fd, sys.__stdout__.fileno() if sys.__stdout__ else 1)
        os.close(read_fd)
        os.close(write_fd)

    def reader() -> None:
        os.dup2(read_fd, 0)
        os.close(write_fd)
        os.close(read_fd)

    try:
        pid1 = _spawn(cmd1, level + 1, father, writer)
    except OSError as exc:
        print(f"fork cmd1: {_error_text(exc)}", file=sys.stderr)
        os.close(read_fd)
        os.close(write_fd)
        return 1
    try:
        pid2 = _spawn(cmd2, level + 1, father, reader)
    except OSError as exc:
        print(f"fork cmd2: {_error_text(exc)}", file=sys.stderr)
        os.close(read_fd)
        os.close(write_fd)
        _wait(pid1)
        return 1

    os.close(read_fd)
    os.close(write_fd)
    _wait(pid1)
    status2 = _wait(pid2)
    return 1 if status2 is None else status2


def execute(
    command: Command | None, level: int = 0, father: Command | None = None
) -> int:
    """Run ``command`` and return its status; :data:`SHELL_EXIT` asks the shell to stop."""
    if command is None:
        return 0
    op = command.op
    if op is Operator.NONE:
        return _execute_simple(command.scmd)
    if op is Operator.SEQUENTIAL:
        execute(command.cmd1, level + 1, command)
        return execute(command.cmd2, level + 1, command)
    if op is Operator.PARALLEL:
        return 1 if _run_in_parallel(command.cmd1, command.cmd2, level + 1, command) else 0
    if op is Operator.CONDITIONAL_NZERO:
        first = execute(command.cmd1, level + 1, command)
        return execute(command.cmd2, level + 1, command) if first != 0 else first
    if op is Operator.CONDITIONAL_ZERO:
        first = execute(command.cmd1, level + 1, command)
        return execute(command.cmd2, level + 1, command) if first == 0 else first
    if op is Operator.PIPE:
        return 0 if _run_on_pipe(command.cmd1, command.cmd2, level + 1, command) == 0 else 1
    return SHELL_EXIT