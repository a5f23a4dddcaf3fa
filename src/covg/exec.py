"""
Subprocess execution utilities.

Provides:
- run_capture: Execute subprocess and capture its stdout.
- run_streaming: Execute subprocess while copying its stdout into a sink.
- format_command: Format argv for logs.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

_TERMINATE_GRACE_S = 5.0


class ExecError(RuntimeError):
    """Raised when a subprocess cannot be started."""


class Interrupted(RuntimeError):
    """Raised when the user interrupted a running subprocess."""


@dataclass(frozen=True, slots=True)
class RunResult:
    """Result of a subprocess execution."""

    returncode: int
    stdout: str


def quote_for_display(s: str) -> str:
    """Quote string for display (not shell-safe, for logs only)."""
    if s and not any(c.isspace() or c in {'"', "\\"} for c in s):
        return s
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_command(argv: Sequence[str | os.PathLike[str]]) -> str:
    """Format argv as readable one-liner."""
    return " ".join(quote_for_display(os.fspath(a)) for a in argv)


def _full_env(env: Mapping[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    full_env = dict(os.environ)
    full_env.update({k: str(v) for k, v in env.items()})
    return full_env


def _popen(
    argv: Sequence[str | os.PathLike[str]],
    *,
    cwd: Path | None,
    env: Mapping[str, str] | None,
) -> subprocess.Popen[str]:
    if not argv:
        raise ValueError("argv must be non-empty")

    logger.debug("exec: %s", format_command(argv))
    try:
        return subprocess.Popen(
            [os.fspath(a) for a in argv],
            cwd=os.fspath(cwd) if cwd is not None else None,
            env=_full_env(env),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise ExecError(f"cannot run {format_command(argv)}: {e}") from e


def _stop(proc: subprocess.Popen[str]) -> None:
    """Ask the process to terminate, then kill it if it does not exit in time."""
    with suppress(OSError):
        proc.terminate()
    try:
        proc.wait(timeout=_TERMINATE_GRACE_S)
    except subprocess.TimeoutExpired:
        with suppress(OSError):
            proc.kill()
        proc.wait()


def run_capture(
    argv: Sequence[str | os.PathLike[str]],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> RunResult:
    """
    Execute subprocess and capture stdout; stderr goes to our stderr.

    Raises
    ------
    ExecError
        If the command cannot be started.
    Interrupted
        If interrupted (Ctrl-C) while the command runs.
    """
    proc = _popen(argv, cwd=cwd, env=env)
    try:
        out, _ = proc.communicate()
    except KeyboardInterrupt:
        _stop(proc)
        raise Interrupted(format_command(argv)) from None
    return RunResult(returncode=int(proc.returncode or 0), stdout=out or "")


def run_streaming(
    argv: Sequence[str | os.PathLike[str]],
    *,
    sink: TextIO,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """
    Execute subprocess, copying each stdout line into `sink` as it is produced.

    stderr is inherited so the command's diagnostics reach the user directly.
    Returns the exit code.

    Raises
    ------
    ExecError
        If the command cannot be started.
    Interrupted
        If interrupted (Ctrl-C) while the command runs; the command is
        terminated before this is raised.
    """
    proc = _popen(argv, cwd=cwd, env=env)
    try:
        if proc.stdout is None:
            raise ExecError(f"stdout pipe not available: {format_command(argv)}")
        for line in proc.stdout:
            sink.write(line)
            sink.flush()
        returncode = proc.wait()
    except KeyboardInterrupt:
        _stop(proc)
        raise Interrupted(format_command(argv)) from None
    finally:
        if proc.stdout is not None:
            with suppress(OSError):
                proc.stdout.close()
    return int(returncode or 0)
