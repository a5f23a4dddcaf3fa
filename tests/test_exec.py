from __future__ import annotations

import io
import signal
import subprocess
import sys

import pytest

from covg import exec as exec_mod
from covg.exec import (
    ExecError,
    Interrupted,
    format_command,
    quote_for_display,
    run_capture,
    run_streaming,
)


def test_quote_for_display() -> None:
    assert quote_for_display("go") == "go"
    assert quote_for_display("a b") == '"a b"'
    assert quote_for_display("") == '""'
    assert format_command(["go", "test", "-run", "A B"]) == 'go test -run "A B"'


def test_run_capture() -> None:
    res = run_capture([sys.executable, "-c", "print('hello')"])
    assert res.returncode == 0
    assert res.stdout.strip() == "hello"


def test_run_streaming_copies_stdout_and_returns_code() -> None:
    sink = io.StringIO()
    code = "import sys; print('one'); print('two'); sys.exit(3)"
    assert run_streaming([sys.executable, "-c", code], sink=sink) == 3
    assert sink.getvalue().splitlines() == ["one", "two"]


def test_missing_command() -> None:
    with pytest.raises(ExecError):
        run_capture(["covg-test-no-such-command"])
    with pytest.raises(ValueError):
        run_capture([])


class _InterruptingSink(io.StringIO):
    """Acts like Ctrl-C arriving once the command has printed something."""

    def write(self, s: str) -> int:
        raise KeyboardInterrupt


@pytest.fixture
def started(monkeypatch: pytest.MonkeyPatch) -> list[subprocess.Popen]:
    procs: list[subprocess.Popen] = []

    class RecordingPopen(subprocess.Popen):
        def __init__(self, *args, **kwargs) -> None:
            super().__init__(*args, **kwargs)
            procs.append(self)

    monkeypatch.setattr(exec_mod.subprocess, "Popen", RecordingPopen)
    return procs


def test_run_streaming_interrupt_terminates_command(started: list[subprocess.Popen]) -> None:
    code = "import time; print('ready', flush=True); time.sleep(60)"
    with pytest.raises(Interrupted):
        run_streaming([sys.executable, "-c", code], sink=_InterruptingSink())
    (proc,) = started
    assert proc.poll() is not None


@pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM cannot be ignored on Windows")
def test_run_streaming_interrupt_kills_command_ignoring_terminate(
    started: list[subprocess.Popen], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(exec_mod, "_TERMINATE_GRACE_S", 0.2)
    code = (
        "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); "
        "print('ready', flush=True); time.sleep(60)"
    )
    with pytest.raises(Interrupted):
        run_streaming([sys.executable, "-c", code], sink=_InterruptingSink())
    (proc,) = started
    assert proc.poll() == -signal.SIGKILL
