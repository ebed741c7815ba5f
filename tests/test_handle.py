import io
import os
import signal
import subprocess
import sys
import threading

import pytest

from bridgeshell.bridge import LaunchPlan
from bridgeshell.bridge import handle as handle_module
from bridgeshell.bridge.handle import BridgeHandle

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX-only")


class ExitedProcess:
    """A Popen stand-in whose leader has already been reaped."""

    def __init__(self, pid: int) -> None:
        self.pid = pid
        self.returncode = 0
        self.stdin = io.BytesIO()
        self.stdout = io.BytesIO()
        self.stderr = io.BytesIO()
        self.signals: list[int] = []

    def poll(self) -> int:
        return self.returncode

    def send_signal(self, sig: int) -> None:
        self.signals.append(sig)


def _dead_pid() -> int:
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    return proc.pid


@pytest.fixture
def group_signals(monkeypatch: pytest.MonkeyPatch) -> list[tuple[int, int]]:
    calls: list[tuple[int, int]] = []

    def record(pid: int, sig: int, **_kwargs) -> None:
        calls.append((pid, sig))

    monkeypatch.setattr(handle_module, "signal_process_group", record)
    return calls


def test_kill_skips_group_when_pid_was_reused(group_signals: list[tuple[int, int]]) -> None:
    # Our own pid stands in for a recycled one: alive, but not our child.
    process = ExitedProcess(os.getpid())
    handle = BridgeHandle(process, LaunchPlan("env-override", "bridge"), own_group=True)  # type: ignore[arg-type]

    handle.kill()

    assert group_signals == []
    assert process.signals == []


def test_kill_signals_group_of_reaped_leader(group_signals: list[tuple[int, int]]) -> None:
    pid = _dead_pid()
    process = ExitedProcess(pid)
    handle = BridgeHandle(process, LaunchPlan("env-override", "bridge"), own_group=True)  # type: ignore[arg-type]

    handle.kill()

    assert group_signals == [(pid, signal.SIGKILL)]


def test_concurrent_writes_keep_lines_whole() -> None:
    proc = subprocess.Popen(
        [sys.executable, "-c", "import sys; sys.stdout.buffer.write(sys.stdin.buffer.read())"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    handle = BridgeHandle(proc, LaunchPlan("env-override", sys.executable))

    def writer(tag: str) -> None:
        for _ in range(200):
            handle.write_line(tag * 5000)

    threads = [threading.Thread(target=writer, args=(tag,)) for tag in "ab"]
    reader_output: list[bytes] = []
    reader = threading.Thread(target=lambda: reader_output.append(proc.stdout.read()))
    reader.start()
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    handle.close_stdin()
    reader.join(10.0)
    proc.wait(10.0)
    proc.stderr.close()

    lines = reader_output[0].decode().splitlines()
    assert len(lines) == 400
    assert all(line in ("a" * 5000, "b" * 5000) for line in lines)
