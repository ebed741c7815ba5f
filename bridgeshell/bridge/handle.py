"""A single running bridge process and its pipes."""

from __future__ import annotations

import signal
import subprocess
import sys
import threading
from typing import IO, TYPE_CHECKING

from loguru import logger

from bridgeshell.bridge.errors import best_effort
from bridgeshell.utils.process import pid_alive, signal_process_group

if TYPE_CHECKING:
    from bridgeshell.bridge.resolver import LaunchPlan


class BridgeHandle:
    """Owns one spawned bridge process.

    The stdout/stderr pipes are handed to exactly one forwarder each; the
    handle itself only ever touches stdin.
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        plan: LaunchPlan,
        *,
        own_group: bool = False,
    ) -> None:
        if process.stdin is None or process.stdout is None or process.stderr is None:
            raise ValueError("bridge process must be spawned with stdin/stdout/stderr pipes")
        self._process = process
        self._pid = process.pid
        self._own_group = own_group
        self._write_lock = threading.Lock()
        self.plan = plan

    def __repr__(self) -> str:
        return f"BridgeHandle(pid={self._pid}, plan={self.plan.label!r})"

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def stdin(self) -> IO[bytes]:
        return self._process.stdin  # type: ignore[return-value]

    @property
    def stdout(self) -> IO[bytes]:
        return self._process.stdout  # type: ignore[return-value]

    @property
    def stderr(self) -> IO[bytes]:
        return self._process.stderr  # type: ignore[return-value]

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def poll(self) -> int | None:
        return self._process.poll()

    def write_line(self, text: str) -> None:
        """Write ``text`` plus a newline to stdin and flush.

        Blocks while the pipe is full. Concurrent callers are serialized so
        lines never interleave.
        """
        with self._write_lock:
            self.stdin.write(f"{text}\n".encode("utf-8"))
            self.stdin.flush()

    def close_stdin(self) -> None:
        if not self.stdin.closed:
            self.stdin.close()

    def _send(self, sig: int) -> None:
        if self._own_group:
            if self._process.returncode is not None and pid_alive(self._pid):
                # Leader already reaped and its pid reused: the group is no longer ours.
                logger.debug("Skipping group signal {} for reused pid {}", sig, self._pid)
            else:
                # Our child led its own session, so pgid == pid even after it is reaped.
                signal_process_group(self._pid, sig, pgid=self._pid, fallback=False)
        if self._process.poll() is None:
            self._process.send_signal(sig)

    def kill(self) -> None:
        """Force the process (and its process group, if it owns one) down."""
        if sys.platform == "win32":
            if self._process.poll() is None:
                self._process.kill()
            return
        self._send(signal.SIGKILL)

    def terminate(self, *, grace_s: float = 0.0, warn_after_s: float = 5.0) -> int:
        """Stop the process and wait until it has fully exited.

        With ``grace_s`` > 0 a polite terminate is tried first, escalating to
        a kill when the grace period elapses. The final wait is unbounded.
        """
        if grace_s > 0 and self._process.poll() is None:
            if sys.platform == "win32":
                self._process.terminate()
            else:
                self._send(signal.SIGTERM)
            try:
                returncode = self._process.wait(timeout=grace_s)
            except subprocess.TimeoutExpired:
                logger.warning("Bridge pid {} ignored terminate for {}s; killing", self._pid, grace_s)
            else:
                # Clear out anything the leader left behind in its group.
                self.kill()
                with best_effort(f"closing stdin of bridge pid {self._pid}"):
                    self.close_stdin()
                return returncode

        self.kill()
        try:
            returncode = self._process.wait(timeout=warn_after_s)
        except subprocess.TimeoutExpired:
            logger.warning("Bridge pid {} still running {}s after kill; waiting", self._pid, warn_after_s)
            returncode = self._process.wait()
        with best_effort(f"closing stdin of bridge pid {self._pid}"):
            self.close_stdin()
        return returncode
