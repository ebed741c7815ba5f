"""Lock-guarded slot holding the current bridge process."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from bridgeshell.bridge.errors import best_effort
from bridgeshell.bridge.handle import BridgeHandle


class ProcessRegistry:
    """Holds zero or one BridgeHandle.

    A handle whose process has exited on its own is reaped on the next
    access: its exit code is kept in ``last_exit_code`` and the slot is
    cleared, so an exited handle is never handed out again.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._handle: BridgeHandle | None = None
        self._last_exit_code: int | None = None

    def _reap_locked(self) -> BridgeHandle | None:
        handle = self._handle
        if handle is None:
            return None
        returncode = handle.poll()
        if returncode is None:
            return handle
        logger.info("Bridge pid {} exited with code {}", handle.pid, returncode)
        self._handle = None
        self._last_exit_code = returncode
        with best_effort(f"closing stdin of bridge pid {handle.pid}"):
            handle.close_stdin()
        return None

    def install(self, handle: BridgeHandle) -> BridgeHandle | None:
        """Store ``handle``, returning whatever was stored before."""
        with self._lock:
            previous = self._handle
            self._handle = handle
            return previous

    def take(self) -> BridgeHandle | None:
        """Remove and return the current handle, leaving the slot empty."""
        with self._lock:
            handle = self._handle
            self._handle = None
            return handle

    def peek_alive(self) -> bool:
        """Whether a live handle is registered."""
        with self._lock:
            return self._reap_locked() is not None

    @contextmanager
    def locked(self) -> Iterator[BridgeHandle | None]:
        """Hold the registry lock and yield the current live handle (or None)."""
        with self._lock:
            yield self._reap_locked()

    def record_exit(self, returncode: int | None) -> None:
        with self._lock:
            self._last_exit_code = returncode

    @property
    def last_exit_code(self) -> int | None:
        """Exit code of the most recently ended bridge process, if known."""
        return self._last_exit_code
