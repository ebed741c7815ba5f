"""Relay bridge output lines to the event bus."""

from __future__ import annotations

import threading
from typing import IO, Callable

from loguru import logger

from bridgeshell.bridge.errors import best_effort
from bridgeshell.bus.events import BridgeEvent

Publish = Callable[[BridgeEvent], None]


def decode_line(raw: bytes) -> str | None:
    """Strict UTF-8 decode without the line terminator, or None if undecodable."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return text


class StreamForwarder:
    """Reads one stream line by line on its own thread and publishes each line.

    Stream closure ends the forwarder quietly. Publishing must not block;
    the event bus drops its oldest event rather than stall this loop.
    """

    def __init__(self, stream: IO[bytes], event_name: str, pid: int, publish: Publish) -> None:
        self._stream = stream
        self.event_name = event_name
        self.pid = pid
        self._publish = publish
        self._thread = threading.Thread(
            target=self._run,
            name=f"{event_name}-{pid}",
            daemon=True,
        )
        self.lines = 0
        self.dropped = 0

    def start(self) -> StreamForwarder:
        self._thread.start()
        return self

    def _emit(self, raw: bytes) -> None:
        line = decode_line(raw)
        if line is None:
            self.dropped += 1
            logger.debug("Dropped undecodable {} line from pid {}", self.event_name, self.pid)
            return
        try:
            self._publish(BridgeEvent(name=self.event_name, line=line, pid=self.pid))
        except Exception as e:
            logger.warning("Failed to publish {} line from pid {}: {}", self.event_name, self.pid, e)
            return
        self.lines += 1

    def _run(self) -> None:
        with best_effort(f"reading {self.event_name} of pid {self.pid}"):
            for raw in iter(self._stream.readline, b""):
                self._emit(raw)
        with best_effort(f"closing {self.event_name} of pid {self.pid}"):
            self._stream.close()
        logger.debug("{} forwarder for pid {} finished ({} lines)", self.event_name, self.pid, self.lines)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the stream to close. Returns True if the forwarder finished."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread.is_alive()
