"""Bounded event queue with a single dispatch thread."""

import queue
import threading
from typing import Callable

from loguru import logger

from bridgeshell.bus.events import BridgeEvent

ANY_EVENT = "*"

EventCallback = Callable[[BridgeEvent], None]


class EventBus:
    """
    Thread-safe event bus that decouples stream forwarders from the host shell.

    Forwarders publish without ever blocking; a single dispatch thread
    delivers events to subscribers in the order they were published.
    When the queue is full the oldest pending event is dropped.
    """

    def __init__(self, *, maxsize: int = 0):
        self.events: queue.Queue[BridgeEvent] = queue.Queue(maxsize=max(0, maxsize))
        self._subscribers: dict[str, list[EventCallback]] = {}
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._dropped = 0

    def publish(self, event: BridgeEvent) -> None:
        """Queue an event for dispatch. Never blocks."""
        while True:
            try:
                self.events.put_nowait(event)
                return
            except queue.Full:
                pass
            try:
                self.events.get_nowait()
            except queue.Empty:
                continue
            with self._lock:
                self._dropped += 1
                dropped = self._dropped
            if dropped == 1 or dropped % 100 == 0:
                logger.warning("EventBus queue overflow: dropped={}", dropped)

    def subscribe(self, name: str, callback: EventCallback) -> None:
        """Subscribe to events by name, or to every event with ``"*"``."""
        with self._lock:
            self._subscribers.setdefault(name, []).append(callback)

    def _deliver(self, event: BridgeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(event.name, []))
            callbacks += self._subscribers.get(ANY_EVENT, [])
        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error("Error dispatching {}: {}", event.name, e)

    def dispatch_pending(self) -> int:
        """Deliver everything currently queued on the calling thread."""
        delivered = 0
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return delivered
            self._deliver(event)
            delivered += 1

    def _dispatch_loop(self) -> None:
        while not self._stop.is_set():
            try:
                event = self.events.get(timeout=0.5)
            except queue.Empty:
                continue
            self._deliver(event)

    def start(self) -> None:
        """Start the background dispatch thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._dispatch_loop,
            name="bridge-event-dispatch",
            daemon=True,
        )
        self._thread.start()

    def stop(self, *, drain: bool = True, timeout: float = 2.0) -> None:
        """Stop the dispatch thread, optionally delivering what is still queued."""
        self._stop.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            self._thread = None
        if drain:
            self.dispatch_pending()

    @property
    def size(self) -> int:
        """Number of pending events."""
        return self.events.qsize()

    @property
    def dropped(self) -> int:
        """Number of events dropped due to queue overflow."""
        return self._dropped
