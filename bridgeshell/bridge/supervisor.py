"""Operations the host shell performs on the bridge process."""

from __future__ import annotations

import atexit
import threading
from dataclasses import dataclass

from loguru import logger

from bridgeshell.bridge.errors import AllStrategiesExhausted, IoFailure, NoProcess, best_effort
from bridgeshell.bridge.forwarder import StreamForwarder
from bridgeshell.bridge.handle import BridgeHandle
from bridgeshell.bridge.registry import ProcessRegistry
from bridgeshell.bridge.resolver import SpawnResolver
from bridgeshell.bus.events import STDERR_EVENT, STDOUT_EVENT
from bridgeshell.bus.queue import EventBus
from bridgeshell.config.schema import BridgeConfig, BusConfig


@dataclass(slots=True)
class BridgeStatus:
    running: bool
    pid: int | None
    strategy: str | None
    restarts: int
    last_exit_code: int | None

    @property
    def state(self) -> str:
        return "running" if self.running else "stopped"


class BridgeSupervisor:
    """Owns the bridge process slot and the forwarders attached to it.

    ``start``/``restart``/``shutdown`` are serialized by a lifecycle lock;
    ``write`` and ``status`` only take the registry lock, so during a
    restart they observe an empty slot rather than the old process.
    """

    def __init__(
        self,
        *,
        config: BridgeConfig | None = None,
        registry: ProcessRegistry | None = None,
        resolver: SpawnResolver | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.config = config or BridgeConfig()
        self.registry = registry or ProcessRegistry()
        self.resolver = resolver or SpawnResolver(self.config)
        # A bus we create is bounded and dispatched by us; a passed-in bus belongs to the caller.
        self._owns_bus = bus is None
        self.bus = bus if bus is not None else EventBus(maxsize=BusConfig().maxsize)
        self._lifecycle_lock = threading.RLock()
        self._forwarders: tuple[StreamForwarder, ...] = ()
        self._restarts = 0
        self._exited = False

    def __enter__(self) -> BridgeSupervisor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @property
    def forwarders(self) -> tuple[StreamForwarder, ...]:
        """Forwarders attached to the most recently installed process."""
        return self._forwarders

    def _attach(self, handle: BridgeHandle) -> None:
        if self._owns_bus:
            self.bus.start()
        self._forwarders = (
            StreamForwarder(handle.stdout, STDOUT_EVENT, handle.pid, self.bus.publish).start(),
            StreamForwarder(handle.stderr, STDERR_EVENT, handle.pid, self.bus.publish).start(),
        )

    def _terminate(self, handle: BridgeHandle) -> int:
        returncode = handle.terminate(
            grace_s=self.config.terminate_grace_s,
            warn_after_s=self.config.kill_wait_warn_s,
        )
        self.registry.record_exit(returncode)
        logger.info("Bridge pid {} terminated (code {})", handle.pid, returncode)
        return returncode

    def _install(self, handle: BridgeHandle) -> None:
        previous = self.registry.install(handle)
        if previous is not None and previous is not handle:
            logger.warning("Replacing registered bridge pid {} with pid {}", previous.pid, handle.pid)
            with best_effort(f"terminating bridge pid {previous.pid}"):
                self._terminate(previous)
        self._attach(handle)

    def start(self) -> BridgeHandle:
        """Spawn the bridge, register it and start relaying its output.

        Raises:
            AllStrategiesExhausted: the bridge could not be launched. The
                host may keep running without a bridge.
        """
        with self._lifecycle_lock:
            handle = self.resolver.spawn()
            self._install(handle)
            return handle

    def write(self, text: str) -> None:
        """Send one line to the bridge's stdin.

        The write happens outside the registry lock, so a bridge that stops
        reading can still be inspected, restarted or shut down; a write
        blocked on its full pipe then fails with ``IoFailure``.

        Raises:
            NoProcess: no bridge process is registered.
            IoFailure: the write or flush failed (e.g. broken pipe).
        """
        with self.registry.locked() as handle:
            if handle is None:
                raise NoProcess()
        try:
            handle.write_line(text)
        except (OSError, ValueError) as e:
            raise IoFailure(f"Failed to write to bridge pid {handle.pid}: {e}") from e

    def status(self) -> bool:
        """Whether a live bridge process is registered."""
        return self.registry.peek_alive()

    def describe(self) -> BridgeStatus:
        with self.registry.locked() as handle:
            return BridgeStatus(
                running=handle is not None,
                pid=handle.pid if handle is not None else None,
                strategy=handle.plan.label if handle is not None else None,
                restarts=self._restarts,
                last_exit_code=self.registry.last_exit_code,
            )

    def restart(self) -> BridgeHandle:
        """Kill the current bridge (if any), wait for it, and spawn a fresh one.

        Raises:
            IoFailure: the old process could not be terminated.
            SpawnFailure: no launch plan worked; the slot is left empty.
        """
        with self._lifecycle_lock:
            old = self.registry.take()
            if old is not None:
                logger.info("Restarting bridge (pid {})", old.pid)
                try:
                    self._terminate(old)
                except OSError as e:
                    raise IoFailure(f"Failed to terminate bridge pid {old.pid}: {e}") from e

            try:
                handle = self.resolver.spawn()
            except AllStrategiesExhausted:
                logger.error("Bridge restart failed; continuing without a bridge")
                raise
            self._install(handle)
            self._restarts += 1
            return handle

    def shutdown(self) -> None:
        """Kill and reap the current bridge. Never raises; safe to call repeatedly."""
        with self._lifecycle_lock:
            handle = self.registry.take()
            if handle is not None:
                logger.info("Shutting down bridge (pid {})", handle.pid)
                with best_effort(f"terminating bridge pid {handle.pid}"):
                    self._terminate(handle)
            if self._owns_bus:
                for forwarder in self._forwarders:
                    forwarder.join(1.0)
                self.bus.stop()

    def on_exit(self) -> None:
        """Application exit hook; runs ``shutdown`` at most once."""
        with self._lifecycle_lock:
            if self._exited:
                return
            self._exited = True
        self.shutdown()

    def register_exit_hook(self) -> None:
        atexit.register(self.on_exit)
