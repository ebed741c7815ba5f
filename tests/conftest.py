import sys
import time
from pathlib import Path
from typing import Callable

import pytest

from bridgeshell.bridge import BridgeSupervisor, SpawnResolver
from bridgeshell.bus import BridgeEvent, EventBus
from bridgeshell.config.schema import BridgeConfig

ECHO_BRIDGE = """\
import sys

print("ready", flush=True)
for raw in sys.stdin.buffer:
    sys.stdout.write(raw.hex() + "\\n")
    sys.stdout.flush()
    sys.stderr.write("seen " + str(len(raw)) + "\\n")
    sys.stderr.flush()
"""


class EventCollector:
    """Records every bus event, dispatching on the test thread."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.events: list[BridgeEvent] = []
        bus.subscribe("*", self.events.append)

    def lines(self, name: str) -> list[str]:
        return [event.line for event in self.events if event.name == name]

    def wait_for(self, predicate: Callable[["EventCollector"], bool], timeout: float = 10.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            self.bus.dispatch_pending()
            if predicate(self):
                return True
            time.sleep(0.01)
        self.bus.dispatch_pending()
        return predicate(self)


def wait_until(predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def python_command(script: Path) -> str:
    return f"{sys.executable} -u {script}"


@pytest.fixture
def echo_bridge(tmp_path: Path) -> Path:
    path = tmp_path / "echo_bridge.py"
    path.write_text(ECHO_BRIDGE)
    return path


@pytest.fixture
def bridge_config(tmp_path: Path) -> BridgeConfig:
    # Empty project and no package manager: only the override can launch anything.
    return BridgeConfig(
        project_root=str(tmp_path / "project"),
        package_manager="bridgeshell-missing-package-manager",
    )


@pytest.fixture
def environ(echo_bridge: Path) -> dict[str, str]:
    return {"BRIDGE_CMD": python_command(echo_bridge)}


@pytest.fixture
def supervisor(bridge_config: BridgeConfig, environ: dict[str, str]):
    resolver = SpawnResolver(bridge_config, environ=environ)
    sup = BridgeSupervisor(config=bridge_config, resolver=resolver, bus=EventBus())
    yield sup
    sup.shutdown()


@pytest.fixture
def events(supervisor: BridgeSupervisor) -> EventCollector:
    return EventCollector(supervisor.bus)
