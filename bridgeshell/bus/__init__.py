"""Event bus carrying bridge output to the host shell."""

from bridgeshell.bus.events import STDERR_EVENT, STDOUT_EVENT, BridgeEvent
from bridgeshell.bus.queue import EventBus

__all__ = ["BridgeEvent", "EventBus", "STDERR_EVENT", "STDOUT_EVENT"]
