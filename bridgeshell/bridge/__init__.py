"""Bridge process supervision: launch resolution, output relaying, lifecycle."""

from bridgeshell.bridge.errors import (
    AllStrategiesExhausted,
    BridgeError,
    IoFailure,
    NoProcess,
    SpawnAttemptFailed,
    SpawnFailure,
)
from bridgeshell.bridge.handle import BridgeHandle
from bridgeshell.bridge.registry import ProcessRegistry
from bridgeshell.bridge.resolver import LaunchPlan, SpawnResolver
from bridgeshell.bridge.supervisor import BridgeStatus, BridgeSupervisor

__all__ = [
    "AllStrategiesExhausted",
    "BridgeError",
    "BridgeHandle",
    "BridgeStatus",
    "BridgeSupervisor",
    "IoFailure",
    "LaunchPlan",
    "NoProcess",
    "ProcessRegistry",
    "SpawnAttemptFailed",
    "SpawnFailure",
    "SpawnResolver",
]
