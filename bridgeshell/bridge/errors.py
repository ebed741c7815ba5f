"""Bridge supervisor errors.

Two lanes: the ``BridgeError`` hierarchy propagates to the caller of
spawn/write/restart, while ``best_effort`` logs and suppresses failures
on the teardown and forwarding paths where nothing can be recovered.
"""

from __future__ import annotations

import subprocess
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

from loguru import logger

if TYPE_CHECKING:
    from bridgeshell.bridge.resolver import LaunchPlan


class BridgeError(RuntimeError):
    """Base class for failures surfaced to the host shell."""


class SpawnAttemptFailed(BridgeError):
    """One launch plan could not create a process."""

    def __init__(self, plan: LaunchPlan, reason: str) -> None:
        self.plan = plan
        self.reason = reason
        super().__init__(f"{plan.label}: `{plan.describe()}` failed to spawn: {reason}")


class AllStrategiesExhausted(BridgeError):
    """Every launch plan failed to create a process."""

    def __init__(self, attempts: list[SpawnAttemptFailed]) -> None:
        self.attempts = list(attempts)
        lines = [
            "Failed to start bridge: all launch strategies exhausted. "
            "Node.js/npm or a built bridge (dist/index.js) was not found."
        ]
        if not self.attempts:
            lines.append("  (no launch strategy was applicable)")
        lines.extend(f"  - {attempt}" for attempt in self.attempts)
        super().__init__("\n".join(lines))


SpawnFailure = AllStrategiesExhausted


class NoProcess(BridgeError):
    """An operation needed a bridge process but none is registered."""

    def __init__(self, message: str = "Bridge process not running") -> None:
        super().__init__(message)


class IoFailure(BridgeError):
    """A write, read or termination call failed at the OS boundary."""


@contextmanager
def best_effort(action: str) -> Iterator[None]:
    """Log and suppress OS-level failures of ``action``."""
    try:
        yield
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        logger.debug("{} failed (ignored): {}", action, e)
