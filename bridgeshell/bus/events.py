"""Event types for the bridge event bus."""

from dataclasses import dataclass, field
from datetime import datetime

STDOUT_EVENT = "bridge-stdout"
STDERR_EVENT = "bridge-stderr"


@dataclass(frozen=True, slots=True)
class BridgeEvent:
    """One line of bridge output, tagged with the stream it came from."""

    name: str  # STDOUT_EVENT or STDERR_EVENT
    line: str
    pid: int
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_stderr(self) -> bool:
        return self.name == STDERR_EVENT
