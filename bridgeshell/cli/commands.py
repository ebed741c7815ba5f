"""CLI commands for bridgeshell."""

from bridgeshell.cli import bridge_commands, config_commands  # noqa: F401  (registers commands)
from bridgeshell.cli.core import app

__all__ = ["app"]
