"""Utility functions for bridgeshell."""

import os
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the bridgeshell data directory.

    Respects BRIDGESHELL_HOME environment variable; falls back to ~/.bridgeshell.
    """
    home = os.environ.get("BRIDGESHELL_HOME", "").strip()
    if home:
        return ensure_dir(Path(home))
    return ensure_dir(Path.home() / ".bridgeshell")


def get_logs_path() -> Path:
    """Get the logs directory (~/.bridgeshell/logs)."""
    return ensure_dir(get_data_path() / "logs")
