"""Loguru sink configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from bridgeshell.config.schema import LoggingConfig
from bridgeshell.utils.helpers import get_logs_path


def setup_logging(config: LoggingConfig, *, verbose: bool = False) -> Path | None:
    """Replace loguru's default sink with the configured ones.

    Returns the log file path when a file sink was added.
    """
    logger.remove()
    level = "DEBUG" if verbose else config.level.upper()
    logger.add(sys.stderr, level=level)

    if not config.file:
        return None
    path = Path(config.file).expanduser()
    if not path.is_absolute():
        path = get_logs_path() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(path, level=level, rotation=config.rotation, enqueue=True)
    return path
