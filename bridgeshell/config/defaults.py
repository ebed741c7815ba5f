"""Centralized defaults for the configuration schema."""

from __future__ import annotations

from typing import Any

DEFAULT_OVERRIDE_ENV = "BRIDGE_CMD"

DEFAULT_BRIDGE: dict[str, Any] = {
    "project_root": ".",
    "override_env": DEFAULT_OVERRIDE_ENV,
    "bridge_dir": "bridge",
    "entry_point": "dist/index.js",
    "interpreter": "node",
    "package_manager": "npm",
    "dev_task": "dev",
    "terminate_grace_s": 0.0,
    "kill_wait_warn_s": 5.0,
}

DEFAULT_BUS: dict[str, Any] = {
    "maxsize": 1000,
}

DEFAULT_LOGGING: dict[str, Any] = {
    "level": "INFO",
    "file": "",
    "rotation": "10 MB",
}
