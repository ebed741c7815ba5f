"""Process signalling helpers for the supervised bridge."""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Any


def pid_alive(pid: int) -> bool:
    """Check if a process with the given PID is alive."""
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def signal_pid(pid: int, sig: int) -> None:
    """Send a signal to a process by PID, ignoring errors."""
    try:
        os.kill(pid, sig)
    except OSError:
        pass


def signal_process_group(
    pid: int, sig: int, *, pgid: int | None = None, fallback: bool = True
) -> None:
    """Send a signal to the process group of a PID.

    Pass ``pgid`` when it is already known (e.g. the child was started in
    its own session). Falls back to signaling the PID directly if the
    process group matches the current process group (to avoid self-signaling).
    """
    if pgid is None:
        try:
            pgid = os.getpgid(pid)
        except OSError:
            pgid = None
    current_pgid = os.getpgrp()
    if pgid is not None and pgid > 0 and pgid != current_pgid:
        try:
            os.killpg(pgid, sig)
            return
        except OSError:
            pass
    if fallback:
        signal_pid(pid, sig)


def popen_session_kwargs(platform: str | None = None) -> dict[str, Any]:
    """Popen keyword arguments that detach the child into its own process group."""
    if (platform or sys.platform) == "win32":
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0x200)}
    return {"start_new_session": True}
