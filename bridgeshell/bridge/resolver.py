"""Resolve how to launch the bridge and spawn it.

Launch plans are tried in a fixed priority order:

1. ``env-override``: a full command line from the override variable.
2. ``local-build``: ``<root>/bridge/dist/index.js`` run by the interpreter.
3. ``sibling-build``: the same entry point in ``<root>/../bridge``.
4. ``local-dev`` / ``sibling-dev``: the package manager's dev task run
   inside ``<root>/bridge`` and ``<root>/../bridge``.

A plan counts as successful as soon as the process is created; the
resolver never waits to see whether the bridge stays up.
"""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from loguru import logger

from bridgeshell.bridge.errors import AllStrategiesExhausted, SpawnAttemptFailed
from bridgeshell.bridge.handle import BridgeHandle
from bridgeshell.config.schema import BridgeConfig
from bridgeshell.utils.process import popen_session_kwargs

PopenFactory = Callable[..., "subprocess.Popen[bytes]"]


@dataclass(frozen=True, slots=True)
class LaunchPlan:
    """One candidate way of starting the bridge."""

    label: str
    program: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def describe(self) -> str:
        command = " ".join(self.argv)
        if self.cwd is not None:
            return f"{command} (in {self.cwd})"
        return command


class SpawnResolver:
    """Picks a launch plan for the current environment and spawns the bridge."""

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
        popen: PopenFactory | None = None,
    ) -> None:
        self.config = config or BridgeConfig()
        self._environ = environ
        self._platform = platform or sys.platform
        self._popen: PopenFactory = popen or subprocess.Popen

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _override_plan(self) -> LaunchPlan | None:
        raw = self.environ.get(self.config.override_env, "")
        parts = raw.split()
        if not parts:
            return None
        return LaunchPlan("env-override", parts[0], tuple(parts[1:]))

    def _build_plan(self, label: str, bridge_root: Path) -> LaunchPlan | None:
        entry = bridge_root / self.config.entry_point
        if not entry.exists():
            return None
        return LaunchPlan(label, self.config.interpreter, (str(entry.resolve()),))

    def _dev_plan(self, label: str, bridge_root: Path) -> LaunchPlan:
        task = (self.config.package_manager, "run", self.config.dev_task)
        if self._platform == "win32":
            return LaunchPlan(label, "cmd", ("/C", *task), cwd=bridge_root)
        return LaunchPlan(label, task[0], task[1:], cwd=bridge_root)

    def plans(self) -> list[LaunchPlan]:
        """Applicable launch plans, highest priority first."""
        root = self.config.project_path
        local = root / self.config.bridge_dir
        sibling = root / ".." / self.config.bridge_dir

        candidates = [
            self._override_plan(),
            self._build_plan("local-build", local),
            self._build_plan("sibling-build", sibling),
            self._dev_plan("local-dev", local),
            self._dev_plan("sibling-dev", sibling),
        ]
        return [plan for plan in candidates if plan is not None]

    def spawn_plan(self, plan: LaunchPlan) -> BridgeHandle:
        """Create the process for one plan with all three stdio streams piped."""
        try:
            process = self._popen(
                plan.argv,
                cwd=str(plan.cwd) if plan.cwd is not None else None,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                **popen_session_kwargs(self._platform),
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            raise SpawnAttemptFailed(plan, str(e)) from e
        return BridgeHandle(process, plan, own_group=self._platform != "win32")

    def spawn(self) -> BridgeHandle:
        """Spawn the bridge using the first plan that can create a process.

        Raises:
            AllStrategiesExhausted: no plan could create a process.
        """
        attempts: list[SpawnAttemptFailed] = []
        for plan in self.plans():
            try:
                handle = self.spawn_plan(plan)
            except SpawnAttemptFailed as e:
                logger.warning("Bridge launch attempt failed: {}", e)
                attempts.append(e)
                continue
            logger.info("Bridge started via {} (pid {}): {}", plan.label, handle.pid, plan.describe())
            return handle
        raise AllStrategiesExhausted(attempts)
