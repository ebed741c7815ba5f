import sys
from pathlib import Path

import pytest
from conftest import python_command
from loguru import logger
from typer.testing import CliRunner

from bridgeshell import __version__
from bridgeshell.bridge import NoProcess, SpawnFailure
from bridgeshell.bridge.supervisor import BridgeStatus
from bridgeshell.bus import STDERR_EVENT, STDOUT_EVENT, BridgeEvent
from bridgeshell.cli.bridge_commands import _print_event, handle_input_line
from bridgeshell.cli.core import console
from bridgeshell.cli.commands import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    # `run` points loguru at the runner's captured stderr.
    logger.remove()
    logger.add(sys.stderr)


class StubSupervisor:
    def __init__(self, *, running: bool = True) -> None:
        self.running = running
        self.written: list[str] = []
        self.restarts = 0

    def write(self, text: str) -> None:
        if not self.running:
            raise NoProcess()
        self.written.append(text)

    def restart(self):
        raise SpawnFailure([])

    def describe(self) -> BridgeStatus:
        return BridgeStatus(
            running=self.running,
            pid=123 if self.running else None,
            strategy="env-override" if self.running else None,
            restarts=self.restarts,
            last_exit_code=None if self.running else 1,
        )


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"bridgeshell v{__version__}" in result.stdout


def test_plan_lists_override_first(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BRIDGE_CMD", "bridge-bin --stdio")

    result = runner.invoke(app, ["plan", "--config", str(tmp_path / "missing.json")])

    assert result.exit_code == 0
    assert "env-override" in result.stdout
    assert "local-dev" in result.stdout
    assert result.stdout.index("env-override") < result.stdout.index("local-dev")


def test_config_init_and_show(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    created = runner.invoke(app, ["config", "init", "--config", str(path)])
    shown = runner.invoke(app, ["config", "show", "--config", str(path)])

    assert created.exit_code == 0
    assert path.exists()
    assert shown.exit_code == 0
    assert "overrideEnv" in shown.stdout


def test_handle_input_line_writes_and_quits() -> None:
    sup = StubSupervisor()
    assert handle_input_line(sup, "ping") is True  # type: ignore[arg-type]
    assert handle_input_line(sup, ":status") is True  # type: ignore[arg-type]
    assert handle_input_line(sup, ":quit") is False  # type: ignore[arg-type]
    assert sup.written == ["ping"]


def test_handle_input_line_reports_failures() -> None:
    sup = StubSupervisor(running=False)
    assert handle_input_line(sup, "ping") is True  # type: ignore[arg-type]
    assert handle_input_line(sup, ":restart") is True  # type: ignore[arg-type]
    assert handle_input_line(sup, ":status") is True  # type: ignore[arg-type]
    assert sup.written == []


def test_run_relays_and_shuts_down(
    tmp_path: Path, echo_bridge: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BRIDGE_CMD", python_command(echo_bridge))

    result = runner.invoke(
        app,
        ["run", "--config", str(tmp_path / "missing.json")],
        input="ping\n:status\n:quit\n",
    )

    assert result.exit_code == 0, result.output
    assert "Bridge started" in result.stdout
    assert "Bridge running" in result.stdout


def test_run_without_bridge_keeps_going(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BRIDGE_CMD", raising=False)
    monkeypatch.setenv("BRIDGESHELL_BRIDGE__PACKAGE_MANAGER", "bridgeshell-missing-package-manager")

    result = runner.invoke(
        app,
        ["run", "--config", str(tmp_path / "missing.json")],
        input="ping\n",
    )

    assert result.exit_code == 0, result.output
    assert "continuing without it" in result.stdout
    assert "Write failed" in result.stdout


def test_print_event_shows_both_streams() -> None:
    with console.capture() as capture:
        _print_event(BridgeEvent(name=STDOUT_EVENT, line="hello [not markup]", pid=1))
        _print_event(BridgeEvent(name=STDERR_EVENT, line="warning: slow", pid=1))
    text = capture.get()
    assert "hello [not markup]" in text
    assert "warning: slow" in text
