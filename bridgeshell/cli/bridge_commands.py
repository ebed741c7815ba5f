"""Bridge-related CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.table import Table
from rich.text import Text

from bridgeshell import __logo__
from bridgeshell.bridge import BridgeError, BridgeSupervisor, SpawnResolver
from bridgeshell.bus import STDERR_EVENT, STDOUT_EVENT, BridgeEvent, EventBus

from .core import app, console

QUIT_COMMANDS = {":quit", ":q", ":exit"}


def _print_event(event: BridgeEvent) -> None:
    console.print(Text(event.line, style="dim" if event.is_stderr else ""))


def handle_input_line(supervisor: BridgeSupervisor, text: str) -> bool:
    """Apply one line typed by the user. Returns False when the session should end."""
    command = text.strip()
    if command in QUIT_COMMANDS:
        return False

    if command == ":status":
        status = supervisor.describe()
        if status.running:
            console.print(
                f"[green]Bridge running[/green] (pid {status.pid}, via {status.strategy}, "
                f"restarts {status.restarts})"
            )
        else:
            suffix = f", last exit code {status.last_exit_code}" if status.last_exit_code is not None else ""
            console.print(f"[yellow]Bridge not running[/yellow]{suffix}")
        return True

    if command == ":restart":
        try:
            handle = supervisor.restart()
        except BridgeError as e:
            console.print(f"[red]Bridge restart failed:[/red] {e}")
            return True
        console.print(f"[green]✓[/green] Bridge restarted (pid {handle.pid}, via {handle.plan.label})")
        return True

    try:
        supervisor.write(text)
    except BridgeError as e:
        console.print(f"[red]Write failed:[/red] {e}")
    return True


@app.command()
def plan(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Show the launch plans that would be tried, in priority order."""
    from bridgeshell.config.loader import load_config

    config = load_config(config_path)
    resolver = SpawnResolver(config.bridge)

    override_env = config.bridge.override_env
    if resolver.environ.get(override_env, "").strip():
        console.print(f"Override [cyan]{override_env}[/cyan] is set")
    else:
        console.print(f"[dim]Override {override_env} is not set[/dim]")

    table = Table(title="Bridge Launch Plans")
    table.add_column("#", style="dim")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Command", style="green")
    table.add_column("Working dir", style="yellow", overflow="fold")
    table.add_column("Ready")

    for index, candidate in enumerate(resolver.plans(), start=1):
        table.add_row(
            str(index),
            candidate.label,
            " ".join(candidate.argv),
            str(candidate.cwd) if candidate.cwd is not None else "[dim]-[/dim]",
            "[green]yes[/green]" if candidate.cwd is None or candidate.cwd.is_dir() else "[red]no[/red]",
        )

    console.print(table)


@app.command()
def run(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Start the bridge and relay stdin lines to it (:status, :restart, :quit)."""
    from bridgeshell.config.loader import load_config
    from bridgeshell.utils.log import setup_logging

    config = load_config(config_path)
    log_file = setup_logging(config.logging, verbose=verbose)
    if log_file is not None:
        console.print(f"Log: {log_file}")

    bus = EventBus(maxsize=config.bus.maxsize)
    bus.subscribe(STDOUT_EVENT, _print_event)
    bus.subscribe(STDERR_EVENT, _print_event)
    supervisor = BridgeSupervisor(config=config.bridge, bus=bus)
    supervisor.register_exit_hook()
    bus.start()

    console.print(f"{__logo__} Starting bridge...")
    try:
        handle = supervisor.start()
    except BridgeError as e:
        console.print(f"[yellow]Bridge unavailable, continuing without it:[/yellow] {e}")
    else:
        console.print(f"[green]✓[/green] Bridge started (pid {handle.pid}, via {handle.plan.label})")

    try:
        for line in sys.stdin:
            if not handle_input_line(supervisor, line.rstrip("\r\n")):
                break
    except KeyboardInterrupt:
        console.print("\nShutting down...")
    finally:
        supervisor.on_exit()
        bus.stop()
