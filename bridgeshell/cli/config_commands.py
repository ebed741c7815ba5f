"""Config-related CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from .core import app, console

config_app = typer.Typer(help="Manage configuration")
app.add_typer(config_app, name="config")


@config_app.command("init")
def config_init(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a default configuration file."""
    from bridgeshell.config.loader import get_config_path, save_config
    from bridgeshell.config.schema import Config

    path = config_path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config(), path)
    console.print(f"[green]✓[/green] Created config at {path}")


@config_app.command("show")
def config_show(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Print the effective configuration."""
    from bridgeshell.config.loader import convert_to_camel, load_config

    config = load_config(config_path)
    console.print_json(json.dumps(convert_to_camel(config.model_dump())))
