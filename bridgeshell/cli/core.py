"""Shared CLI application context and setup helpers."""

from __future__ import annotations

import typer
from rich.console import Console

from bridgeshell import __logo__, __version__

app = typer.Typer(
    name="bridgeshell",
    help=f"{__logo__} bridgeshell - companion bridge supervisor",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} bridgeshell v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
    """bridgeshell - companion bridge supervisor."""
