"""Global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from . import app
from ._common import console


def _show_version(value: bool) -> None:
    if value:
        from .. import __version__

        console.print(f"[bold cyan]sf-impact[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=_show_version,
        is_eager=True,
    ),
):
    """
    Analyze the impact of proposed Salesforce metadata changes.

    [bold cyan]Examples:[/bold cyan]

      sf-impact diff current.json proposed.json

      sf-impact analyze current.json proposed.json --object Account

      sf-impact risk changes.json --json

      sf-impact batch tickets.json
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose)
