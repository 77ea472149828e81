"""Analyze CLI command -- the full impact report for one object."""

from pathlib import Path
from typing import Optional

import typer

from ..api import analyze_object
from . import app
from ._common import command_errors, emit, load_json, proposed_parts, resolve_config


@app.command()
def analyze(
    ctx: typer.Context,
    current: Path = typer.Argument(..., help="Current object metadata (JSON)"),
    proposed: Path = typer.Argument(..., help='Proposed {"fields", "validationRules"} (JSON)'),
    object_name: Optional[str] = typer.Option(
        None,
        "--object",
        "-o",
        help="Object API name (default: objectName from the current metadata)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Diff, impacts, conflicts and risk for a proposed object definition.

    [bold cyan]Examples:[/bold cyan]

      sf-impact analyze current.json proposed.json

      sf-impact analyze current.json proposed.json --object Account --json
    """
    current_data = load_json(current)
    proposed_fields, proposed_rules = proposed_parts(load_json(proposed))

    with command_errors():
        config = resolve_config(ctx)
        report = analyze_object(
            current_data,
            proposed_fields,
            proposed_rules,
            object_name=object_name,
            config=config,
        )
        emit(report, json_output)
