"""Diff CLI command -- field and rule deltas for one object."""

from pathlib import Path

import typer

from ..diff.comparator import MetadataComparator
from . import app
from ._common import command_errors, emit, load_json, proposed_parts, resolve_config


@app.command()
def diff(
    ctx: typer.Context,
    current: Path = typer.Argument(..., help="Current object metadata (JSON)"),
    proposed: Path = typer.Argument(..., help='Proposed {"fields", "validationRules"} (JSON)'),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show what the proposed definition adds, modifies and removes.

    [bold cyan]Examples:[/bold cyan]

      sf-impact diff current.json proposed.json

      sf-impact diff current.json proposed.json --json
    """
    current_data = load_json(current)
    proposed_fields, proposed_rules = proposed_parts(load_json(proposed))

    with command_errors():
        config = resolve_config(ctx)
        result = MetadataComparator(config).generate_diff(
            current_data,
            proposed_fields,
            proposed_rules,
        )
        emit(result, json_output)
