"""Risk CLI command -- score a list of typed changes."""

from pathlib import Path

import typer

from ..impact.risk import RiskScorer
from . import app
from ._common import command_errors, emit, load_json, resolve_config, section


@app.command()
def risk(
    ctx: typer.Context,
    changes: Path = typer.Argument(..., help='Change list, or {"changes": [...]} (JSON)'),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Score a list of changes from 0 to 100 and assign a risk level.

    Each change is {"type": "field" | "validationRule", "operation":
    "create" | "update" | "delete", "fieldType", "required", "unique"}.
    """
    data = load_json(changes)

    with command_errors():
        config = resolve_config(ctx)
        emit(RiskScorer(config).get_risk_score(section(data, "changes")), json_output)
