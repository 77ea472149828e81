"""Batch CLI command -- conflicts, common changes and order across tickets."""

from pathlib import Path

import typer

from ..batch.aggregator import BatchAggregator
from . import app
from ._common import command_errors, emit, load_json, resolve_config, section


@app.command()
def batch(
    ctx: typer.Context,
    tickets: Path = typer.Argument(..., help='Ticket changes, or {"tickets": [...]} (JSON)'),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Check a batch of tickets before processing them together.

    Reports fields written by more than one ticket, changes several tickets
    share, the deployment order, and whether the batch size is acceptable.
    """
    data = load_json(tickets)

    with command_errors():
        config = resolve_config(ctx)
        emit(BatchAggregator(config).preview_batch(section(data, "tickets")), json_output)
