"""Shared CLI helpers."""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Tuple

import typer
from rich.console import Console

from ..config import AnalyzerConfig, load_config
from ..exceptions import SfImpactError
from ..formatters import get_formatter
from ..logging_config import get_logger

console = Console()

logger = get_logger(__name__)


def resolve_config(ctx: typer.Context) -> AnalyzerConfig:
    """Build configuration from the global CLI options."""
    obj = ctx.obj or {}
    overrides = {}
    if obj.get("verbose"):
        overrides["verbose"] = True
    return load_config(config_file=obj.get("config"), **overrides)


def load_json(path: Path) -> Any:
    """Read a JSON input file; unreadable or malformed files exit 1."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        console.print(f"[red]Error:[/red] cannot read {path}: {e.strerror or e}")
        raise typer.Exit(1)
    except UnicodeDecodeError as e:
        console.print(f"[red]Error:[/red] not UTF-8 text in {path}: {e.reason}")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] invalid JSON in {path}: {e}")
        raise typer.Exit(1)


def proposed_parts(data: Any) -> Tuple[Any, Any]:
    """(fields, validation rules) from a proposal object, or a bare field list."""
    if isinstance(data, dict):
        rules = data.get("validationRules")
        return data.get("fields"), rules if rules is not None else data.get("validation_rules")
    return data, None


def section(data: Any, key: str) -> Any:
    """``data[key]`` when ``data`` is an object, ``data`` itself when it is a list."""
    if isinstance(data, dict):
        return data.get(key)
    return data


def emit(result: Any, json_output: bool) -> None:
    get_formatter("json" if json_output else "rich").render(result)


@contextmanager
def command_errors() -> Iterator[None]:
    """Map sf-impact errors to a red message and exit code 1."""
    try:
        yield
    except typer.Exit:
        raise
    except SfImpactError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
