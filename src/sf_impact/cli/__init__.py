"""CLI entry point — registers all subcommands."""

import typer

app = typer.Typer(
    name="sf-impact",
    help="sf-impact - Impact analysis for proposed Salesforce metadata changes",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .diff import diff as _diff  # noqa: F401, E402
from .analyze import analyze as _analyze  # noqa: F401, E402
from .risk import risk as _risk  # noqa: F401, E402
from .batch import batch as _batch  # noqa: F401, E402
