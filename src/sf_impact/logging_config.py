"""
Logging configuration for sf-impact.

Analysis modules log at DEBUG (counts, skipped entries); the CLI turns that
on with --verbose. Log records go to stderr so --json output stays clean.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "sf_impact"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Route sf_impact logs through a rich handler on stderr.

    Args:
        verbose: DEBUG instead of WARNING, with source paths and locals
            in tracebacks

    Returns:
        The sf_impact root logger
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``sf_impact`` namespace; module names are prefixed."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
