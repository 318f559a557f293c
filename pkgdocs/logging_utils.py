"""Console logging for the pkgdocs command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "pkgdocs"


def setup_logging(*, quiet: bool = False, console: Console | None = None) -> logging.Logger:
    """Attach a rich console handler to the ``pkgdocs`` logger.

    Parameters
    ----------
    quiet : bool, optional
        Only show warnings and errors when true.
    console : rich.console.Console, optional
        Console to write to; defaults to standard error.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    level = logging.WARNING if quiet else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
