"""
Logging setup for EntropyX.

Library modules call ``get_logger(__name__)`` and log with %-style
arguments. The CLI calls ``setup_logging`` once per invocation, which sends
records to stderr through rich (and optionally to a plain-text file) so
tables printed on stdout are never interleaved with log lines.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "entropyx"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_level(verbose: bool = False, quiet: bool = False) -> int:
    """WARNING by default; quiet wins over verbose."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Install the rich stderr handler (and a file handler when requested).

    Calling this again replaces the previous handlers, so repeated CLI
    invocations in one process do not duplicate output.

    Args:
        verbose: Log at DEBUG and show source paths and locals in tracebacks
        quiet: Only log errors
        log_file: Append plain-text records to this file as well

    Returns:
        The ``entropyx`` logger
    """
    level = log_level(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``entropyx`` namespace (``entropyx.<name>``)."""
    if name is None or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
