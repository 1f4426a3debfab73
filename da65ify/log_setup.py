"""
Logging setup for the da65ify command line.

Console output goes through rich on stderr (stdout stays free for the
final summary); an optional log file captures everything at DEBUG with
the pipe-delimited format used across the toolchain's other tools.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

__all__ = ['LOGGER_NAME', 'FILE_FORMAT', 'setup_logging']

LOGGER_NAME = "da65ify"
FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Calling it again replaces the handlers, so the CLI can be invoked
    repeatedly in one process (tests do this).

    Args:
        console_level: Level for the rich console handler
        log_file: Also log DEBUG+ to this file when given
        console: Console to log to (defaults to a stderr console)
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    ch = RichHandler(
        console=console or Console(stderr=True),
        level=console_level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    logger.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_path)

    return logger
