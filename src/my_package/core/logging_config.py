"""Logging configuration for the `my_package` namespace.

Logs go to stderr through rich so that stdout stays clean for command output
(`ci matrix --json` is consumed by other tools).
"""

from __future__ import annotations

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "my_package"


def setup_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Configure the package logger once; later calls only adjust the level."""

    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate handlers when the CLI is invoked repeatedly (tests).
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    for handler in logger.handlers:
        handler.setLevel(level)

    logger.debug("Logging initialized at level %s", logging.getLevelName(logger.level))
    return logger
