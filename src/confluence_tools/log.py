"""Logging setup for the command-line interface."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


PACKAGE_LOGGER = "confluence_tools"


def level_for_verbosity(verbosity: int) -> int:
    """Map ``-v`` counts to logging levels (0=WARNING, 1=INFO, 2+=DEBUG)."""

    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int = 0) -> logging.Logger:
    level = level_for_verbosity(verbosity)
    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    for name in (PACKAGE_LOGGER, "httpx"):
        named = logging.getLogger(name)
        named.handlers.clear()
        named.addHandler(handler)
        named.propagate = False

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return logger
