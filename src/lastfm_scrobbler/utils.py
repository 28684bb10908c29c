# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Logging and console helpers shared across the package."""

from __future__ import annotations

import logging
from typing import Final

import rich

logger: Final[logging.Logger] = logging.getLogger("lastfm_scrobbler")

LEVEL_STYLES: Final[dict[str, str]] = {
    "DEBUG": "dim",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
}


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging and quiet the HTTP libraries.

    Args:
        level: Log level for the package logger
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        force=True,  # Ensure we reset any existing handlers
    )
    logger.setLevel(level)

    # pylast logs every request at INFO
    pylast_logger = logging.getLogger("pylast")
    pylast_logger.setLevel(logging.WARNING)
    pylast_logger.addHandler(logging.NullHandler())
    pylast_logger.propagate = False

    httpx_logger = logging.getLogger("httpx")
    httpx_logger.setLevel(logging.WARNING)
    httpx_logger.propagate = False


def custom_print(message: str, level: str = "INFO") -> None:
    """Print a message to the console and mirror it to the package logger.

    Args:
        message: Text to print
        level: One of DEBUG, INFO, WARNING or ERROR
    """
    level = level.upper()
    if level not in LEVEL_STYLES:
        level = "INFO"
    style = LEVEL_STYLES[level]
    logger.log(logging.getLevelName(level), message)
    if level != "INFO":
        rich.print(f"[{style}]{level.capitalize()}:[/{style}] {message}")
    else:
        rich.print(message)
