"""
Logging for the export pipeline.

Every module logs through a child of the ``agentstories`` logger obtained
with ``get_logger``. Nothing is configured at import time; applications (or
the CLI) call ``setup_logging`` once.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "agentstories"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_root_logger = logging.getLogger(PACKAGE_LOGGER)
_level_before_disable: int | None = None


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
    rich: bool = False,
) -> None:
    """
    Configure the ``agentstories`` logger, replacing earlier handlers.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or int
        format: Format string for plain stream and file handlers
        stream: Output stream (defaults to stderr)
        file: Optional log file path
        rich: Render console records with rich instead of a plain format

    Example:
        setup_logging("DEBUG", rich=True)
        setup_logging("INFO", file="export.log")
    """
    numeric = _parse_level(level)
    _root_logger.setLevel(numeric)
    _root_logger.handlers.clear()

    formatter = logging.Formatter(format or DEFAULT_FORMAT)
    console_handler: logging.Handler
    if rich:
        console_handler = RichHandler(
            console=Console(file=stream or sys.stderr),
            show_path=False,
            markup=False,
        )
    else:
        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setFormatter(formatter)
    console_handler.setLevel(numeric)
    _root_logger.addHandler(console_handler)

    if file:
        file_handler = logging.FileHandler(file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(numeric)
        _root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Child logger for a submodule.

    ``get_logger("export.archive")`` and
    ``get_logger("agentstories.export.archive")`` return the same logger.
    """
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def set_level(level: str | int) -> None:
    _root_logger.setLevel(_parse_level(level))


def disable() -> None:
    """Silence the package logger and every child logger."""
    global _level_before_disable
    if _level_before_disable is None:
        _level_before_disable = _root_logger.level
    _root_logger.setLevel(logging.CRITICAL + 1)


def enable() -> None:
    """Undo ``disable``."""
    global _level_before_disable
    if _level_before_disable is not None:
        _root_logger.setLevel(_level_before_disable)
        _level_before_disable = None
