"""Logging setup.

All modules log under the `superglue` logger. Records are rendered by Rich
on stderr so that stdout stays free for the notices a run prints (diffs,
scheduled time, registry receipt).
"""

from __future__ import annotations

import logging
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "superglue"


class LogLevel(str, Enum):
    """Log levels selectable from the command line."""

    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def default(cls) -> "LogLevel":
        return cls.INFO

    def to_logging(self) -> int:
        return logging.DEBUG if self is LogLevel.DEBUG else logging.INFO


def configure_logging(level: LogLevel = LogLevel.INFO, *, console: Console | None = None) -> logging.Logger:
    """Attach a Rich handler to the `superglue` logger and set its level."""

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.to_logging())
    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger of `superglue`, e.g. `get_logger("parser")`."""

    return logging.getLogger(f"{LOGGER_NAME}.{name}")
