"""Logging for the back-office.

Modules log through ``get_logger(__name__)``. ``setup_logger`` is called once
by the entry point; it gives every top-level package logger the same console
handler (ANSI-coloured level names when writing to a terminal) and an
optional plain-text file handler.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Top-level packages whose module loggers share the application handlers
APP_LOGGER_NAMES = ("backoffice", "core", "database", "services", "web", "utils")

ANSI_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


class ColoredFormatter(logging.Formatter):
    """Wraps the level name in its ANSI colour."""

    def format(self, record: logging.LogRecord) -> str:
        # A copy, so the file handler sees the plain level name
        tinted = logging.makeLogRecord(record.__dict__)
        color = LEVEL_COLORS.get(record.levelno, ANSI_RESET)
        tinted.levelname = f"{color}{record.levelname}{ANSI_RESET}"
        return super().format(tinted)


def _handlers(level: int, log_file: Optional[str], colored: bool) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    formatter_class = ColoredFormatter if colored and sys.stdout.isatty() else logging.Formatter
    console.setFormatter(formatter_class(LINE_FORMAT, datefmt=TIMESTAMP_FORMAT))
    handlers: List[logging.Handler] = [console]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(path, encoding="utf-8")
        to_file.setFormatter(logging.Formatter(FILE_LINE_FORMAT, datefmt=TIMESTAMP_FORMAT))
        handlers.append(to_file)

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def setup_logger(
    name: str = "backoffice",
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    colored: bool = True,
    extra_loggers: Iterable[str] = APP_LOGGER_NAMES,
) -> logging.Logger:
    """Install the shared handlers and return the ``name`` logger.

    Args:
        name: Logger handed back to the caller
        level: Minimum level for loggers and handlers
        log_file: Also write to this file (its directory is created)
        colored: Colour level names on an interactive console
        extra_loggers: Package loggers that get the same handlers
    """
    handlers = _handlers(level, log_file, colored)

    for logger_name in dict.fromkeys((name, *extra_loggers)):
        target = logging.getLogger(logger_name)
        target.setLevel(level)
        target.handlers[:] = handlers
        target.propagate = False

    return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
