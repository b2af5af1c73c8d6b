"""Rotating JSON-line logger and the console sink used by every component."""

from __future__ import annotations

import json
import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape

LOGGER_NAME = "dlmmbot"

LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LEVEL_STYLES: Dict[str, str] = {
    "debug": "dim",
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}


def configure_logging(path: Path, *, max_bytes: int = 1_000_000, backup_count: int = 5) -> logging.Logger:
    """Attach a rotating file handler writing to *path* and return the logger.

    Calling this again with another path replaces the previous file handler,
    so a session (or a test) always writes to exactly one file.
    """

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


class LogSink:
    """Emit operator-facing lines to the console and structured records to the log.

    Components receive a sink instead of printing directly. A sink without a
    console only records to the ``dlmmbot`` logger, which keeps the stores
    silent when they are used outside the interactive session.
    """

    def __init__(self, *, console: Optional[Console] = None, logger: Optional[logging.Logger] = None) -> None:
        self.console = console
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def emit(self, level: str, message: str, **fields: Any) -> None:
        level = level.lower()
        numeric = LEVELS.get(level, logging.INFO)
        record: Dict[str, Any] = {"ts": time.time(), "level": level, "message": message}
        record.update(fields)
        self.logger.log(numeric, json.dumps(record, default=str, sort_keys=True))
        if self.console is not None:
            style = LEVEL_STYLES.get(level, "")
            self.console.print(f"[{style}]{escape(message)}[/]" if style else escape(message))

    def info(self, message: str, **fields: Any) -> None:
        self.emit("info", message, **fields)

    def success(self, message: str, **fields: Any) -> None:
        self.emit("success", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.emit("warning", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.emit("error", message, **fields)

    def exception(self, message: str, exc: BaseException) -> None:
        """Record *exc* with its traceback and show a single line to the operator."""

        self.logger.error(
            json.dumps({"ts": time.time(), "level": "error", "message": message}),
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        if self.console is not None:
            self.console.print(f"[bold red]{escape(message)}: {escape(str(exc) or type(exc).__name__)}[/]")


__all__ = ["LEVELS", "LOGGER_NAME", "LogSink", "configure_logging"]
