"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console lines are tagged by severity and colored::

    [INFO]     blue
    [SUCCESS]  green   (custom level between INFO and WARNING)
    [WARNING]  yellow
    [ERROR]    red

Levels are resolved in precedence order:
    CLI flag  >  SDRBUILD_LOG_LEVEL env var  >  INFO (default)

Optional file output via SDRBUILD_LOG_FILE / SDRBUILD_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import click

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

# ── Format strings ──────────────────────────────────────────────

# DEBUG level — full diagnostic with module:line after the tag
_FMT_DEBUG = "%(name)s:%(lineno)d — %(message)s"

# File output — always full detail
_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_TAG_COLORS: dict[str, str] = {
    "DEBUG": "white",
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red",
}


class TaggedFormatter(logging.Formatter):
    """Render ``[LEVEL] message`` with a colored tag."""

    def __init__(self, fmt: str = "%(message)s", *, color: bool = True) -> None:
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        body = super().format(record)
        tag = f"[{record.levelname}]"
        if self.color:
            tag = click.style(tag, fg=_TAG_COLORS.get(record.levelname, "white"))
        return f"{tag} {body}"


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
    color: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, SUCCESS, WARNING, ERROR).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        color: Force colored tags on or off. Defaults to "stream is a tty".
        stream: Console stream. Defaults to stdout.
    """
    numeric_level = _parse_level(level)
    stream = stream or sys.stdout
    if color is None:
        color = stream.isatty()

    # ── Console handler ─────────────────────────────────────────
    fmt = _FMT_DEBUG if numeric_level <= logging.DEBUG else "%(message)s"
    console = logging.StreamHandler(stream)
    console.setLevel(numeric_level)
    console.setFormatter(TaggedFormatter(fmt, color=color))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    # Effective root level = minimum of console and file levels
    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
