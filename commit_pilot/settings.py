"""Logging for commit-pilot.

Every module logs through ``commit_pilot_logger``. ERROR records are the
diagnostic channel of a failed completion (request params, provider message,
setup help), so the configurable level is capped at ERROR: a level such as
``CRITICAL`` in ``COMMIT_PILOT_LOG_LEVEL`` quiets debug/info chatter but never
hides a failure report.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final, TextIO


LOG_LEVEL_ENV_VAR: Final[str] = "COMMIT_PILOT_LOG_LEVEL"
DIAGNOSTIC_LEVEL: Final[int] = logging.ERROR

_REGISTERED_LOGGERS: set[logging.Logger] = set()

_RESET: Final[str] = "\033[0m"
_LEVEL_COLORS: Final[dict[int, str]] = {
    logging.DEBUG: "\033[2;38;2;140;150;160m",
    logging.INFO: "\033[38;2;96;180;255m",
    logging.WARNING: "\033[1;38;2;255;200;87m",
    logging.ERROR: "\033[1;38;2;240;84;84m",
    logging.CRITICAL: "\033[1;38;2;200;40;120m",
}


class _PilotFormatter(logging.Formatter):
    """Render ``[LEVEL::logger] message``, colored when the stream is a terminal."""

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        line = f"[{record.levelname}::{record.name}] {super().format(record)}"
        color = _LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return line
        return f"{color}{line}{_RESET}"


def _supports_color(stream: TextIO) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _cap(level: int) -> int:
    return min(level, DIAGNOSTIC_LEVEL)


def _level_from_env() -> int | None:
    level_name = os.getenv(LOG_LEVEL_ENV_VAR)
    if not level_name:
        return None

    level = logging.getLevelName(level_name.strip().upper())
    return _cap(level) if isinstance(level, int) else None


def commit_pilot_logger(name: str, stream: TextIO | None = None) -> logging.Logger:
    """Return the logger for *name* with a single stderr handler attached."""

    logger = logging.getLogger(name)

    if not logger.handlers:
        target = stream or sys.stderr
        handler = logging.StreamHandler(target)
        handler.setFormatter(_PilotFormatter(use_color=_supports_color(target)))
        logger.addHandler(handler)

    level = _level_from_env()
    if level is not None:
        logger.setLevel(level)
    _REGISTERED_LOGGERS.add(logger)

    return logger


def set_commit_pilot_log_level(level_name: str) -> None:
    """Apply *level_name* to every logger created via ``commit_pilot_logger``."""

    os.environ[LOG_LEVEL_ENV_VAR] = level_name
    level = _level_from_env()

    for logger in _REGISTERED_LOGGERS:
        logger.setLevel(level if level is not None else logging.NOTSET)
