"""Process-wide logging set-up."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

ENV_VAR = "FACTORIO_MOD_MANAGER_LOG"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 10,
}

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _LocalTimeFormatter(logging.Formatter):
    """Formatter stamping records with RFC 3339 local time."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone()
        return stamp.isoformat(timespec="microseconds")


def _parse_level(text: str) -> int | None:
    return _LEVELS.get(text.strip().lower())


def init(default_level: str) -> int:
    """Configure the root logger to write to stdout and return the chosen level.

    The level comes from the ``FACTORIO_MOD_MANAGER_LOG`` environment variable
    when it names a valid level, otherwise from ``default_level``.
    """
    level = _parse_level(os.environ.get(ENV_VAR, ""))
    if level is None:
        level = _parse_level(default_level)
        if level is None:
            raise ValueError(f"unknown log level: {default_level!r}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_LocalTimeFormatter(_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return level