"""Логгер проекта TabHarvest.

Console output goes to stderr so ``scan`` can print JSON on stdout. A rotating
log file is added only when the CLI passes ``--log-file``.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "TabHarvest"
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = LOG_FORMAT,
) -> logging.Logger:
    """Drop previous handlers and attach stderr (and optionally file) output."""
    formatter = logging.Formatter(log_format)
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    lg.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    lg.addHandler(console)

    if log_file is not None:
        file_handler = RotatingFileHandler(
            str(log_file), maxBytes=_MAX_LOG_BYTES, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        lg.addHandler(file_handler)

    lg.propagate = False
    return lg


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["logger", "init_logging", "LOGGER_NAME", "LOG_FORMAT"]
