"""Logging setup for the ``ev_mobility_sim`` logger namespace.

Modules log through ``logging.getLogger(__name__)``; this only attaches
handlers to the package root logger, so embedding applications keep control
of their own logging.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "ev_mobility_sim"

LOG_FORMATS: dict[str, str] = {
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
    "simple": "%(levelname)s - %(message)s",
    "minimal": "%(message)s",
}


def setup_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    log_format: str = "simple",
) -> logging.Logger:
    """Configure console (stderr) and optional file logging.

    Console output goes to stderr so that profile text on stdout stays clean.
    Calling this again replaces the handlers it attached before.

    Args:
        level: Logging level name or number (DEBUG, INFO, WARNING, ...)
        log_file: Also log to this file when given
        log_format: "detailed", "simple" or "minimal"
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format {log_format!r}; choose from {sorted(LOG_FORMATS)}")
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMATS[log_format])

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
