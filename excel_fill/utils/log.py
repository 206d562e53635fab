"""Logging helpers for the excel_fill package."""

# Module responsibilities:
# - Configure the package logger once with a stream handler and an optional
#   rotating file handler.
# - Provide get_logger() returning loggers scoped under ``excel_fill``.

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

ROOT_LOGGER_NAME = "excel_fill"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LOG_CONFIGURED = False


def configure_logging(level: str = "INFO", log_dir: str | Path | None = None) -> None:
    """Configure the package logger once with console + optional file handlers."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.upper())

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            directory / "excel_fill.log", maxBytes=2_000_000, backupCount=3
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False
    _LOG_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Module name; a leading ``excel_fill.`` prefix is not repeated.

    Returns:
        Logger under the ``excel_fill`` namespace.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
