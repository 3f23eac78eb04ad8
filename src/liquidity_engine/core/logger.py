"""
Logging for the liquidity engine.

Console output is coloured by level when attached to a terminal. A rotating
plain-text log file is added when a path is given or LOG_FILE is set.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TextIO

RESET = "\033[0m"

# ANSI color per level
LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[92m",
    logging.WARNING: "\033[93m",
    logging.ERROR: "\033[91m",
    logging.CRITICAL: "\033[91m\033[1m",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
FILE_BACKUP_COUNT = 5


class ColoredFormatter(logging.Formatter):
    """Wraps each formatted record in the color of its level."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_color:
            return message
        return f"{LEVEL_COLORS.get(record.levelno, RESET)}{message}{RESET}"


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def _console_handler(level: int, stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    is_tty = hasattr(stream, "isatty") and stream.isatty()
    handler.setFormatter(ColoredFormatter(use_color=is_tty))
    return handler


def _file_handler(level: int, path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=FILE_MAX_BYTES,
        backupCount=FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logger(
    name: str,
    level: int | str | None = None,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """
    Configure and return the logger `name`.

    A logger that already has handlers is returned unchanged.

    Args:
        name: Logger name, usually the module name
        level: Level name or number. Defaults to LOG_LEVEL, then INFO
        log_file: Rotating log file. Defaults to LOG_FILE, then none

    Example:
        >>> logger = setup_logger("liquidity_engine.BTCUSDT", level="DEBUG")
        >>> logger.info("Analyzer started")
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = _resolve_level(level)
    logger.setLevel(resolved)
    logger.addHandler(_console_handler(resolved, sys.stdout))

    log_file = log_file or os.getenv("LOG_FILE") or None
    if log_file:
        logger.addHandler(_file_handler(resolved, Path(log_file)))

    # Handlers are per logger, keep records out of the root logger
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return logger `name`, setting it up with defaults on first use."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger
