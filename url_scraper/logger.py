"""
Logging configuration for the URL scraper.

All stages log through children of the "url_scraper" logger, so configuring
that one logger (console, optional file, level) configures the whole package.
"""

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Accept logging.DEBUG or a name such as "debug" (as found in config)."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _has_file_handler(logger: logging.Logger, log_file: str) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def setup_logger(
    name: str = "url_scraper",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the package logger.

    The console handler is attached on the first call only. Later calls
    (the CLI scripts run after import) re-apply the level to the logger and
    its handlers, and attach a file handler for a log_file not yet in use.

    Args:
        name: Logger name
        level: Level as int or name
        log_file: Optional file path to also log to

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = resolve_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file and not _has_file_handler(logger, log_file):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


# Package logger, console only, configured at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """Child logger for one module, e.g. "url_scraper.fetcher"."""
    return logging.getLogger(f"url_scraper.{module_name}")
