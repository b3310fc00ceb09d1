"""Logging configuration for nativeftp.

All library loggers live under the ``nativeftp`` namespace. Handlers
installed by ``setup_logging`` pass every line through ``redact`` so
passwords, ``PASS`` commands and credential URLs never reach a log.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import List, Optional, Pattern, Tuple, Union

LOGGER_NAME = "nativeftp"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotate the log file at 1 MB, keeping three old files
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

REDACTED = "[REDACTED]"

PII_PATTERNS: List[Tuple[Pattern, str]] = [
    # key=value, key: value and JSON style password fields
    (re.compile(r'((?:password|passwd)["\'\s:=]+)[^\s,}\]]+', re.IGNORECASE), r"\1" + REDACTED),
    # PASS command on the control channel
    (re.compile(r"(\bPASS\s+)\S+"), r"\1" + REDACTED),
    # ftp:// and ftps:// URLs with user info
    (re.compile(r"(ftps?)://[^:/@\s]+:[^@\s]+@"), r"\1://" + REDACTED + "@"),
    # Last two octets of IPv4 addresses
    (re.compile(r"(\d+\.\d+\.)\d+\.\d+"), r"\1*.*"),
]

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def redact(message: str) -> str:
    """Apply every PII pattern to ``message``."""
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts PII from the fully formatted line."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def _build_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(PIIRedactingFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the package logger, replacing handlers from earlier calls.

    Args:
        level: Logging level or level name
        log_file: Optional rotating log file, parent directories are created
        console: Also log to stdout

    Returns:
        The package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        logger.addHandler(_build_handler(logging.StreamHandler(sys.stdout), level))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        logger.addHandler(_build_handler(file_handler, level))

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Package logger, or the child logger ``nativeftp.<name>``."""
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
