"""
Logging configuration for curlkit.

Console logging for the CLI, optional rotating file log, and a tally of
failed sends kept by the Sender.
"""

import logging
import sys
from collections import Counter
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any


DEFAULT_LOG_FILE = Path.home() / ".curlkit" / "logs" / "curlkit.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_FORMAT = (
    '%(asctime)s | %(levelname)-8s | %(name)-24s | %(funcName)-16s | '
    '%(lineno)-4d | %(message)s'
)


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    enable_console: bool = True,
    enable_file: bool = False,
) -> logging.Logger:
    """
    Attach handlers to the ``curlkit`` logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ...)
        log_file: File log path, defaults to ~/.curlkit/logs/curlkit.log
        enable_console: Log to stderr
        enable_file: Log everything from DEBUG up to a rotating file

    Returns:
        The package logger
    """
    logger = logging.getLogger("curlkit")
    logger.setLevel(logging.DEBUG if enable_file else getattr(logging, level.upper()))
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(console_handler)

    if enable_file:
        log_path = Path(log_file) if log_file else DEFAULT_LOG_FILE
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    # the CLI owns the output, keep records away from the root logger
    logger.propagate = False
    return logger


def configure_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Logging for the CLI: warnings only unless --debug, file when --log-file."""
    setup_logging(
        level="DEBUG" if debug else "WARNING",
        log_file=log_file,
        enable_file=log_file is not None,
    )


class FailureKind(str, Enum):
    """Ways Sender.send() can give up on a request."""
    TRANSFER_FAILED = "transfer_failed"
    BAD_STATUS = "bad_status"
    TOO_MANY_REDIRECTS = "too_many_redirects"


class FailureTracker:
    """Counts failed sends per kind and per host."""

    def __init__(self):
        self.by_kind: Counter[str] = Counter()
        self.by_host: Counter[str] = Counter()
        self.logger = logging.getLogger("curlkit.failures")

    def record(self, kind: FailureKind, request: Any, detail: str = "") -> None:
        kind = FailureKind(kind)
        host = request.url.host or "-"
        self.by_kind[kind.value] += 1
        self.by_host[host] += 1

        message = f"{kind.value}: {request.method} {request.url}"
        if detail:
            message += f" ({detail})"
        self.logger.warning(message)

    def reset(self) -> None:
        self.by_kind.clear()
        self.by_host.clear()


_tracker = FailureTracker()


def track_error(kind: FailureKind, request: Any, detail: str = "") -> None:
    """Record a failed send of ``request``."""
    _tracker.record(kind, request, detail)


def get_error_stats() -> dict[str, int]:
    """Failure counts keyed by FailureKind value."""
    return dict(_tracker.by_kind)


def get_host_stats() -> dict[str, int]:
    """Failure counts keyed by request host."""
    return dict(_tracker.by_host)


def reset_error_stats() -> None:
    _tracker.reset()
