"""Root logging setup shared by the capture and assembly tools."""

from __future__ import annotations

import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 2
# PyAV forwards FFmpeg's own chatter under this logger name.
DEFAULT_SUPPRESSED_LOGGERS = ("libav",)


def configure_logging(
    level: int = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppressed_loggers: Iterable[str] = DEFAULT_SUPPRESSED_LOGGERS,
) -> None:
    """Replace the root handlers with a stderr stream and an optional rotating file.

    Args:
        level: Numeric logging level applied to the root logger and its handlers.
        console: Whether to emit logs to stderr.
        log_file: Optional path for a rotating file handler; parents are created.
        max_bytes: Size at which the log file rolls over.
        backup_count: Number of rotated log files to keep.
        suppressed_loggers: Logger names raised to ERROR.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    if not handlers:
        # Keep at least one sink so errors are never dropped silently.
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    for name in suppressed_loggers:
        logging.getLogger(name).setLevel(logging.ERROR)


__all__ = ["configure_logging", "LOG_FORMAT", "LOG_DATEFMT", "DEFAULT_MAX_BYTES"]
