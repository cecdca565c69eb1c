from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from rpi_timelapse.core.logging_config import configure_logging
from rpi_timelapse.core.logging_utils import StructuredLogger, get_module_logger


LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def add_common_cli_arguments(
    parser: argparse.ArgumentParser,
    *,
    include_console_control: bool = True,
    default_console_output: bool = True,
) -> None:
    parser.add_argument(
        "manifest",
        type=Path,
        help="Manifest file (key = value) describing the capture run",
    )

    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default="info",
        help="Logging verbosity",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Override the log file location (defaults to app.log in the manifest's log folder)",
    )

    if include_console_control:
        console_group = parser.add_mutually_exclusive_group()
        console_group.add_argument(
            "--console",
            dest="console_output",
            action="store_true",
            default=default_console_output,
            help="Also log to console (in addition to file)",
        )
        console_group.add_argument(
            "--no-console",
            dest="console_output",
            action="store_false",
            help="Log to file only (no console output)",
        )


def setup_cli_logging(args: Any, default_log_file: Optional[Path], name: str) -> StructuredLogger:
    log_file = args.log_file or default_log_file
    configure_logging(
        LOG_LEVELS[args.log_level],
        console=getattr(args, "console_output", True),
        log_file=log_file,
    )
    logger = get_module_logger(name)
    if log_file:
        logger.info("logs will be written to %s", log_file)
    return logger


def install_exception_handlers(logger: StructuredLogger) -> None:
    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback)
        )

    sys.excepthook = handle_exception


def log_startup(logger: StructuredLogger, title: str, **extra_info) -> None:
    logger.info("=" * 60)
    logger.info("%s", title)
    for key, value in extra_info.items():
        logger.info("%s: %s", key.replace("_", " ").title(), value)
    logger.info("=" * 60)


__all__ = [
    "LOG_LEVELS",
    "add_common_cli_arguments",
    "install_exception_handlers",
    "log_startup",
    "setup_cli_logging",
]
