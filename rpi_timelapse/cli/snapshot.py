"""``rpi-timelapse-snapshot``: capture frames until the run lock is removed."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from rpi_timelapse.app.config import load_manifest
from rpi_timelapse.app.snapshot import SnapshotApp
from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.core.logging_config import configure_logging
from rpi_timelapse.core.logging_utils import get_module_logger

from .common import LOG_LEVELS, add_common_cli_arguments, install_exception_handlers, log_startup, setup_cli_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpi-timelapse-snapshot",
        description="Capture time-lapse frames on a fixed schedule. Delete the lock file to stop.",
    )
    add_common_cli_arguments(parser)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        manifest = load_manifest(args.manifest)
        app = SnapshotApp(manifest)
    except TimelapseError as exc:
        configure_logging(LOG_LEVELS[args.log_level], console=True)
        get_module_logger("snapshot").error("unable to start: %s", exc)
        return 1

    logger = setup_cli_logging(args, app.log_path, "snapshot")
    install_exception_handlers(logger)
    log_startup(
        logger,
        "TIME-LAPSE SNAPSHOT START",
        manifest=args.manifest,
        output_folder=manifest.config.output_folder,
        lock_file=manifest.config.lock_file,
    )

    try:
        samples = app.run()
    except TimelapseError as exc:
        logger.error("capture failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.warning("interrupted")
        return 130

    logger.info("captured %d frames", samples)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
