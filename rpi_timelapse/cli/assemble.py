"""``rpi-timelapse-assemble``: render the captured frames into a video."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from rpi_timelapse.app.config import load_manifest
from rpi_timelapse.app.image_logger import FRAME_PATTERN
from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.core.resource_folder import ResourceFolder
from rpi_timelapse.encoding.exporter import export_video, resolve_output_path

from .common import add_common_cli_arguments, setup_cli_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpi-timelapse-assemble",
        description="Export captured frames as a lossless VP9 webm (requires the ffmpeg CLI).",
    )
    add_common_cli_arguments(parser)
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up on ffmpeg after this many seconds",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_cli_logging(args, None, "assemble")

    try:
        manifest = load_manifest(args.manifest)
        frames = ResourceFolder(manifest.config.output_folder).require_existing()
        output = resolve_output_path(manifest.export.export_file)
        export_video(
            frames,
            FRAME_PATTERN,
            output,
            manifest.export.export_framerate,
            timeout=args.timeout,
            logger=logger,
        )
    except TimelapseError as exc:
        logger.error("export failed: %s", exc)
        return 1

    logger.info("wrote %s", output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
