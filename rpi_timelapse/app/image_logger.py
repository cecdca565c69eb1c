"""Persistence of captured frames as PNG files."""

from __future__ import annotations

from pathlib import Path

from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.core.resource_folder import ResourceFolder
from rpi_timelapse.core.scheduler import TimeSnapshot
from rpi_timelapse.hardware.frame import Frame

FRAME_SUFFIX = ".png"
FRAME_PATTERN = f"*{FRAME_SUFFIX}"


class OutputError(TimelapseError):
    """A frame could not be written."""


def frame_filename(snapshot: TimeSnapshot) -> str:
    # Epoch milliseconds first so name order is capture order.
    return f"{snapshot.timestamp}-{snapshot.utc:%Y%m%dT%H%M%SZ}{FRAME_SUFFIX}"


class ImageLogger:

    def __init__(self, output_folder: ResourceFolder, *, logger: LoggerLike = None) -> None:
        self._output = output_folder
        self._logger = ensure_structured_logger(logger, fallback_name="ImageLogger")

    def save(self, frame: Frame, snapshot: TimeSnapshot) -> Path:
        path = self._output.path(frame_filename(snapshot))
        try:
            frame.save(path)
        except (OSError, ValueError) as exc:
            raise OutputError(f"failed to save frame {path}: {exc}") from exc
        self._logger.debug("wrote %s", path.name)
        return path


__all__ = ["FRAME_PATTERN", "ImageLogger", "OutputError", "frame_filename"]
