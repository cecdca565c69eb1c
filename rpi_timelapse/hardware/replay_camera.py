"""Deterministic stand-in camera that replays still images from a folder."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.errors import ResourceError
from rpi_timelapse.core.logging_utils import LoggerLike
from rpi_timelapse.core.resource_folder import ResourceFolder
from rpi_timelapse.hardware.errors import (
    DeviceFailed,
    DeviceNoLongerAvailable,
    InvalidBuffer,
    InvalidSettings,
)
from rpi_timelapse.hardware.frame import Frame
from rpi_timelapse.hardware.pixels import frame_from_buffer, to_packed_rgb
from rpi_timelapse.hardware.session import BackendKind, CaptureSession
from rpi_timelapse.hardware.settings import ReplaySettings


class ReplayCamera(CaptureSession):
    """Serve the files of a folder in name order, optionally wrapping around."""

    kind = BackendKind.REPLAY

    def __init__(self, *, logger: LoggerLike = None) -> None:
        super().__init__(logger=logger)
        self.settings: Optional[ReplaySettings] = None
        self._frames: List[Path] = []
        self._offset = -1
        self._active: Optional[np.ndarray] = None

    @property
    def frames(self) -> List[Path]:
        return list(self._frames)

    @property
    def current_path(self) -> Optional[Path]:
        if 0 <= self._offset < len(self._frames):
            return self._frames[self._offset]
        return None

    def _open(self, config: ConfigMap) -> None:
        settings = ReplaySettings.from_config(config)
        try:
            folder = ResourceFolder(settings.folder).require_existing()
            frames = folder.enumerate_files()
        except ResourceError as exc:
            raise InvalidSettings(str(exc)) from exc
        if not frames:
            self._logger.warning("replay folder %s is empty", settings.folder)
        self.settings = settings
        self._frames = frames
        self._offset = -1
        self._resources.callback(self._drop_active)
        self._logger.info(
            "replaying %d frames from %s (repeat=%s)", len(frames), settings.folder, settings.repeat
        )

    def _read(self) -> Frame:
        self._offset += 1
        if self._offset >= len(self._frames):
            if self.settings.repeat and self._frames:
                self._offset = 0
            else:
                self._offset = len(self._frames)
                raise DeviceNoLongerAvailable("ran out of replay frames")
        return self._load(self._frames[self._offset])

    def _load(self, path: Path) -> Frame:
        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if image is None:
            raise DeviceFailed(f"unable to decode replay frame {path}")
        rgb = to_packed_rgb(image)
        height, width = rgb.shape[:2]
        expected = self.settings.resolution
        if expected is not None and (width, height) != expected:
            raise InvalidBuffer(f"{path.name} is {width}x{height}, expected {expected[0]}x{expected[1]}")
        self._active = rgb.reshape(-1)
        return frame_from_buffer(self._active, width, height)

    def _drop_active(self) -> None:
        self._active = None
        self._frames = []


__all__ = ["ReplayCamera"]
