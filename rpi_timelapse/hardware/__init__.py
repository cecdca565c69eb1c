"""Capture sessions and the factory that selects one from settings."""

from __future__ import annotations

from typing import Dict, Type

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger

from .av_camera import AvCamera
from .errors import (
    DeviceFailed,
    DeviceNoLongerAvailable,
    HardwareError,
    InvalidBuffer,
    InvalidSettings,
    MissingCapability,
    NotReady,
)
from .frame import Frame
from .replay_camera import ReplayCamera
from .session import BackendKind, CaptureSession, SessionState
from .settings import KEY_USE_MOCK

BACKENDS: Dict[BackendKind, Type[CaptureSession]] = {
    BackendKind.DEVICE: AvCamera,
    BackendKind.REPLAY: ReplayCamera,
}


class CameraFactory:
    """Build and initialize the capture session the settings ask for."""

    def __init__(self, config: ConfigMap, *, logger: LoggerLike = None) -> None:
        self._config = config
        self._logger = ensure_structured_logger(logger, fallback_name="CameraFactory")

    @property
    def kind(self) -> BackendKind:
        return BackendKind.REPLAY if self._config.flag(KEY_USE_MOCK) else BackendKind.DEVICE

    def create_camera(self) -> CaptureSession:
        kind = self.kind
        camera = BACKENDS[kind](logger=self._logger.getChild(kind.value))
        self._logger.debug("initializing %s backend", kind.value)
        camera.initialize(self._config.copy())
        return camera


__all__ = [
    "AvCamera",
    "BACKENDS",
    "BackendKind",
    "CameraFactory",
    "CaptureSession",
    "DeviceFailed",
    "DeviceNoLongerAvailable",
    "Frame",
    "HardwareError",
    "InvalidBuffer",
    "InvalidSettings",
    "MissingCapability",
    "NotReady",
    "ReplayCamera",
    "SessionState",
]
