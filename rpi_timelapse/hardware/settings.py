"""Typed backend settings parsed from a :class:`ConfigMap`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.hardware.errors import InvalidSettings

Resolution = Tuple[int, int]

DEFAULT_RESOLUTION = "640x480"
DEFAULT_FRAMERATE = 1

KEY_BACKEND = "backend"
KEY_DEVICE = "device"
KEY_RESOLUTION = "resolution"
KEY_FRAMERATE = "framerate"
KEY_PIXEL_FORMAT = "pixel_format"
KEY_USE_MOCK = "use_mock"
KEY_MOCK_FOLDER = "use_mock_folder"
KEY_MOCK_REPEAT = "use_mock_repeat_frames"


def parse_resolution(value: str) -> Resolution:
    """Parse ``WIDTHxHEIGHT`` (e.g. ``640x480``); anything else is InvalidSettings."""
    parts = value.strip().split("x")
    if len(parts) != 2:
        raise InvalidSettings(f"{value!r} is not a valid resolution; use the format WIDTHxHEIGHT, eg. 640x480")
    dims = []
    for part in parts:
        try:
            dim = int(part)
        except ValueError as exc:
            raise InvalidSettings(
                f"{part!r} in {value!r} is not a valid resolution; use the format WIDTHxHEIGHT, eg. 640x480"
            ) from exc
        if dim <= 0:
            raise InvalidSettings(f"resolution {value!r} must have positive dimensions")
        dims.append(dim)
    return dims[0], dims[1]


@dataclass(frozen=True, slots=True)
class DeviceSettings:
    backend: str
    device: str
    resolution: Resolution
    framerate: int
    pixel_format: str

    @classmethod
    def from_config(cls, config: ConfigMap) -> "DeviceSettings":
        device = (config.get_string(KEY_DEVICE) or "").strip()
        if not device:
            raise InvalidSettings("a capture device is required (setting 'device')")
        try:
            framerate = config.get_int(KEY_FRAMERATE, DEFAULT_FRAMERATE)
        except ValueError as exc:
            raise InvalidSettings(f"framerate {config.get_string(KEY_FRAMERATE)!r} is not an integer") from exc
        if framerate <= 0:
            raise InvalidSettings(f"framerate must be positive (got {framerate})")
        return cls(
            backend=(config.get_string(KEY_BACKEND) or "").strip(),
            device=device,
            resolution=parse_resolution(config.get_string(KEY_RESOLUTION) or DEFAULT_RESOLUTION),
            framerate=framerate,
            pixel_format=(config.get_string(KEY_PIXEL_FORMAT) or "").strip(),
        )

    @property
    def video_size(self) -> str:
        return f"{self.resolution[0]}x{self.resolution[1]}"

    def device_options(self) -> Dict[str, str]:
        """Options common to most libav input devices (``ffmpeg -f BACKEND -r FPS -s WxH -i DEVICE``)."""
        options = {"framerate": str(self.framerate), "video_size": self.video_size}
        if self.pixel_format:
            options["pixel_format"] = self.pixel_format
        return options


@dataclass(frozen=True, slots=True)
class ReplaySettings:
    folder: Path
    repeat: bool
    resolution: Optional[Resolution] = None

    @classmethod
    def from_config(cls, config: ConfigMap) -> "ReplaySettings":
        folder = (config.get_string(KEY_MOCK_FOLDER) or "").strip()
        if not folder:
            raise InvalidSettings(f"replay camera requires '{KEY_MOCK_FOLDER}'")
        raw_resolution = config.get_string(KEY_RESOLUTION)
        return cls(
            folder=Path(folder),
            repeat=config.flag(KEY_MOCK_REPEAT),
            resolution=parse_resolution(raw_resolution) if raw_resolution else None,
        )


__all__ = [
    "DeviceSettings",
    "ReplaySettings",
    "Resolution",
    "parse_resolution",
]
