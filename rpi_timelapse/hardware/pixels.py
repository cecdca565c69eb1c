"""Pixel conversion into the packed RGB24 layout used for every frame.

Sources come in two shapes: PyAV video frames straight from a decoder (any
native pixel format) and numpy arrays from OpenCV, which stores color images
in BGR(A) order. Both end up as a flat ``uint8`` buffer of exactly
``width * height * 3`` bytes; anything else is rejected with InvalidBuffer.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

import cv2
import numpy as np

from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.hardware.errors import InvalidBuffer
from rpi_timelapse.hardware.frame import BYTES_PER_PIXEL, Frame

TARGET_FORMAT = "rgb24"

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]

# cv2.cvtColor codes keyed by source layout; None means already RGB.
_CONVERSIONS = {
    "gray": cv2.COLOR_GRAY2RGB,
    "bgr": cv2.COLOR_BGR2RGB,
    "bgra": cv2.COLOR_BGRA2RGB,
    "rgb": None,
    "rgba": cv2.COLOR_RGBA2RGB,
    "i420": cv2.COLOR_YUV2RGB_I420,
}

_LAYOUT_CHANNELS = {"gray": 1, "bgr": 3, "bgra": 4, "rgb": 3, "rgba": 4, "i420": 1}

_LAYOUT_ALIASES = {
    "bgr24": "bgr",
    "rgb24": "rgb",
    "bgr32": "bgra",
    "gray8": "gray",
    "l": "gray",
    "yuv420p": "i420",
    "yuv420": "i420",
}

# OpenCV decodes stills in BGR(A) order.
_CHANNEL_LAYOUTS = {1: "gray", 3: "bgr", 4: "bgra"}


def expected_buffer_size(width: int, height: int) -> int:
    return width * height * BYTES_PER_PIXEL


def frame_from_buffer(data: BufferLike, width: int, height: int) -> Frame:
    """Wrap ``data`` as a Frame; its length must be exactly ``width*height*3``."""
    if width <= 0 or height <= 0:
        raise InvalidBuffer(f"invalid frame geometry {width}x{height}")
    if isinstance(data, np.ndarray):
        if data.dtype != np.uint8:
            raise InvalidBuffer(f"frame data must be uint8, got {data.dtype}")
        flat = data.reshape(-1)
    else:
        flat = np.frombuffer(data, dtype=np.uint8)
    required = expected_buffer_size(width, height)
    if flat.size != required:
        raise InvalidBuffer(f"required size {required} != data size {flat.size}")
    return Frame(width=width, height=height, data=flat)


def _normalize_layout(layout: Optional[str]) -> Optional[str]:
    if not layout:
        return None
    name = layout.strip().lower()
    name = _LAYOUT_ALIASES.get(name, name)
    if name not in _CONVERSIONS:
        raise InvalidBuffer(f"unsupported pixel layout {layout!r}")
    return name


def _to_uint8(array: np.ndarray) -> np.ndarray:
    if array.dtype == np.uint8:
        return array
    if array.dtype == np.uint16:
        return (array >> 8).astype(np.uint8)
    raise InvalidBuffer(f"unsupported sample type {array.dtype}")


def to_packed_rgb(array: Any, layout: Optional[str] = None) -> np.ndarray:
    """Convert ``array`` to a contiguous (height, width, 3) RGB array.

    Without ``layout`` the channel count decides: 1 = gray, 3 = BGR, 4 = BGRA.
    """
    source = np.asarray(array)
    if source.ndim == 3 and source.shape[2] == 1:
        source = source[..., 0]
    if source.ndim not in (2, 3):
        raise InvalidBuffer(f"cannot convert array with shape {source.shape}")
    source = _to_uint8(source)

    channels = 1 if source.ndim == 2 else source.shape[2]
    fmt = _normalize_layout(layout)
    if fmt is None:
        fmt = _CHANNEL_LAYOUTS.get(channels)
        if fmt is None:
            raise InvalidBuffer(f"cannot infer pixel layout for {channels} channels")
    if _LAYOUT_CHANNELS[fmt] != channels:
        raise InvalidBuffer(f"{fmt} data needs {_LAYOUT_CHANNELS[fmt]} channels, got {channels}")

    if fmt == "i420":
        rows, width = source.shape
        if rows % 3 or (rows * 2 // 3) % 2 or width % 2:
            raise InvalidBuffer(f"I420 plane of shape {source.shape} has no valid geometry")

    code = _CONVERSIONS[fmt]
    rgb = source if code is None else cv2.cvtColor(np.ascontiguousarray(source), code)
    return np.ascontiguousarray(rgb)


class PixelConverter:
    """Reusable RGB24 scratch buffer for one fixed geometry.

    The buffer is allocated on the first conversion and handed to
    ``on_allocate`` (as a release callback) so the owning session can free it
    during its ordered teardown.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        on_allocate: Optional[Callable[[Callable[[], None]], Any]] = None,
        logger: LoggerLike = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise InvalidBuffer(f"invalid frame geometry {width}x{height}")
        self.width = width
        self.height = height
        self._on_allocate = on_allocate
        self._logger = ensure_structured_logger(logger, fallback_name="PixelConverter")
        self._scratch: Optional[np.ndarray] = None

    @property
    def buffer_size(self) -> int:
        return expected_buffer_size(self.width, self.height)

    @property
    def allocated(self) -> bool:
        return self._scratch is not None

    def convert(self, source: Any) -> Frame:
        """Convert a decoded PyAV video frame; geometry must match exactly."""
        if (source.width, source.height) != (self.width, self.height):
            raise InvalidBuffer(
                f"decoded frame is {source.width}x{source.height}, expected {self.width}x{self.height}"
            )
        rgb = source.reformat(format=TARGET_FORMAT)
        return self.load(rgb.to_ndarray())

    def load(self, array: np.ndarray) -> Frame:
        """Copy an already packed RGB24 array into the scratch buffer."""
        if array.dtype != np.uint8:
            raise InvalidBuffer(f"frame data must be uint8, got {array.dtype}")
        if array.size != self.buffer_size:
            raise InvalidBuffer(f"required size {self.buffer_size} != data size {array.size}")
        scratch = self._scratch_buffer()
        np.copyto(scratch, array.reshape(-1))
        return Frame(width=self.width, height=self.height, data=scratch)

    def release(self) -> None:
        if self._scratch is not None:
            self._logger.debug("released %dx%d scratch buffer", self.width, self.height)
        self._scratch = None

    def _scratch_buffer(self) -> np.ndarray:
        if self._scratch is None:
            self._scratch = np.empty(self.buffer_size, dtype=np.uint8)
            self._logger.debug("allocated %dx%d scratch buffer (%d bytes)", self.width, self.height, self.buffer_size)
            if self._on_allocate is not None:
                self._on_allocate(self.release)
        return self._scratch


__all__ = [
    "PixelConverter",
    "TARGET_FORMAT",
    "expected_buffer_size",
    "frame_from_buffer",
    "to_packed_rgb",
]
