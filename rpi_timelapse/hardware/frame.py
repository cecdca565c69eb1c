"""Frame handed from a capture session to persistence."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

BYTES_PER_PIXEL = 3


@dataclass(frozen=True, slots=True)
class Frame:
    """Packed RGB24 pixels, ``width * height * 3`` bytes.

    ``data`` is a view on a buffer owned by the capture session; it is only
    valid until the session's next ``next()`` or ``shutdown()``.
    """

    width: int
    height: int
    data: np.ndarray

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def buffer_size(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    def as_array(self) -> np.ndarray:
        """Return an (height, width, 3) view of the pixel data."""
        return self.data.reshape(self.height, self.width, BYTES_PER_PIXEL)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.as_array())

    def save(self, path: Union[str, Path]) -> None:
        self.to_image().save(path)


__all__ = ["BYTES_PER_PIXEL", "Frame"]
