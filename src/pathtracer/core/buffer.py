"""Pixel buffers the renderer writes into.

The renderer only needs two things from its output: the image dimensions and
writable access to three float channels per pixel. PixelBuffer captures that
contract; ImageBuffer is the NumPy-backed implementation used by the rest of
the package.

Example:
    >>> from pathtracer.core.buffer import ImageBuffer
    >>> buffer = ImageBuffer(4, 2)
    >>> buffer.dimensions()
    (4, 2)
    >>> buffer.pixel(3, 1)[:] = (1.0, 0.5, 0.0)
"""

from __future__ import annotations

from typing import Protocol

import numpy as np
import numpy.typing as npt


class PixelBuffer(Protocol):
    """An externally owned 2-D RGB float image."""

    def dimensions(self) -> tuple[int, int]:
        """Return (width, height) in pixels."""
        ...

    def channels(self) -> npt.NDArray[np.float32]:
        """Return a writable (height, width, 3) view of the pixel data."""
        ...


class ImageBuffer:
    """A float32 RGB image stored as a (height, width, 3) NumPy array.

    Row 0 is the top of the image, column 0 the left edge.
    """

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Image dimensions must be non-negative, got {width}x{height}")
        self._data = np.zeros((height, width, 3), dtype=np.float32)

    @classmethod
    def from_array(cls, image: npt.ArrayLike) -> ImageBuffer:
        """Wrap a copy of an existing (height, width, 3) image."""
        data = np.array(image, dtype=np.float32)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (H, W, 3), got {data.shape}")
        buffer = cls(data.shape[1], data.shape[0])
        buffer._data[...] = data
        return buffer

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    def channels(self) -> npt.NDArray[np.float32]:
        return self._data

    def pixel(self, x: int, y: int) -> npt.NDArray[np.float32]:
        """Return a mutable view of the 3 channels of pixel (x, y)."""
        return self._data[y, x]

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Return a copy of the pixel data."""
        return self._data.copy()

    def __repr__(self) -> str:
        return f"ImageBuffer(width={self.width}, height={self.height})"
