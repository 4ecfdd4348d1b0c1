"""PNG export for rendered buffers.

Channels are gamma encoded (square root by default), scaled by 255 and
truncated to 8 bits, then written as an RGB PNG via Pillow.

Example:
    >>> from pathtracer.preview.export import save_png
    >>> renderer.render(scene, buffer)
    >>> save_png(buffer, "0.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.preview.display import apply_gamma

if TYPE_CHECKING:
    from pathtracer.core.buffer import PixelBuffer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 2.0,
) -> npt.NDArray[np.uint8]:
    """Convert a [0, 1] float image to uint8.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma applied before quantization (default 2.0).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    encoded = apply_gamma(np.clip(image, 0.0, 1.0), gamma)
    # Truncating conversion
    return (encoded * 255).astype(np.uint8)


def save_png(
    buffer: PixelBuffer,
    filepath: str | Path,
    *,
    gamma: float = 2.0,
) -> Path:
    """Save a rendered buffer as a PNG file.

    Args:
        buffer: The rendered buffer.
        filepath: Output file path (should end in .png).
        gamma: Gamma applied before quantization (default 2.0).

    Returns:
        The path written.
    """
    path = Path(filepath)
    image_uint8 = image_to_uint8(buffer.channels(), gamma=gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(path)
    logger.debug("Saved %s", path)
    return path
