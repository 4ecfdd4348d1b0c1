"""Display transforms and Matplotlib preview for rendered images.

The renderer stores linear radiance divided by its max_value and clamped to
[0, 1] (tone_map_linear). Display encoding is a separate step: apply_gamma()
raises each channel to 1 / gamma, and the default gamma of 2.0 gives the
square-root encoding used for PNG output.

Example:
    >>> from pathtracer.core.buffer import ImageBuffer
    >>> from pathtracer.preview.display import show_preview
    >>> buffer = ImageBuffer(256, 256)
    >>> renderer.render(scene, buffer)
    >>> show_preview(buffer, title="box")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from pathtracer.core.buffer import PixelBuffer


def tone_map_linear(
    image: npt.NDArray[np.float32],
    max_value: float,
) -> npt.NDArray[np.float32]:
    """Divide every channel by max_value and clamp to [0, 1].

    Args:
        image: Linear radiance image of shape (H, W, 3).
        max_value: The radiance that maps to full brightness. Must be positive.

    Returns:
        Image in [0, 1] range.

    Raises:
        ValueError: If max_value is not positive.
    """
    if max_value <= 0.0:
        raise ValueError(f"max_value must be positive, got {max_value}")
    result = np.clip(np.asarray(image, dtype=np.float32) / max_value, 0.0, 1.0)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding: out = in^(1/gamma).

    Args:
        image: Image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (default 2.0, a square root).

    Returns:
        Gamma encoded image.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return np.asarray(image, dtype=np.float32)

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def show_preview(
    buffer: PixelBuffer,
    *,
    gamma: float = 2.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a rendered buffer as a Matplotlib figure.

    Args:
        buffer: The rendered buffer.
        gamma: Display gamma (default 2.0).
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    width, height = buffer.dimensions()
    display_image = apply_gamma(buffer.channels(), gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
