"""Preview module for output and visualization.

Components:
    display: Exposure and gamma transforms, Matplotlib preview
    export: 8-bit conversion and PNG export via Pillow
"""

from .display import apply_gamma, show_preview, tone_map_linear
from .export import image_to_uint8, save_png

__all__ = [
    "apply_gamma",
    "image_to_uint8",
    "save_png",
    "show_preview",
    "tone_map_linear",
]
