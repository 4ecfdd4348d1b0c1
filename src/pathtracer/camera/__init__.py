"""Camera module."""

from .pinhole import WORLD_UP, Camera, ViewPlane

__all__ = ["WORLD_UP", "Camera", "ViewPlane"]
