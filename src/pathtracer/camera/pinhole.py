"""Pinhole camera and view-plane projection.

The camera is a position, a unit viewing direction, a field of view (radians)
and an aspect ratio. It builds an orthonormal frame from the world up vector:

- z (forward): the viewing direction
- x: normalize(world_up x forward), or world x when forward is parallel to up
- y: normalize(forward x x), or world y when degenerate

The view plane is the rectangle one unit in front of the camera whose
half-height is tan(fov / 2) and half-width half-height * aspect_ratio. Primary
rays are generated by bilinear interpolation across its four corners, with
(0, 0) at the top-left and (1, 1) at the bottom-right.

Example:
    >>> import math
    >>> from pathtracer.camera.pinhole import Camera
    >>> camera = Camera(
    ...     position=(0.0, 0.0, -10.0),
    ...     direction=(0.0, 0.0, 1.0),
    ...     fov=math.radians(75.0),
    ...     aspect_ratio=1.0,
    ... )
    >>> plane = camera.plane()
    >>> plane.point_at(0.5, 0.5)  # center of the view plane
    (0.0, 0.0, -9.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from pathtracer.core.types import Vector, as_vector, is_normalized, length_squared, try_normalize

WORLD_X: Vector = (1.0, 0.0, 0.0)
WORLD_UP: Vector = (0.0, 1.0, 0.0)


@dataclass(frozen=True)
class ViewPlane:
    """The four world-space corners of a camera's view plane."""

    top_left: Vector
    top_right: Vector
    bottom_left: Vector
    bottom_right: Vector

    def point_at(self, x_t: float, y_t: float) -> Vector:
        """Bilinearly interpolate a point on the plane.

        Interpolates along the top and bottom edges by x_t, then between the
        two results by y_t.
        """
        top_left = np.asarray(self.top_left)
        bottom_left = np.asarray(self.bottom_left)
        top = top_left + (np.asarray(self.top_right) - top_left) * x_t
        bottom = bottom_left + (np.asarray(self.bottom_right) - bottom_left) * x_t
        return as_vector(top + (bottom - top) * y_t)


@dataclass(frozen=True)
class Camera:
    """A pinhole camera.

    Attributes:
        position: Camera position in world space.
        direction: Viewing direction. Must be normalized.
        fov: Field of view in radians, in [0, 2*pi).
        aspect_ratio: Width divided by height of the view plane.
    """

    position: Vector
    direction: Vector
    fov: float
    aspect_ratio: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vector(self.position))
        object.__setattr__(self, "direction", as_vector(self.direction))
        object.__setattr__(self, "fov", float(self.fov))
        object.__setattr__(self, "aspect_ratio", float(self.aspect_ratio))

        if not 0.0 <= self.fov < 2.0 * math.pi:
            raise ValueError(f"Field of view {self.fov} rad is outside [0, 2*pi)")
        if not is_normalized(self.direction):
            raise ValueError(
                f"Camera direction {self.direction} is not normalized "
                f"(|d|^2 = {length_squared(self.direction):.6f})"
            )

    def x_axis(self) -> Vector:
        """Local x axis (right). Normalized."""
        axis = try_normalize(np.cross(WORLD_UP, self.direction))
        return WORLD_X if axis is None else axis

    def y_axis(self) -> Vector:
        """Local y axis (up). Normalized."""
        axis = try_normalize(np.cross(self.direction, self.x_axis()))
        return WORLD_UP if axis is None else axis

    def z_axis(self) -> Vector:
        """Local z axis, identical to the viewing direction."""
        return self.direction

    def plane(self) -> ViewPlane:
        """Compute the view plane one unit in front of the camera."""
        x_axis = np.asarray(self.x_axis())
        y_axis = np.asarray(self.y_axis())

        plane_center = np.asarray(self.position) + np.asarray(self.z_axis())
        half_height = math.tan(self.fov / 2.0)
        half_width = half_height * self.aspect_ratio

        top_center = plane_center + y_axis * half_height
        bottom_center = plane_center - y_axis * half_height

        return ViewPlane(
            top_left=as_vector(top_center - x_axis * half_width),
            top_right=as_vector(top_center + x_axis * half_width),
            bottom_left=as_vector(bottom_center - x_axis * half_width),
            bottom_right=as_vector(bottom_center + x_axis * half_width),
        )
