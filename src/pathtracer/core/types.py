"""Python-scope value types for scene assembly.

These frozen dataclasses are the validated boundary between scene-building code
and the Taichi kernels. Every invariant is checked on construction so that a
malformed ray, colour or intersection never reaches the device.

Example:
    >>> from pathtracer.core.types import Color, LightRay, Ray
    >>> ray = Ray(origin=(0.0, 0.0, -5.0), direction=(0.0, 0.0, 1.0))
    >>> ray.at(2.0)
    (0.0, 0.0, -3.0)
    >>> LightRay(Color(1.0, 0.5, 0.0), 2.0).to_sample()
    (2.0, 1.0, 0.0)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

# Type alias for 3D vectors on the Python side
Vector = tuple[float, float, float]

# Allowed deviation of |v|^2 from 1 for a vector to count as normalized
NORMALIZED_TOLERANCE = 2e-4


def as_vector(value: Sequence[float]) -> Vector:
    """Convert any 3-element sequence (tuple, list, ndarray) to a Vector.

    Raises:
        ValueError: If the value does not have exactly 3 components.
    """
    components = [float(c) for c in value]
    if len(components) != 3:
        raise ValueError(f"Expected 3 components, got {len(components)}: {value!r}")
    return (components[0], components[1], components[2])


def length_squared(v: Sequence[float]) -> float:
    """Squared Euclidean length of a vector."""
    arr = np.asarray(v, dtype=np.float64)
    return float(np.dot(arr, arr))


def is_normalized(v: Sequence[float]) -> bool:
    """Check whether a vector has unit length (within NORMALIZED_TOLERANCE)."""
    return abs(length_squared(v) - 1.0) <= NORMALIZED_TOLERANCE


def normalize(v: Sequence[float]) -> Vector:
    """Normalize a vector to unit length.

    Raises:
        ValueError: If the vector has zero or non-finite length.
    """
    result = try_normalize(v)
    if result is None:
        raise ValueError(f"Cannot normalize degenerate vector {tuple(v)!r}")
    return result


def try_normalize(v: Sequence[float]) -> Vector | None:
    """Normalize a vector, returning None if its length is zero or not finite."""
    arr = np.asarray(v, dtype=np.float64)
    length = float(np.linalg.norm(arr))
    if length == 0.0 or not np.isfinite(length):
        return None
    return as_vector(arr / length)


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Must be normalized.
    """

    origin: Vector
    direction: Vector

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vector(self.origin))
        object.__setattr__(self, "direction", as_vector(self.direction))
        if not is_normalized(self.direction):
            raise ValueError(
                f"Ray direction {self.direction} is not normalized "
                f"(|d|^2 = {length_squared(self.direction):.6f})"
            )

    def at(self, t: float) -> Vector:
        """Return the point origin + direction * t."""
        return as_vector(np.add(self.origin, np.multiply(self.direction, t)))


@dataclass(frozen=True)
class Color:
    """An RGB colour with every channel in [0, 1].

    Colours combine multiplicatively along a light path, which keeps the
    product inside the same range.
    """

    r: float
    g: float
    b: float

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = float(getattr(self, name))
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Color channel {name} = {value} is outside [0, 1]")
            object.__setattr__(self, name, value)

    @classmethod
    def from_sequence(cls, value: Sequence[float]) -> Color:
        r, g, b = as_vector(value)
        return cls(r, g, b)

    def to_tuple(self) -> Vector:
        return (self.r, self.g, self.b)

    def __mul__(self, other: Color) -> Color:
        if not isinstance(other, Color):
            return NotImplemented
        return Color(self.r * other.r, self.g * other.g, self.b * other.b)


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)


@dataclass(frozen=True)
class LightRay:
    """A radiance sample: a colour paired with an intensity.

    Attributes:
        color: The colour of the light.
        intensity: Scalar brightness multiplier.
    """

    color: Color
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "intensity", float(self.intensity))

    def to_sample(self) -> Vector:
        """Return the per-channel radiance color * intensity."""
        return (
            self.color.r * self.intensity,
            self.color.g * self.intensity,
            self.color.b * self.intensity,
        )


@dataclass(frozen=True)
class Intersection:
    """Result of a successful ray-shape intersection.

    Attributes:
        point: The hit point in world space.
        normal: The unit surface normal at the hit point.
        t: Distance along the ray, always past EPSILON.
    """

    point: Vector
    normal: Vector
    t: float
