"""Material interface shared by every scattering model.

A material answers two questions at a surface point: where does a ray go
next (scatter) and which albedo does it pick up (color). Materials carry no
mutable state, so one instance can be referenced by any number of objects and
read from any number of renders at once.

On the device a material is flattened to a MaterialRecord and selected by its
MaterialType tag in the integrator's material dispatch.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from enum import IntEnum

from pathtracer.core.types import Color, Ray, Vector


class MaterialType(IntEnum):
    """Device-side tag for each material kind."""

    SIMPLE = 0


@dataclass(frozen=True)
class MaterialRecord:
    """Flattened material parameters as stored in device fields.

    Attributes:
        kind: The MaterialType tag.
        albedo: The material colour (RGB in [0, 1]).
        diffuse: Probability of a diffuse bounce.
        fuzzyness: Roughness applied to specular bounces.
    """

    kind: MaterialType
    albedo: Vector
    diffuse: float = 0.0
    fuzzyness: float = 0.0


class Material(abc.ABC):
    """Base class for materials."""

    @property
    @abc.abstractmethod
    def material_type(self) -> MaterialType:
        """The device-side tag of this material."""

    @abc.abstractmethod
    def scatter(self, ray: Ray, point: Vector, normal: Vector) -> Ray:
        """Scatter an incoming ray at a surface point.

        Args:
            ray: The incoming ray.
            point: The hit point on the surface.
            normal: The unit surface normal at the hit point.

        Returns:
            The outgoing ray, starting at point.
        """

    @abc.abstractmethod
    def color(self, point: Vector, normal: Vector) -> Color:
        """Return the albedo at a surface point."""

    @abc.abstractmethod
    def to_record(self) -> MaterialRecord:
        """Flatten the material for upload to device storage."""
