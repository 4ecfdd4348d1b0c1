"""Scene aggregate: objects, lights and a camera for one frame.

Scenes are immutable. Materials are held by reference, so several objects can
share one material instance; materials() lists each distinct instance once,
in first-use order, which is the order they are stored on the device.

Example:
    >>> import math
    >>> from pathtracer.camera.pinhole import Camera
    >>> from pathtracer.core.types import Color
    >>> from pathtracer.geometry.sphere import Sphere
    >>> from pathtracer.materials.simple import SimpleMaterial
    >>> from pathtracer.scene.scene import Light, Object, Scene
    >>> white = SimpleMaterial(Color(1.0, 1.0, 1.0))
    >>> scene = Scene(
    ...     camera=Camera((0, 0, -5), (0, 0, 1), math.radians(60), 1.0),
    ...     objects=[Object(Sphere((0, 0, 0), 1.0), white)],
    ...     lights=[Light(Sphere((0, 0, -20), 5.0), Color(1.0, 1.0, 1.0), 4.0)],
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from pathtracer.camera.pinhole import Camera
from pathtracer.core.types import Color, LightRay
from pathtracer.geometry.shape import Shape
from pathtracer.materials.base import Material


@dataclass(frozen=True)
class Object:
    """A shape with an associated (shared) material."""

    shape: Shape
    material: Material


@dataclass(frozen=True)
class Light:
    """An emissive shape.

    A light emits the same radiance wherever a ray hits it.

    Attributes:
        shape: The emissive geometry.
        color: The colour of the emitted light.
        intensity: Non-negative brightness multiplier.
    """

    shape: Shape
    color: Color
    intensity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "intensity", float(self.intensity))
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")

    def light_ray(self) -> LightRay:
        """The radiance sample returned when a ray hits this light."""
        return LightRay(color=self.color, intensity=self.intensity)


@dataclass(frozen=True)
class Scene:
    """Everything needed to render one frame.

    Attributes:
        camera: The camera to render from.
        objects: Ordered scattering objects.
        lights: Ordered emissive lights.
    """

    camera: Camera
    objects: tuple[Object, ...] = field(default_factory=tuple)
    lights: tuple[Light, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "objects", tuple(self.objects))
        object.__setattr__(self, "lights", tuple(self.lights))

    def materials(self) -> list[Material]:
        """Distinct material instances, in order of first use."""
        return unique_materials(obj.material for obj in self.objects)


def unique_materials(materials: Iterable[Material]) -> list[Material]:
    """Deduplicate materials by identity, preserving first-seen order."""
    seen: dict[int, Material] = {}
    for material in materials:
        seen.setdefault(id(material), material)
    return list(seen.values())
