"""Simple probabilistic material mixing diffuse and specular bounces.

Each scatter draws one uniform number u in [0, 1):
    - u < diffuse: diffuse bounce toward point + normal + random_unit_vector(),
      a cheap approximation of Lambertian reflection;
    - otherwise: mirror reflection R = I - 2(I . N)N, perturbed by
      fuzzyness * random_unit_vector() and renormalized.

fuzzyness = 0 gives a perfect mirror, diffuse = 1 a purely diffuse surface.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.types import Color, Ray
    >>> from pathtracer.materials.simple import SimpleMaterial
    >>> mirror = SimpleMaterial(Color(1.0, 1.0, 1.0), diffuse=0.0, fuzzyness=0.0)
    >>> mirror.scatter(Ray((0, 1, 0), (0, -1, 0)), (0, 0, 0), (0, 1, 0)).direction
    (0.0, 1.0, 0.0)
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import random_unit_vector, reflect, vec3
from pathtracer.core.types import Color, Ray, Vector, as_vector
from pathtracer.geometry.shape import ray_to_array
from pathtracer.materials.base import Material, MaterialRecord, MaterialType


@ti.func
def scatter_simple(
    diffuse: ti.f32,
    fuzzyness: ti.f32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
) -> vec3:
    """Compute the scattered direction for the simple material.

    Args:
        diffuse: Probability in [0, 1] of taking the diffuse branch.
        fuzzyness: Scale of the random perturbation on specular bounces.
        incident_direction: The incoming ray direction (normalized).
        point: The hit point.
        normal: The surface normal (normalized).

    Returns:
        The scattered direction (normalized).
    """
    direction = vec3(0.0, 0.0, 0.0)
    if ti.random(ti.f32) < diffuse:
        center = point + normal
        direction = tm.normalize((center + random_unit_vector()) - point)
    else:
        reflected = reflect(incident_direction, normal)
        fuzz = fuzzyness * random_unit_vector()
        direction = tm.normalize(reflected + fuzz)
    return direction


@ti.kernel
def _scatter_kernel(
    diffuse: ti.f32,
    fuzzyness: ti.f32,
    ray: ti.types.ndarray(dtype=ti.f32, ndim=1),
    surface: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    """Write out.shape[0] independent scatter directions into out."""
    incident = vec3(ray[3], ray[4], ray[5])
    point = vec3(surface[0], surface[1], surface[2])
    normal = vec3(surface[3], surface[4], surface[5])
    for i in range(out.shape[0]):
        direction = scatter_simple(diffuse, fuzzyness, incident, point, normal)
        for c in ti.static(range(3)):
            out[i, c] = direction[c]


@dataclass(frozen=True)
class SimpleMaterial(Material):
    """A material blending diffuse and (optionally fuzzy) specular reflection.

    Attributes:
        albedo: The fixed colour tint applied at every point.
        diffuse: Probability in [0, 1] that a bounce is diffuse.
        fuzzyness: Non-negative roughness of specular bounces.
    """

    albedo: Color
    diffuse: float = 1.0
    fuzzyness: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "diffuse", float(self.diffuse))
        object.__setattr__(self, "fuzzyness", float(self.fuzzyness))
        if not 0.0 <= self.diffuse <= 1.0:
            raise ValueError(f"Diffuse weight {self.diffuse} is outside [0, 1]")
        if self.fuzzyness < 0.0:
            raise ValueError(f"Fuzzyness must be non-negative, got {self.fuzzyness}")

    @property
    def material_type(self) -> MaterialType:
        return MaterialType.SIMPLE

    def color(self, point: Vector, normal: Vector) -> Color:
        return self.albedo

    def to_record(self) -> MaterialRecord:
        return MaterialRecord(
            kind=MaterialType.SIMPLE,
            albedo=self.albedo.to_tuple(),
            diffuse=self.diffuse,
            fuzzyness=self.fuzzyness,
        )

    def sample_directions(
        self,
        ray: Ray,
        point: Vector,
        normal: Vector,
        count: int,
    ) -> npt.NDArray[np.float32]:
        """Draw `count` independent scatter directions in one kernel launch.

        Returns:
            Array of shape (count, 3) with one unit direction per row.
        """
        surface = np.array([*as_vector(point), *as_vector(normal)], dtype=np.float32)
        out = np.zeros((count, 3), dtype=np.float32)
        if count > 0:
            _scatter_kernel(self.diffuse, self.fuzzyness, ray_to_array(ray), surface, out)
        return out

    def scatter(self, ray: Ray, point: Vector, normal: Vector) -> Ray:
        direction = self.sample_directions(ray, point, normal, 1)[0]
        return Ray(origin=point, direction=direction)
