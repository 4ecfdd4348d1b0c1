"""Infinite plane primitive with ray-plane intersection.

A plane is a point on it plus a unit normal. The normal is one-sided in the
sense that it is returned as-is for every hit; it is never flipped to face the
incoming ray.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import EPSILON, RayData, ray_at, vec3
from pathtracer.core.types import Vector, as_vector, is_normalized, length_squared
from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Plane:
    """An infinite plane through `point` with unit `normal`."""

    point: Vector
    normal: Vector

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", as_vector(self.point))
        object.__setattr__(self, "normal", as_vector(self.normal))
        if not is_normalized(self.normal):
            raise ValueError(
                f"Plane normal {self.normal} is not normalized "
                f"(|n|^2 = {length_squared(self.normal):.6f})"
            )


@ti.func
def hit_plane(ray: RayData, point: vec3, normal: vec3) -> HitRecord:
    """Test for ray-plane intersection.

    Solves (P + tD - Q).N = 0 for t. Only an exactly parallel ray
    (D.N == 0) is rejected up front; grazing rays still produce a (distant)
    hit.

    Args:
        ray: The ray to test (normalized direction).
        point: Any point Q on the plane.
        normal: The unit plane normal N.

    Returns:
        A HitRecord carrying the plane's own normal, with t > EPSILON.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    dir_dot_normal = tm.dot(ray.direction, normal)
    if ti.abs(dir_dot_normal) > 0.0:
        t = tm.dot(point - ray.origin, normal) / dir_dot_normal
        if t > EPSILON:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)
            hit_normal = normal

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
