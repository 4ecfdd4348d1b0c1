"""Sphere primitive with ray-sphere intersection.

The intersection solves |P + tD - C|^2 = r^2 for a unit direction D using the
reduced (half-b) form of the quadratic, which saves the factor-of-two
multiplications of the textbook formula.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere
    >>> sphere = Sphere(center=(0.0, 0.0, 0.0), radius=1.0)
    >>> # Device side: hit_sphere(ray, center, radius) inside a Taichi kernel
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import EPSILON, RayData, ray_at, try_normalize, vec3
from pathtracer.core.types import Vector, as_vector


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (non-negative).
    """

    center: Vector
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vector(self.center))
        object.__setattr__(self, "radius", float(self.radius))
        if self.radius < 0.0:
            raise ValueError(f"Sphere radius must be non-negative, got {self.radius}")


@ti.dataclass
class HitRecord:
    """Record of a ray-shape intersection.

    Attributes:
        hit: 1 if the ray intersected the shape, 0 on a miss.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray: RayData, center: vec3, radius: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    With oc = origin - center and a unit direction the quadratic reduces to:
        t^2 + 2h*t + c = 0,   h = oc.D,   c = oc.oc - r^2
    whose roots are -h +/- sqrt(h^2 - c).

    The nearer root is taken if it lies at or past EPSILON, otherwise the
    farther one; roots behind the origin (or within EPSILON of it) are never
    returned, so a ray leaving the surface does not re-hit it immediately.

    Args:
        ray: The ray to test (normalized direction).
        center: Center of the sphere.
        radius: Radius of the sphere.

    Returns:
        A HitRecord whose normal points away from the center. If the hit
        point coincides with the center the normal falls back to +Z.
    """
    oc = ray.origin - center
    h = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - radius * radius

    # This is discriminant / 4
    discriminant = h * h - c

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t1 = -h + sqrt_d
        t2 = -h - sqrt_d
        t_near = ti.min(t1, t2)
        t_far = ti.max(t1, t2)

        if t_near >= EPSILON:
            did_hit = 1
            hit_t = t_near
        elif t_far >= EPSILON:
            did_hit = 1
            hit_t = t_far

        if did_hit == 1:
            hit_point = ray_at(ray, hit_t)
            hit_normal = try_normalize(hit_point - center, vec3(0.0, 0.0, 1.0))

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)
