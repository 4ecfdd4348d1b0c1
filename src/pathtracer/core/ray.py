"""Device-side ray structure and vector utilities.

This module provides the RayData dataclass used inside Taichi kernels, the
scene-wide intersection EPSILON, and the vector and random-sampling helpers
shared by geometry, materials and the integrator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum accepted ray parameter for every intersection test. Keeping one value
# scene-wide makes scattered rays (which start on the surface) skip the surface
# they left consistently for all shape kinds.
EPSILON = 1e-4

# Same tolerance as core.types.NORMALIZED_TOLERANCE, applied on |v|^2
NORMALIZED_TOLERANCE = 2e-4


@ti.dataclass
class RayData:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Always normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def is_normalized(v: vec3) -> ti.i32:
    """Return 1 if v has unit length within NORMALIZED_TOLERANCE."""
    return ti.abs(tm.dot(v, v) - 1.0) <= NORMALIZED_TOLERANCE


@ti.func
def make_ray(origin: vec3, direction: vec3) -> RayData:
    """Create a ray from origin and a unit direction.

    The normalization check is enforced when Taichi runs with debug=True.
    """
    assert is_normalized(direction), "ray direction must be normalized"
    return RayData(origin=origin, direction=direction)


@ti.func
def ray_at(ray: RayData, t: ti.f32) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def try_normalize(v: vec3, fallback: vec3) -> vec3:
    """Normalize v, or return fallback if v has zero length.

    Args:
        v: The vector to normalize.
        fallback: Returned unchanged when v is degenerate.

    Returns:
        A unit vector.
    """
    result = fallback
    len_sq = tm.dot(v, v)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal: d - 2(d.n)n.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linear interpolation from a (t = 0) to b (t = 1)."""
    return a + (b - a) * t


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Rejection sampling: each component is drawn uniformly from [-1, 1) until
    the squared length falls below 1. The zero vector is rejected as well so
    the result can always be normalized.

    Returns:
        A random point with 0 < length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p = vec3(
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
            ti.random(ti.f32) * 2.0 - 1.0,
        )
        len_sq = tm.dot(p, p)
        if len_sq < 1.0 and len_sq > 0.0:
            found = 1
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector by normalizing random_in_unit_sphere()."""
    return tm.normalize(random_in_unit_sphere())
