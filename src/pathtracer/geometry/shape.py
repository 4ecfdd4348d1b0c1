"""Tagged-variant shape abstraction with a uniform intersection operation.

A Shape is one of the primitive dataclasses (Sphere, Plane). On the device a
shape is flattened to a ShapeRecord-like tuple of (kind, position, normal,
radius) and dispatched by kind in hit_shape(). Adding a new primitive means
adding a ShapeType member, a branch in to_shape_record() and a branch in
hit_shape(); nothing in the integrator changes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.types import Ray
    >>> from pathtracer.geometry.shape import intersect
    >>> from pathtracer.geometry.sphere import Sphere
    >>> hit = intersect(Sphere((0, 0, 0), 1.0), Ray((0, 0, -5), (0, 0, 1)))
    >>> round(hit.t, 4)
    4.0
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

import numpy as np
import taichi as ti

from pathtracer.core.ray import RayData, vec3
from pathtracer.core.types import Intersection, Ray, Vector, as_vector
from pathtracer.geometry.plane import Plane, hit_plane
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

Shape = Union[Sphere, Plane]


class ShapeType(IntEnum):
    """Device-side tag for each shape variant."""

    SPHERE = 0
    PLANE = 1


@dataclass(frozen=True)
class ShapeRecord:
    """Flattened shape parameters as stored in device fields.

    Attributes:
        kind: The ShapeType tag.
        position: Sphere center or a point on the plane.
        normal: Plane normal (unused for spheres).
        radius: Sphere radius (unused for planes).
    """

    kind: ShapeType
    position: Vector
    normal: Vector = (0.0, 0.0, 0.0)
    radius: float = 0.0

    def to_array(self) -> np.ndarray:
        """Pack position, normal and radius into a float32 array of length 7."""
        return np.array([*self.position, *self.normal, self.radius], dtype=np.float32)


def to_shape_record(shape: Shape) -> ShapeRecord:
    """Flatten a shape into its device representation.

    Raises:
        TypeError: If shape is not a supported primitive.
    """
    if isinstance(shape, Sphere):
        return ShapeRecord(kind=ShapeType.SPHERE, position=shape.center, radius=shape.radius)
    if isinstance(shape, Plane):
        return ShapeRecord(kind=ShapeType.PLANE, position=shape.point, normal=shape.normal)
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


@ti.func
def hit_shape(
    ray: RayData,
    kind: ti.i32,
    position: vec3,
    normal: vec3,
    radius: ti.f32,
) -> HitRecord:
    """Dispatch a ray intersection test on the shape kind.

    Args:
        ray: The ray to test.
        kind: The ShapeType tag.
        position: Sphere center or plane point.
        normal: Plane normal.
        radius: Sphere radius.

    Returns:
        The HitRecord of the matching primitive, or a miss for unknown kinds.
    """
    record = make_miss_record()
    if kind == int(ShapeType.SPHERE):
        record = hit_sphere(ray, position, radius)
    elif kind == int(ShapeType.PLANE):
        record = hit_plane(ray, position, normal)
    return record


@ti.kernel
def _intersect_kernel(
    kind: ti.i32,
    shape: ti.types.ndarray(dtype=ti.f32, ndim=1),
    ray: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Intersect one ray with one shape and write (hit, t, point, normal) to out."""
    ray_data = RayData(
        origin=vec3(ray[0], ray[1], ray[2]),
        direction=vec3(ray[3], ray[4], ray[5]),
    )
    record = hit_shape(
        ray_data,
        kind,
        vec3(shape[0], shape[1], shape[2]),
        vec3(shape[3], shape[4], shape[5]),
        shape[6],
    )
    out[0] = ti.cast(record.hit, ti.f32)
    out[1] = record.t
    for i in ti.static(range(3)):
        out[2 + i] = record.point[i]
        out[5 + i] = record.normal[i]


def ray_to_array(ray: Ray) -> np.ndarray:
    """Pack a ray's origin and direction into a float32 array of length 6."""
    return np.array([*ray.origin, *ray.direction], dtype=np.float32)


def intersect(shape: Shape, ray: Ray) -> Intersection | None:
    """Intersect a ray with a single shape.

    This is a Python-callable wrapper around the device intersection code,
    meant for scene tooling and tests. The renderer calls hit_shape() directly
    inside its kernel.

    Args:
        shape: The shape to test.
        ray: The ray to test.

    Returns:
        The Intersection, or None if the ray misses.
    """
    record = to_shape_record(shape)
    out = np.zeros(8, dtype=np.float32)
    _intersect_kernel(int(record.kind), record.to_array(), ray_to_array(ray), out)

    if out[0] < 0.5:
        return None
    return Intersection(
        point=as_vector(out[2:5]),
        normal=as_vector(out[5:8]),
        t=float(out[1]),
    )
