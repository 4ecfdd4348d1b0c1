"""Geometry module for intersectable shapes.

Components:
    sphere: Sphere primitive and the device HitRecord
    plane: Infinite plane primitive
    shape: The Shape variant, device dispatch and intersect()
"""

from .plane import Plane, hit_plane
from .shape import Shape, ShapeRecord, ShapeType, hit_shape, intersect, to_shape_record
from .sphere import HitRecord, Sphere, hit_sphere

__all__ = [
    "HitRecord",
    "Plane",
    "Shape",
    "ShapeRecord",
    "ShapeType",
    "Sphere",
    "hit_plane",
    "hit_shape",
    "hit_sphere",
    "intersect",
    "to_shape_record",
]
