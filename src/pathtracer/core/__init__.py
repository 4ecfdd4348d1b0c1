"""Core rendering module.

Components:
    types: Validated Python-scope value types (Ray, Color, LightRay, Intersection)
    ray: Device ray structure, EPSILON, vector and random-sampling helpers
    buffer: The PixelBuffer protocol and the NumPy-backed ImageBuffer
    integrator: The Renderer and its light-transport kernels
"""

from .buffer import ImageBuffer, PixelBuffer
from .ray import EPSILON, RayData, make_ray, random_unit_vector, ray_at, reflect, vec3
from .types import BLACK, WHITE, Color, Intersection, LightRay, Ray, Vector

# Note: integrator is NOT imported here because it declares Taichi fields.
# Import it from pathtracer.core.integrator after ti.init().

__all__ = [
    "BLACK",
    "WHITE",
    "Color",
    "EPSILON",
    "ImageBuffer",
    "Intersection",
    "LightRay",
    "PixelBuffer",
    "Ray",
    "RayData",
    "Vector",
    "make_ray",
    "random_unit_vector",
    "ray_at",
    "reflect",
    "vec3",
]
