"""Monte Carlo light-transport integrator.

This module implements the renderer: per-pixel primary ray generation, the
bounded light-transport trace, per-pixel sample averaging and the final
linear exposure transform.

The trace follows a simple recursive definition, evaluated here as a
depth-bounded loop because Taichi functions cannot recurse:

    trace(ray, 0)     = ambient
    trace(ray, depth) = ambient                   if nothing is hit
                      = light emission            if a light is strictly nearer
                                                  than every object
                      = albedo * trace(scattered, depth - 1)   otherwise

Only the colour is tinted by albedos; the intensity of the terminal sample
passes through unchanged. Lights are not shadow-tested or sampled: they only
contribute when a path happens to hit one.

Module-level Taichi fields are declared here (the view plane), so import
this module after ti.init().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.buffer import ImageBuffer
    >>> from pathtracer.core.integrator import Renderer
    >>> buffer = ImageBuffer(64, 64)
    >>> Renderer(sample_count=16, indirect_count=2, max_value=1.0).render(scene, buffer)
"""

import logging
import time
from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import Camera, ViewPlane
from pathtracer.core.buffer import PixelBuffer
from pathtracer.core.ray import RayData, lerp, make_ray, vec3
from pathtracer.core.types import BLACK, Color, LightRay, Ray
from pathtracer.geometry.shape import ray_to_array
from pathtracer.materials.base import MaterialType
from pathtracer.materials.simple import scatter_simple
from pathtracer.preview.display import tone_map_linear
from pathtracer.scene.intersection import (
    closest_light_hit,
    closest_object_hit,
    light_colors,
    light_intensities,
    material_albedos,
    material_diffuse,
    material_fuzzyness,
    material_kinds,
    object_material_ids,
    upload_scene,
)
from pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)


@ti.dataclass
class LightSample:
    """Device-side radiance sample (colour and intensity)."""

    color: vec3
    intensity: ti.f32


# =============================================================================
# View Plane (configured by setup_view_plane)
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_plane_top_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_plane_top_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_plane_bottom_left = ti.Vector.field(3, dtype=ti.f32, shape=())
_plane_bottom_right = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_view_plane(camera: Camera) -> ViewPlane:
    """Compute the camera's view plane and store it for the render kernel."""
    plane = camera.plane()
    _camera_position[None] = list(camera.position)
    _plane_top_left[None] = list(plane.top_left)
    _plane_top_right[None] = list(plane.top_right)
    _plane_bottom_left[None] = list(plane.bottom_left)
    _plane_bottom_right[None] = list(plane.bottom_right)
    return plane


@ti.func
def primary_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> RayData:
    """Generate the primary ray through pixel (x, y).

    The pixel's normalized coordinates (x / width, y / height) are
    interpolated bilinearly across the view plane. The ray starts on the view
    plane and points away from the camera position.
    """
    x_t = ti.cast(x, ti.f32) / ti.cast(width, ti.f32)
    y_t = ti.cast(y, ti.f32) / ti.cast(height, ti.f32)

    top = lerp(_plane_top_left[None], _plane_top_right[None], x_t)
    bottom = lerp(_plane_bottom_left[None], _plane_bottom_right[None], x_t)
    plane_point = lerp(top, bottom, y_t)
    direction = tm.normalize(plane_point - _camera_position[None])

    return make_ray(plane_point, direction)


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, ray: RayData, point: vec3, normal: vec3) -> RayData:
    """Scatter a ray off the surface of the given material.

    Args:
        material_id: Index into the material storage.
        ray: The incoming ray.
        point: The hit point.
        normal: The surface normal at the hit point.

    Returns:
        The outgoing ray, starting at the hit point.
    """
    direction = ray.direction
    if material_kinds[material_id] == int(MaterialType.SIMPLE):
        direction = scatter_simple(
            material_diffuse[material_id],
            material_fuzzyness[material_id],
            ray.direction,
            point,
            normal,
        )
    return make_ray(point, direction)


@ti.func
def _material_color(material_id: ti.i32, point: vec3, normal: vec3) -> vec3:
    """Albedo of a material at a surface point."""
    return material_albedos[material_id]


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def trace_ray(
    ray: RayData,
    depth: ti.i32,
    ambient_color: vec3,
    ambient_intensity: ti.f32,
) -> LightSample:
    """Trace a ray through the scene with a bounce budget of `depth`.

    Args:
        ray: The ray to trace.
        depth: Remaining bounces. 0 returns the ambient light.
        ambient_color: Colour returned when nothing is hit or the budget runs out.
        ambient_intensity: Intensity paired with ambient_color.

    Returns:
        The radiance arriving along the ray.
    """
    color = ambient_color
    intensity = ambient_intensity
    tint = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation
    active = 1

    for _ in range(depth):
        if active == 1:
            object_hit = closest_object_hit(current)
            light_hit = closest_light_hit(current)

            if object_hit.hit == 0 and light_hit.hit == 0:
                active = 0
            elif light_hit.hit == 1 and (object_hit.hit == 0 or light_hit.t < object_hit.t):
                color = light_colors[light_hit.index]
                intensity = light_intensities[light_hit.index]
                active = 0
            else:
                material_id = object_material_ids[object_hit.index]
                tint *= _material_color(material_id, object_hit.point, object_hit.normal)
                current = _scatter_material(
                    material_id, current, object_hit.point, object_hit.normal
                )

    return LightSample(color=color * tint, intensity=intensity)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    sample_count: ti.i32,
    depth: ti.i32,
    ambient: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out: ti.types.ndarray(dtype=ti.f32, ndim=3),
):
    """Average sample_count traced samples per pixel into out[y, x, :]."""
    ambient_color = vec3(ambient[0], ambient[1], ambient[2])
    ambient_intensity = ambient[3]

    for x, y in ti.ndrange(width, height):
        ray = primary_ray(x, y, width, height)

        channels = vec3(0.0, 0.0, 0.0)
        for _ in range(sample_count):
            sample = trace_ray(ray, depth, ambient_color, ambient_intensity)
            channels += sample.color * sample.intensity

        if sample_count > 0:
            channels /= ti.cast(sample_count, ti.f32)

        for c in ti.static(range(3)):
            out[y, x, c] = channels[c]


@ti.kernel
def _trace_kernel(
    ray: ti.types.ndarray(dtype=ti.f32, ndim=1),
    depth: ti.i32,
    ambient: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Trace a single ray and write (r, g, b, intensity) to out."""
    ray_data = make_ray(vec3(ray[0], ray[1], ray[2]), vec3(ray[3], ray[4], ray[5]))
    sample = trace_ray(
        ray_data,
        depth,
        vec3(ambient[0], ambient[1], ambient[2]),
        ambient[3],
    )
    for c in ti.static(range(3)):
        out[c] = sample.color[c]
    out[3] = sample.intensity


# =============================================================================
# Public Rendering API
# =============================================================================


@dataclass(frozen=True)
class Renderer:
    """Renderer configuration.

    Attributes:
        sample_count: Samples averaged per pixel.
        indirect_count: Bounces allowed after the primary hit. Each trace
            starts with a budget of indirect_count + 1.
        max_value: Divisor of the final linear exposure transform.
        ambient_light: Radiance returned by rays that escape the scene or run
            out of bounces.
    """

    sample_count: int = 128
    indirect_count: int = 4
    max_value: float = 1024.0
    ambient_light: LightRay = field(default_factory=lambda: LightRay(BLACK, 0.0))

    def __post_init__(self) -> None:
        if self.sample_count < 0:
            raise ValueError(f"sample_count must be non-negative, got {self.sample_count}")
        if self.indirect_count < 0:
            raise ValueError(f"indirect_count must be non-negative, got {self.indirect_count}")
        if self.max_value <= 0.0:
            raise ValueError(f"max_value must be positive, got {self.max_value}")

    def _ambient_array(self) -> np.ndarray:
        return np.array(
            [*self.ambient_light.color.to_tuple(), self.ambient_light.intensity],
            dtype=np.float32,
        )

    def render(self, scene: Scene, buffer: PixelBuffer) -> None:
        """Render `scene` into `buffer`.

        Every channel of the result is divided by max_value and clamped to
        [0, 1]. No gamma correction is applied.

        Args:
            scene: The scene to render.
            buffer: Output buffer. Its dimensions select the image size.
        """
        width, height = buffer.dimensions()
        start_time = time.perf_counter()

        upload_scene(scene)
        setup_view_plane(scene.camera)

        image = np.zeros((height, width, 3), dtype=np.float32)
        if width > 0 and height > 0:
            _render_kernel(
                width,
                height,
                self.sample_count,
                self.indirect_count + 1,
                self._ambient_array(),
                image,
            )

        buffer.channels()[...] = tone_map_linear(image, self.max_value)

        logger.debug(
            "Rendered %dx%d at %d spp in %.3fs",
            width,
            height,
            self.sample_count,
            time.perf_counter() - start_time,
        )

    def trace(self, ray: Ray, scene: Scene, depth: int) -> LightRay:
        """Trace a single ray through `scene` with a bounce budget of `depth`.

        Python-callable counterpart of the trace used by render().

        Raises:
            ValueError: If depth is negative.
        """
        if depth < 0:
            raise ValueError(f"depth must be non-negative, got {depth}")
        upload_scene(scene)

        out = np.zeros(4, dtype=np.float32)
        _trace_kernel(ray_to_array(ray), depth, self._ambient_array(), out)

        color = Color(*np.clip(out[:3], 0.0, 1.0).tolist())
        return LightRay(color=color, intensity=float(out[3]))
