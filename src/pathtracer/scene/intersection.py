"""Device-side scene storage and nearest-hit queries.

Objects, lights and materials are stored in Taichi fields using a
Structure-of-Arrays layout. Each material instance is stored once and objects
refer to it by index, so materials shared by many objects cost one slot.

The fields are module-level, so this module must be imported after ti.init().
There is one active scene per Taichi runtime; upload_scene() replaces it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import upload_scene
    >>> info = upload_scene(scene)
    >>> # Use closest_object_hit / closest_light_hit within a Taichi kernel
"""

import logging
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import RayData
from pathtracer.geometry.shape import hit_shape, to_shape_record
from pathtracer.materials.base import Material
from pathtracer.scene.scene import Light, Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Nearest intersection against one collection of the scene.

    Attributes:
        hit: 1 if anything in the collection was hit, 0 otherwise.
        t: The ray parameter of the nearest hit. Only valid if hit == 1.
        point: The nearest hit point. Only valid if hit == 1.
        normal: The surface normal at that point. Only valid if hit == 1.
        index: Index of the hit object or light. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    index: ti.i32


# Maximum number of entries supported in the scene
MAX_OBJECTS = 1024
MAX_LIGHTS = 64
MAX_MATERIALS = 256

# Object storage
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_material_ids = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Light storage
light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_radii = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Material storage
material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzzyness = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


@dataclass(frozen=True)
class SceneInfo:
    """Counts of what upload_scene() stored on the device."""

    object_count: int
    light_count: int
    material_count: int


def clear_scene() -> None:
    """Clear all objects, lights and materials.

    Resets the counts to zero. The field data is overwritten on the next upload.
    """
    num_objects[None] = 0
    num_lights[None] = 0
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Store a material and return its index.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    record = material.to_record()
    material_kinds[idx] = int(record.kind)
    material_albedos[idx] = list(record.albedo)
    material_diffuse[idx] = record.diffuse
    material_fuzzyness[idx] = record.fuzzyness
    num_materials[None] = idx + 1
    return idx


def add_object(shape, material_id: int) -> int:
    """Store a shape with the index of an already stored material.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
        ValueError: If material_id does not refer to a stored material.
    """
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    if not 0 <= material_id < num_materials[None]:
        raise ValueError(f"Unknown material id {material_id}")
    record = to_shape_record(shape)
    object_kinds[idx] = int(record.kind)
    object_positions[idx] = list(record.position)
    object_normals[idx] = list(record.normal)
    object_radii[idx] = record.radius
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1
    return idx


def add_light(light: Light) -> int:
    """Store a light and return its index.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    record = to_shape_record(light.shape)
    light_kinds[idx] = int(record.kind)
    light_positions[idx] = list(record.position)
    light_normals[idx] = list(record.normal)
    light_radii[idx] = record.radius
    light_colors[idx] = list(light.color.to_tuple())
    light_intensities[idx] = light.intensity
    num_lights[None] = idx + 1
    return idx


def upload_scene(scene: Scene) -> SceneInfo:
    """Replace the device scene with the contents of `scene`.

    Materials are stored first, one slot per distinct instance, then objects
    and lights in scene order.

    Returns:
        The number of objects, lights and materials stored.
    """
    clear_scene()

    material_ids: dict[int, int] = {}
    for material in scene.materials():
        material_ids[id(material)] = add_material(material)

    for obj in scene.objects:
        add_object(obj.shape, material_ids[id(obj.material)])

    for light in scene.lights:
        add_light(light)

    info = SceneInfo(
        object_count=get_object_count(),
        light_count=get_light_count(),
        material_count=get_material_count(),
    )
    logger.debug(
        "Uploaded scene: %d objects, %d lights, %d materials",
        info.object_count,
        info.light_count,
        info.material_count,
    )
    return info


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


def get_material_count() -> int:
    """Get the number of distinct materials in the scene."""
    return int(num_materials[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        index=-1,
    )


@ti.func
def closest_object_hit(ray: RayData) -> SceneHitRecord:
    """Find the nearest object hit by the ray.

    Linear scan over all objects. On equal distances the earlier object wins.

    Args:
        ray: The ray to test.

    Returns:
        A SceneHitRecord whose index is the hit object, or a miss record.
    """
    result = _make_miss_record()
    for i in range(num_objects[None]):
        rec = hit_shape(
            ray,
            object_kinds[i],
            object_positions[i],
            object_normals[i],
            object_radii[i],
        )
        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = SceneHitRecord(
                hit=1, t=rec.t, point=rec.point, normal=rec.normal, index=i
            )
    return result


@ti.func
def closest_light_hit(ray: RayData) -> SceneHitRecord:
    """Find the nearest light hit by the ray.

    Lights are tested independently of objects; occlusion is resolved by the
    caller comparing the two distances.

    Args:
        ray: The ray to test.

    Returns:
        A SceneHitRecord whose index is the hit light, or a miss record.
    """
    result = _make_miss_record()
    for i in range(num_lights[None]):
        rec = hit_shape(
            ray,
            light_kinds[i],
            light_positions[i],
            light_normals[i],
            light_radii[i],
        )
        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = SceneHitRecord(
                hit=1, t=rec.t, point=rec.point, normal=rec.normal, index=i
            )
    return result
