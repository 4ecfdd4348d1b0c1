"""Scene module.

Components:
    scene: Object, Light and Scene value types
    intersection: Device scene storage and nearest-hit queries
    box: The animated box demo scene

The intersection module declares Taichi fields and is not imported here.
Import it from pathtracer.scene.intersection after ti.init().
"""

from .box import BoxAnimation, create_box_scene
from .scene import Light, Object, Scene, unique_materials

__all__ = [
    "BoxAnimation",
    "Light",
    "Object",
    "Scene",
    "create_box_scene",
    "unique_materials",
]
