"""Animated box demo scene.

A 10x10 box open toward the camera, with five coloured walls, four moving
spheres and one spherical light that bobs up and down. Every moving part
completes one cycle over the animation duration, so frame `frame_count` would
equal frame 0.

Layout (the box spans -5..5 on every axis, camera at z = -10 looking +Z):
- Floor (y = -5): glossy blue
- Left wall (x = -5): red diffuse
- Right wall (x = 5): green diffuse
- Front wall (z = 5): white diffuse
- Ceiling (y = 5): fuzzy teal mirror
- Mirror sphere sweeping along x, pink sphere sweeping along y
- Two small black spheres circling opposite each other near floor and ceiling
- White light sphere of radius 2 at the centre, intensity 2048

Example:
    >>> from pathtracer.scene.box import BoxAnimation, create_box_scene
    >>> animation = BoxAnimation(duration=2.0, fps=15.0)
    >>> animation.frame_count
    30
    >>> scene = create_box_scene(animation.frame_time(10), animation.duration)
"""

import math
from dataclasses import dataclass

from pathtracer.camera.pinhole import Camera
from pathtracer.core.types import Color
from pathtracer.geometry.plane import Plane
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.simple import SimpleMaterial
from pathtracer.scene.scene import Light, Object, Scene

# =============================================================================
# Box Constants
# =============================================================================

IMAGE_WIDTH = 512
IMAGE_HEIGHT = 512

CAMERA_POSITION = (0.0, 0.0, -10.0)
CAMERA_DIRECTION = (0.0, 0.0, 1.0)
CAMERA_FOV = math.radians(75.0)

LIGHT_RADIUS = 2.0
LIGHT_INTENSITY = 2048.0

# Shared by every frame; objects hold references, not copies
MATERIAL_RED = SimpleMaterial(Color(1.0, 0.0, 0.0), diffuse=1.0, fuzzyness=0.0)
MATERIAL_GREEN = SimpleMaterial(Color(0.0, 1.0, 0.0), diffuse=1.0, fuzzyness=0.0)
MATERIAL_BLUE = SimpleMaterial(Color(0.2, 0.2, 1.0), diffuse=0.3, fuzzyness=0.05)
MATERIAL_WHITE = SimpleMaterial(Color(1.0, 1.0, 1.0), diffuse=1.0, fuzzyness=0.0)
MATERIAL_MIRROR = SimpleMaterial(Color(1.0, 1.0, 1.0), diffuse=0.0, fuzzyness=0.0)
MATERIAL_MIRROR_FUZZY = SimpleMaterial(Color(0.5, 0.8, 0.8), diffuse=0.2, fuzzyness=0.08)
MATERIAL_PINK = SimpleMaterial(Color(0.94, 0.3, 0.85), diffuse=0.5, fuzzyness=0.02)
MATERIAL_BLACK = SimpleMaterial(Color(0.05, 0.05, 0.05), diffuse=1.0, fuzzyness=0.0)


@dataclass(frozen=True)
class BoxAnimation:
    """Timing of the box animation.

    Attributes:
        duration: Length of one animation cycle in seconds.
        fps: Frames per second.
    """

    duration: float = 1.0 / 15.0
    fps: float = 15.0

    def __post_init__(self) -> None:
        if self.duration <= 0.0:
            raise ValueError(f"duration must be positive, got {self.duration}")
        if self.fps <= 0.0:
            raise ValueError(f"fps must be positive, got {self.fps}")

    @property
    def frame_count(self) -> int:
        # Rounded first so 1/15 s at 15 fps is one frame, not two
        return math.ceil(round(self.duration * self.fps, 9))

    def frame_time(self, frame: int) -> float:
        """Scene time in seconds of the given frame."""
        return frame / self.fps


def create_box_camera() -> Camera:
    return Camera(
        position=CAMERA_POSITION,
        direction=CAMERA_DIRECTION,
        fov=CAMERA_FOV,
        aspect_ratio=IMAGE_WIDTH / IMAGE_HEIGHT,
    )


def create_box_scene(time: float, duration: float) -> Scene:
    """Create the box scene at a point of its animation.

    Args:
        time: Scene time in seconds.
        duration: Length of one animation cycle in seconds.

    Returns:
        The Scene for that instant.
    """
    if duration <= 0.0:
        raise ValueError(f"duration must be positive, got {duration}")

    phase = 2.0 * math.pi * time / duration
    # Starts at -1 and returns there after a full cycle
    sweep = math.sin(phase + 3.0 * math.pi / 2.0)

    # =========================================================================
    # Walls
    # =========================================================================

    floor = Object(Plane((0.0, -5.0, 0.0), (0.0, 1.0, 0.0)), MATERIAL_BLUE)
    wall_left = Object(Plane((-5.0, 0.0, 0.0), (1.0, 0.0, 0.0)), MATERIAL_RED)
    wall_right = Object(Plane((5.0, 0.0, 0.0), (-1.0, 0.0, 0.0)), MATERIAL_GREEN)
    wall_front = Object(Plane((0.0, 0.0, 5.0), (0.0, 0.0, -1.0)), MATERIAL_WHITE)
    ceiling = Object(Plane((0.0, 5.0, 0.0), (0.0, -1.0, 0.0)), MATERIAL_MIRROR_FUZZY)

    # =========================================================================
    # Floating spheres
    # =========================================================================

    sphere_mirror = Object(Sphere((3.0 * sweep, -3.0, -3.0), 1.0), MATERIAL_MIRROR)
    sphere_pink = Object(Sphere((3.0, 3.0 * sweep, 3.0), 2.0), MATERIAL_PINK)
    sphere_black_a = Object(
        Sphere((2.0 * math.sin(phase), 3.5, 2.0 * math.cos(phase)), 0.5),
        MATERIAL_BLACK,
    )
    sphere_black_b = Object(
        Sphere((-2.0 * math.sin(phase), -3.5, -2.0 * math.cos(phase)), 0.5),
        MATERIAL_BLACK,
    )

    light = Light(
        shape=Sphere((0.0, math.sin(phase), 0.0), LIGHT_RADIUS),
        color=Color(1.0, 1.0, 1.0),
        intensity=LIGHT_INTENSITY,
    )

    return Scene(
        camera=create_box_camera(),
        objects=(
            floor,
            wall_left,
            wall_right,
            wall_front,
            ceiling,
            sphere_mirror,
            sphere_pink,
            sphere_black_a,
            sphere_black_b,
        ),
        lights=(light,),
    )
