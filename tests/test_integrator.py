"""Tests for the Monte Carlo integrator.

Tests cover:
- Renderer validation and defaults
- trace(): ambient at depth 0 and on a miss, light-versus-object resolution,
  albedo tinting and budget exhaustion
- render(): output range, zero sample count, empty images
- End-to-end scenes with known expected pixel values
"""

import math

import numpy as np
import pytest

from pathtracer.camera.pinhole import Camera
from pathtracer.core.buffer import ImageBuffer
from pathtracer.core.types import BLACK, WHITE, Color, LightRay, Ray
from pathtracer.geometry.plane import Plane
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.simple import SimpleMaterial
from pathtracer.scene.scene import Light, Object, Scene

GREY_MIRROR = SimpleMaterial(Color(0.5, 0.5, 0.5), diffuse=0.0, fuzzyness=0.0)
WHITE_AMBIENT = LightRay(WHITE, 1.0)


def make_camera(position=(0.0, 0.0, -5.0), fov_degrees=60.0):
    return Camera(position, (0.0, 0.0, 1.0), math.radians(fov_degrees), 1.0)


class TestRendererConfig:
    """Tests for Renderer construction."""

    def test_defaults(self):
        from pathtracer.core.integrator import Renderer

        renderer = Renderer()
        assert renderer.sample_count == 128
        assert renderer.indirect_count == 4
        assert renderer.max_value == 1024.0
        assert renderer.ambient_light == LightRay(BLACK, 0.0)

    @pytest.mark.parametrize(
        "kwargs",
        [{"sample_count": -1}, {"indirect_count": -1}, {"max_value": 0.0}, {"max_value": -2.0}],
    )
    def test_invalid(self, kwargs):
        from pathtracer.core.integrator import Renderer

        with pytest.raises(ValueError):
            Renderer(**kwargs)


class TestTrace:
    """Tests for Renderer.trace()."""

    def test_depth_zero_returns_ambient(self):
        from pathtracer.core.integrator import Renderer

        ambient = LightRay(Color(0.5, 0.25, 1.0), 3.0)
        scene = Scene(
            make_camera(),
            [Object(Sphere((0, 0, 0), 1.0), SimpleMaterial(WHITE))],
            [Light(Sphere((0, 0, 5), 1.0), WHITE, 100.0)],
        )

        result = Renderer(ambient_light=ambient).trace(Ray((0, 0, -5), (0, 0, 1)), scene, 0)

        assert result == ambient

    def test_miss_returns_ambient(self):
        from pathtracer.core.integrator import Renderer

        ambient = LightRay(Color(0.5, 0.25, 1.0), 3.0)
        scene = Scene(make_camera(), [Object(Sphere((0, 0, 0), 1.0), SimpleMaterial(WHITE))])

        result = Renderer(ambient_light=ambient).trace(Ray((0, 5, -5), (0, 0, 1)), scene, 3)

        assert result == ambient

    def test_light_closer_than_object(self):
        from pathtracer.core.integrator import Renderer

        scene = Scene(
            make_camera(),
            [Object(Plane((0, 0, 10), (0, 0, -1)), SimpleMaterial(WHITE))],
            [Light(Sphere((0, 0, 0), 1.0), Color(1.0, 0.5, 0.0), 7.0)],
        )

        result = Renderer().trace(Ray((0, 0, -5), (0, 0, 1)), scene, 1)

        assert result.color == Color(1.0, 0.5, 0.0)
        assert result.intensity == 7.0

    def test_object_in_front_of_light(self):
        from pathtracer.core.integrator import Renderer

        scene = Scene(
            make_camera(),
            [Object(Sphere((0, 0, 0), 1.0), GREY_MIRROR)],
            [Light(Sphere((0, 0, 10), 1.0), WHITE, 7.0)],
        )

        # Mirrored straight back toward -z, where nothing is hit
        result = Renderer(ambient_light=WHITE_AMBIENT).trace(Ray((0, 0, -5), (0, 0, 1)), scene, 2)

        assert result.color.to_tuple() == pytest.approx((0.5, 0.5, 0.5))
        assert result.intensity == 1.0

    def test_equal_distance_object_wins(self):
        from pathtracer.core.integrator import Renderer

        shared = Sphere((0, 0, 0), 1.0)
        scene = Scene(make_camera(), [Object(shared, GREY_MIRROR)], [Light(shared, WHITE, 7.0)])

        result = Renderer(ambient_light=WHITE_AMBIENT).trace(Ray((0, 0, -5), (0, 0, 1)), scene, 2)

        assert result.intensity == 1.0
        assert result.color.to_tuple() == pytest.approx((0.5, 0.5, 0.5))

    def test_exhausted_budget_returns_tinted_ambient(self):
        from pathtracer.core.integrator import Renderer

        scene = Scene(
            make_camera(),
            [
                Object(Sphere((0, 0, 0), 1.0), GREY_MIRROR),
                # Would send the mirrored ray back into the first sphere
                Object(Plane((0, 0, -8), (0, 0, 1)), GREY_MIRROR),
            ],
        )
        renderer = Renderer(ambient_light=WHITE_AMBIENT)
        ray = Ray((0, 0, -5), (0, 0, 1))

        # One hit, then the budget runs out
        assert renderer.trace(ray, scene, 1).color.to_tuple() == pytest.approx((0.5, 0.5, 0.5))
        # Two hits, tint compounds
        assert renderer.trace(ray, scene, 2).color.to_tuple() == pytest.approx((0.25, 0.25, 0.25))
        # Three hits
        assert renderer.trace(ray, scene, 3).color.to_tuple() == pytest.approx(
            (0.125, 0.125, 0.125)
        )

    def test_albedo_tints_light_color(self):
        from pathtracer.core.integrator import Renderer

        tinted_mirror = SimpleMaterial(Color(1.0, 0.5, 0.25), diffuse=0.0, fuzzyness=0.0)
        scene = Scene(
            make_camera(),
            [Object(Plane((0, 0, 0), (0, 0, -1)), tinted_mirror)],
            [Light(Sphere((0, 0, -20), 1.0), WHITE, 5.0)],
        )

        result = Renderer().trace(Ray((0, 0, -5), (0, 0, 1)), scene, 2)

        assert result.color.to_tuple() == pytest.approx((1.0, 0.5, 0.25))
        assert result.intensity == 5.0

    def test_negative_depth(self):
        from pathtracer.core.integrator import Renderer

        with pytest.raises(ValueError):
            Renderer().trace(Ray((0, 0, 0), (0, 0, 1)), Scene(make_camera()), -1)


class TestRender:
    """Tests for Renderer.render()."""

    def test_output_in_unit_range(self):
        from pathtracer.core.integrator import Renderer
        from pathtracer.scene.box import create_box_scene

        buffer = ImageBuffer(16, 16)
        # A low max_value saturates the light and exercises the clamp
        Renderer(sample_count=4, indirect_count=2, max_value=8.0).render(
            create_box_scene(0.0, 1.0), buffer
        )

        image = buffer.to_numpy()
        assert np.all(image >= 0.0)
        assert np.all(image <= 1.0)
        assert image.max() == 1.0
        assert image.max() > image.min()

    def test_zero_samples_leaves_black(self):
        from pathtracer.core.integrator import Renderer

        scene = Scene(make_camera(), lights=[Light(Sphere((0, 0, 0), 3.0), WHITE, 1.0)])
        buffer = ImageBuffer(4, 4)
        buffer.channels()[...] = 0.5

        Renderer(sample_count=0, max_value=1.0).render(scene, buffer)

        assert np.all(buffer.to_numpy() == 0.0)

    def test_empty_buffer(self):
        from pathtracer.core.integrator import Renderer

        buffer = ImageBuffer(0, 0)
        Renderer(sample_count=1).render(Scene(make_camera()), buffer)
        assert buffer.to_numpy().shape == (0, 0, 3)

    def test_render_overwrites_buffer_contents(self):
        from pathtracer.core.integrator import Renderer

        buffer = ImageBuffer(4, 4)
        buffer.channels()[...] = 1.0

        Renderer(sample_count=2).render(Scene(make_camera()), buffer)

        assert np.all(buffer.to_numpy() == 0.0)


class TestEndToEnd:
    """Small complete scenes with predictable results."""

    def test_lit_diffuse_sphere(self):
        """A white diffuse sphere lit by a light behind the camera."""
        from pathtracer.core.integrator import Renderer

        scene = Scene(
            make_camera(),
            [Object(Sphere((0, 0, 0), 1.0), SimpleMaterial(WHITE, diffuse=1.0))],
            [Light(Sphere((0, 0, -25), 8.0), WHITE, 4.0)],
        )
        buffer = ImageBuffer(8, 8)

        Renderer(sample_count=256, indirect_count=2, max_value=1.0).render(scene, buffer)

        center = buffer.pixel(4, 4)
        corner = buffer.pixel(0, 0)
        assert np.all(center > 0.0)
        assert np.all(center < 1.0)
        # White light on a white surface stays grey
        assert center[0] == center[1] == center[2]
        assert np.all(corner == 0.0)

    def test_light_in_front_of_diffuse_plane(self):
        """A light on the central ray in front of a plane filling the frame."""
        from pathtracer.core.integrator import Renderer

        scene = Scene(
            make_camera(position=(0.0, 0.0, 0.0)),
            [Object(Plane((0, 0, 10), (0, 0, -1)), SimpleMaterial(Color(0.5, 0.5, 0.5)))],
            [Light(Sphere((0, 0, 5), 0.5), WHITE, 1.0)],
        )
        buffer = ImageBuffer(8, 8)

        Renderer(
            sample_count=16,
            indirect_count=1,
            max_value=1.0,
            ambient_light=WHITE_AMBIENT,
        ).render(scene, buffer)

        # color * intensity / max_value
        np.testing.assert_allclose(buffer.pixel(4, 4), [1.0, 1.0, 1.0], atol=1e-6)
        # Plane albedo times ambient (or the light seen after the bounce)
        np.testing.assert_allclose(buffer.pixel(0, 0), [0.5, 0.5, 0.5], atol=1e-6)
