"""Tests for the Whitted integrator.

Tests cover:
- Direct Phong shading of a primary hit and black for misses
- Shadow rays for directional and point lights
- Mirror recursion between two facing mirrors at various depths
- Negative depth and debug normal shading
"""

import math

import numpy as np
import pytest

from whitted.core.integrator import TraceSettings, trace_pixel, trace_ray
from whitted.core.ray import Ray, vec3
from whitted.geometry.aabb import AxisAlignedBox
from whitted.geometry.sphere import Sphere
from whitted.materials.phong import PhongMaterial
from whitted.scene.light import AmbientLight, DirectionalLight, PointLight
from whitted.scene.manager import Scene


def lit_sphere_scene(occluded, light):
    """Unit sphere seen from +y, with an optional occluder along the shadow path."""
    scene = Scene()
    material = PhongMaterial(ka=(0.1, 0.1, 0.1), kd=(1.0, 1.0, 1.0))
    scene.add_element(Sphere((0.0, 0.0, 0.0), 1.0), material=material)
    if occluded:
        scene.add_element(Sphere((0.0, 4.0, 3.0), 0.5), material=material)
    scene.add_light(AmbientLight((1.0, 1.0, 1.0)))
    scene.add_light(light)
    scene.build()
    return scene


def mirror_corridor(depth):
    """Two facing mirrors along x with the camera eye between them."""
    scene = Scene(TraceSettings(recursion_depth=depth))
    scene.set_camera(
        eye=(0.0, 0.0, 0.0),
        upper_left=(1.0, 1.0, -1.0),
        upper_right=(1.0, 1.0, 1.0),
        lower_left=(1.0, -1.0, -1.0),
        lower_right=(1.0, -1.0, 1.0),
    )
    mirror = PhongMaterial(ka=(0.1, 0.1, 0.1), kr=(0.5, 0.5, 0.5))
    scene.add_element(AxisAlignedBox((-2.0, -5.0, -5.0), (-1.0, 5.0, 5.0)), material=mirror)
    scene.add_element(AxisAlignedBox((1.0, -5.0, -5.0), (2.0, 5.0, 5.0)), material=mirror)
    scene.add_light(AmbientLight((1.0, 1.0, 1.0)))
    scene.build()
    return scene


class TestDirectShading:
    """Tests for the local illumination at the primary hit."""

    def test_center_pixel_fully_lit(self, unit_sphere_scene):
        """Test the pole facing the light receives kd * light color."""
        color = unit_sphere_scene.trace(0.5, 0.5)
        assert np.allclose(color, [1.0, 1.0, 1.0])

    def test_corner_pixel_misses(self, unit_sphere_scene):
        """Test rays that miss every element are black."""
        assert np.allclose(unit_sphere_scene.trace(0.0, 0.0), 0.0)
        assert np.allclose(trace_pixel(unit_sphere_scene, 1.0, 1.0), 0.0)

    def test_grazing_angle_darker(self, unit_sphere_scene):
        """Test diffuse falls off away from the pole."""
        center = unit_sphere_scene.trace(0.5, 0.5)
        off = unit_sphere_scene.trace(0.5, 0.4)
        assert 0.0 < off[0] < center[0]

    def test_colors_are_unclamped(self, diffuse_white):
        """Test bright lights yield values above 1."""
        scene = Scene()
        scene.set_camera((0, 0, 3), (-1, 1, 2), (1, 1, 2), (-1, -1, 2), (1, -1, 2))
        scene.add_element(Sphere((0, 0, 0), 1.0), material=diffuse_white)
        scene.add_light(DirectionalLight((0, 0, -1), (3.0, 3.0, 3.0)))
        scene.build()
        assert np.allclose(scene.trace(0.5, 0.5), 3.0)

    def test_surface_closer_than_epsilon_to_eye(self):
        """Test primary rays see surfaces nearer than the shadow epsilon."""
        scene = Scene(TraceSettings(shadow_epsilon=1e-4, normal_shading=True))
        # Default eye is (0, 0, 1); the front of this sphere is 5e-5 away
        scene.add_element(Sphere((0.0, 0.0, 0.0), 1.0 - 5e-5))
        scene.build()
        assert np.allclose(scene.trace(0.5, 0.5), [0.5, 0.5, 1.0])

    def test_reflected_rays_skip_epsilon(self):
        """Test reflected rays ignore hits within the shadow epsilon."""
        scene = mirror_corridor(1)
        scene.settings = TraceSettings(recursion_depth=1, shadow_epsilon=3.5)
        # The far mirror spans distances 2 to 3 along the bounce, inside the
        # epsilon, so only the near mirror's ambient term remains
        assert np.allclose(scene.trace(0.5, 0.5), 0.1)


class TestShadows:
    """Tests for shadow ray occlusion."""

    def setup_method(self):
        self.ray = Ray(vec3(0, 5, 0), vec3(0, -1, 0))
        self.directional = DirectionalLight((0.0, -1.0, -1.0), (1.0, 1.0, 1.0))

    def test_unoccluded_directional(self):
        """Test ambient plus diffuse when nothing blocks the light."""
        scene = lit_sphere_scene(False, self.directional)
        color = trace_ray(scene, self.ray, 0)
        assert np.allclose(color, 0.1 + math.sqrt(0.5))

    def test_occluded_directional_keeps_ambient(self):
        """Test an occluder removes the direct term but not the ambient term."""
        scene = lit_sphere_scene(True, self.directional)
        color = trace_ray(scene, self.ray, 0)
        assert np.allclose(color, 0.1)

    def test_point_light_in_front_of_occluder(self):
        """Test occluders beyond a point light do not cast shadows."""
        light = PointLight((0.0, 3.0, 2.0), (1.0, 1.0, 1.0))
        scene = lit_sphere_scene(True, light)
        color = trace_ray(scene, self.ray, 0)
        assert np.allclose(color, 0.1 + math.sqrt(0.5))

    def test_point_light_behind_occluder(self):
        """Test occluders between the surface and a point light cast shadows."""
        light = PointLight((0.0, 6.0, 5.0), (1.0, 1.0, 1.0))
        scene = lit_sphere_scene(True, light)
        color = trace_ray(scene, self.ray, 0)
        assert np.allclose(color, 0.1)


class TestRecursion:
    """Tests for mirror reflection and the recursion bound."""

    @pytest.mark.parametrize("depth", [0, 1, 2, 3, 5])
    def test_facing_mirrors(self, depth):
        """Test each bounce adds the next mirror's ambient scaled by kr."""
        scene = mirror_corridor(depth)
        color = scene.trace(0.5, 0.5)
        expected = 0.2 * (1.0 - 0.5 ** (depth + 1))
        assert np.allclose(color, expected)

    def test_negative_depth_is_black(self, unit_sphere_scene):
        """Test negative depth returns black without tracing."""
        ray = unit_sphere_scene.camera.get_ray(0.5, 0.5)
        assert np.allclose(trace_ray(unit_sphere_scene, ray, -1), 0.0)

    def test_explicit_depth_override(self):
        """Test Scene.trace_ray accepts a depth other than the configured one."""
        scene = mirror_corridor(5)
        ray = scene.camera.get_ray(0.5, 0.5)
        assert np.allclose(scene.trace_ray(ray, depth=0), 0.1)


class TestSettings:
    """Tests for trace settings."""

    def test_defaults(self):
        """Test default depth and epsilon."""
        settings = TraceSettings()
        assert settings.recursion_depth == 2
        assert settings.shadow_epsilon == 1e-4
        assert not settings.normal_shading

    def test_negative_epsilon_rejected(self):
        """Test a negative epsilon raises."""
        with pytest.raises(ValueError, match="shadow_epsilon"):
            TraceSettings(shadow_epsilon=-1.0)

    def test_normal_shading(self, unit_sphere_scene):
        """Test debug mode maps the primary normal into [0, 1]."""
        unit_sphere_scene.settings = TraceSettings(normal_shading=True)
        assert np.allclose(unit_sphere_scene.trace(0.5, 0.5), [0.5, 0.5, 1.0])
        assert np.allclose(unit_sphere_scene.trace(0.0, 0.0), 0.0)
