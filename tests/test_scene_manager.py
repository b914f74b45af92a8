"""Unit tests for the Scene container.

Tests cover:
- Element, mesh and light addition
- BVH build state and the not-built error
- Light rotation between frames
- Scene clearing, summary and serialization
"""

import numpy as np
import pytest

from whitted.core.transform import Transform
from whitted.geometry.sphere import Sphere
from whitted.geometry.triangle import Triangle
from whitted.materials.phong import PhongMaterial
from whitted.scene.light import AmbientLight, DirectionalLight, PointLight
from whitted.scene.manager import Scene


@pytest.fixture
def fresh_scene():
    """Create a fresh Scene for each test."""
    scene = Scene()
    yield scene
    scene.clear()


class TestConstruction:
    """Tests for adding content to a scene."""

    def test_add_element_returns_handles(self, fresh_scene):
        """Test handles are consecutive indices."""
        assert fresh_scene.add_element(Sphere((0, 0, 0), 1.0)) == 0
        assert fresh_scene.add_element(Sphere((2, 0, 0), 1.0)) == 1
        assert len(fresh_scene.elements) == 2

    def test_default_material_is_black(self, fresh_scene):
        """Test elements without a material get an all-zero material."""
        fresh_scene.add_element(Sphere((0, 0, 0), 1.0))
        assert np.all(fresh_scene.elements[0].material.kd == 0.0)

    def test_add_mesh(self, fresh_scene):
        """Test a mesh adds one triangle element per face."""
        vertices = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
        handles = fresh_scene.add_mesh(vertices, [(0, 1, 2), (0, 2, 3)])
        assert handles == [0, 1]
        assert all(isinstance(e.shape, Triangle) for e in fresh_scene.elements)

    def test_add_mesh_shares_transform(self, fresh_scene):
        """Test every triangle receives the mesh transform."""
        xf = Transform().append_translation(0, 0, -5)
        fresh_scene.add_mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)], xf)
        box = fresh_scene.elements[0].bounds()
        assert np.allclose(box.min, [0, 0, -5])

    def test_add_mesh_rejects_bad_indices(self, fresh_scene):
        """Test out-of-range and malformed faces raise."""
        vertices = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]
        with pytest.raises(ValueError, match="out of range"):
            fresh_scene.add_mesh(vertices, [(0, 1, 3)])
        with pytest.raises(ValueError, match="shape"):
            fresh_scene.add_mesh(vertices, [(0, 1, 2, 0)])

    def test_add_empty_mesh(self, fresh_scene):
        """Test an empty face list adds nothing."""
        assert fresh_scene.add_mesh([], []) == []
        assert fresh_scene.elements == []

    def test_clear(self, fresh_scene):
        """Test clear removes elements and lights and drops the BVH."""
        fresh_scene.add_element(Sphere((0, 0, 0), 1.0))
        fresh_scene.add_light(AmbientLight((1, 1, 1)))
        fresh_scene.build()
        fresh_scene.clear()
        assert fresh_scene.elements == []
        assert fresh_scene.lights == []
        assert not fresh_scene.is_built


class TestBuildState:
    """Tests for the BVH lifecycle."""

    def test_trace_before_build_raises(self, fresh_scene):
        """Test tracing an unbuilt scene raises RuntimeError."""
        fresh_scene.add_element(Sphere((0, 0, -3), 1.0))
        with pytest.raises(RuntimeError, match="not built"):
            fresh_scene.trace(0.5, 0.5)

    def test_adding_after_build_invalidates(self, fresh_scene):
        """Test adding an element marks the BVH stale."""
        fresh_scene.add_element(Sphere((0, 0, -3), 1.0))
        fresh_scene.build()
        assert fresh_scene.is_built
        fresh_scene.add_element(Sphere((0, 0, -6), 1.0))
        assert not fresh_scene.is_built
        with pytest.raises(RuntimeError):
            _ = fresh_scene.tree

    def test_empty_scene_traces_black(self, fresh_scene):
        """Test an empty built scene returns black everywhere."""
        fresh_scene.build()
        assert np.allclose(fresh_scene.trace(0.5, 0.5), 0.0)

    def test_trace_is_repeatable(self, unit_sphere_scene):
        """Test tracing the same coordinates twice yields the same color."""
        first = unit_sphere_scene.trace(0.45, 0.55)
        second = unit_sphere_scene.trace(0.45, 0.55)
        assert np.array_equal(first, second)


class TestLights:
    """Tests for scene light handling."""

    def test_rotate_lights(self, fresh_scene):
        """Test every light rotates about the Y axis."""
        fresh_scene.add_light(AmbientLight((0.2, 0.2, 0.2)))
        fresh_scene.add_light(DirectionalLight((1, 0, 0), (1, 1, 1)))
        fresh_scene.add_light(PointLight((0, 1, 2), (1, 1, 1)))
        fresh_scene.rotate_lights(90.0)
        assert np.allclose(fresh_scene.lights[0].color, 0.2)
        assert np.allclose(fresh_scene.lights[1].direction, [0, 0, -1], atol=1e-12)
        assert np.allclose(fresh_scene.lights[2].position, [2, 1, 0], atol=1e-12)

    def test_rotation_changes_shading(self, unit_sphere_scene):
        """Test rotating the light away darkens the front of the sphere."""
        before = unit_sphere_scene.trace(0.5, 0.5)
        unit_sphere_scene.rotate_lights(60.0)
        after = unit_sphere_scene.trace(0.5, 0.5)
        assert np.allclose(after, before * 0.5)


class TestInspection:
    """Tests for summary and serialization."""

    def test_summary(self, fresh_scene):
        """Test the summary counts shapes by type."""
        fresh_scene.add_element(Sphere((0, 0, 0), 1.0))
        fresh_scene.add_mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)])
        fresh_scene.add_light(AmbientLight((1, 1, 1)))
        text = fresh_scene.summary()
        assert "2 elements" in text
        assert "1 sphere(s)" in text
        assert "1 triangle(s)" in text
        assert "1 lights" in text

    def test_to_dict(self, fresh_scene):
        """Test the dictionary export lists camera, lights and elements."""
        material = PhongMaterial(kd=(0.5, 0.5, 0.5))
        fresh_scene.add_element(Sphere((0, 0, 0), 1.0), material=material)
        fresh_scene.add_light(DirectionalLight((0, -1, 0), (1, 1, 1)))
        data = fresh_scene.to_dict()
        assert data["camera"]["eye"] == [0.0, 0.0, 1.0]
        assert data["lights"][0]["type"] == "directional"
        assert data["elements"][0]["shape"] == "sphere"
        assert data["elements"][0]["bounds"] == [[-1.0, -1.0, -1.0], [1.0, 1.0, 1.0]]
        assert data["elements"][0]["material"]["kd"] == [0.5, 0.5, 0.5]
        assert data["settings"]["recursion_depth"] == 2
