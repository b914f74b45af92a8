"""Tests for lights and the Phong material.

Tests cover:
- Directional, point and ambient light queries
- Point light falloff modes
- Rotating lights about the Y axis
- Diffuse and specular Phong terms
- Material construction and validation
"""

import math

import numpy as np
import pytest

from whitted.core.ray import vec3
from whitted.materials.phong import PhongMaterial, compute_ambient, compute_phong
from whitted.scene.light import AmbientLight, DirectionalLight, Falloff, PointLight, point_light


class TestLights:
    """Tests for light source queries."""

    def test_directional_normalized(self):
        """Test directional lights store a unit direction and are infinitely far."""
        light = DirectionalLight((0, -2, 0), (1, 1, 1))
        assert np.allclose(light.direction, [0, -1, 0])
        assert light.distance_to(vec3(5, 5, 5)) == math.inf
        assert np.allclose(light.direction_at(vec3(3, 0, 0)), [0, -1, 0])
        assert not light.is_ambient

    def test_point_direction_and_distance(self):
        """Test point light direction points from light to surface."""
        light = PointLight((0, 4, 0), (1, 1, 1))
        p = vec3(0, 1, 0)
        assert np.allclose(light.direction_at(p), [0, -1, 0])
        assert abs(light.distance_to(p) - 3.0) < 1e-12

    @pytest.mark.parametrize(
        "falloff,scale",
        [(Falloff.NONE, 1.0), (Falloff.LINEAR, 0.5), (Falloff.QUADRATIC, 0.25)],
    )
    def test_point_falloff(self, falloff, scale):
        """Test color attenuation for each falloff mode at distance 2."""
        light = PointLight((0, 0, 0), (1.0, 0.5, 2.0), falloff)
        color = light.color_at(vec3(2, 0, 0))
        assert np.allclose(color, np.array([1.0, 0.5, 2.0]) * scale)

    def test_point_light_factory_unknown_code(self):
        """Test unknown falloff codes fall back to no falloff."""
        assert point_light((0, 0, 0), (1, 1, 1), 7).falloff == Falloff.NONE
        assert point_light((0, 0, 0), (1, 1, 1), 2).falloff == Falloff.QUADRATIC

    def test_ambient(self):
        """Test ambient lights report their color everywhere."""
        light = AmbientLight((0.1, 0.2, 0.3))
        assert light.is_ambient
        assert np.allclose(light.color_at(vec3(9, 9, 9)), [0.1, 0.2, 0.3])

    def test_rotate_directional(self):
        """Test rotating a directional light about Y."""
        light = DirectionalLight((1, 0, 0), (1, 1, 1))
        light.rotate(90.0)
        assert np.allclose(light.direction, [0, 0, -1], atol=1e-12)

    def test_rotate_point(self):
        """Test rotating a point light moves its position about Y."""
        light = PointLight((0, 2, 3), (1, 1, 1))
        light.rotate(180.0)
        assert np.allclose(light.position, [0, 2, -3], atol=1e-12)

    def test_to_dict(self):
        """Test light serialization includes type and parameters."""
        data = PointLight((1, 2, 3), (1, 1, 1), Falloff.LINEAR).to_dict()
        assert data["type"] == "point"
        assert data["falloff"] == 1
        assert data["position"] == [1.0, 2.0, 3.0]


class TestPhongMaterial:
    """Tests for material construction."""

    def test_defaults_are_black(self):
        """Test default coefficients are zero."""
        mat = PhongMaterial()
        for coeff in (mat.ka, mat.kd, mat.ks, mat.kr):
            assert np.all(coeff == 0.0)
        assert not mat.is_reflective

    def test_from_values_order(self):
        """Test the 13-value layout ka kd ks p kr."""
        values = [0.1, 0.1, 0.1, 0.2, 0.2, 0.2, 0.3, 0.3, 0.3, 50.0, 0.4, 0.4, 0.4]
        mat = PhongMaterial.from_values(values)
        assert np.allclose(mat.ka, 0.1)
        assert np.allclose(mat.kd, 0.2)
        assert np.allclose(mat.ks, 0.3)
        assert mat.p == 50.0
        assert np.allclose(mat.kr, 0.4)
        assert mat.is_reflective

    def test_from_values_wrong_count(self):
        """Test an incorrect number of values raises."""
        with pytest.raises(ValueError, match="13 material values"):
            PhongMaterial.from_values([1.0] * 12)

    def test_negative_exponent_rejected(self):
        """Test a negative specular exponent raises."""
        with pytest.raises(ValueError, match="non-negative"):
            PhongMaterial(p=-1.0)


class TestPhongShading:
    """Tests for the Phong shading terms."""

    def test_ambient_term(self):
        """Test ambient = ka * light color."""
        mat = PhongMaterial(ka=(0.5, 0.5, 0.5))
        assert np.allclose(compute_ambient(mat, vec3(1.0, 0.5, 0.0)), [0.5, 0.25, 0.0])

    def test_diffuse_cosine(self):
        """Test diffuse falls off with the cosine of the incidence angle."""
        mat = PhongMaterial(kd=(1, 1, 1))
        normal = vec3(0, 1, 0)
        light_dir = vec3(1, -1, 0) / math.sqrt(2)
        color = compute_phong(mat, light_dir, normal, vec3(0, 1, 0), vec3(1, 1, 1))
        assert np.allclose(color, math.sqrt(0.5))

    def test_light_behind_surface_gives_no_diffuse(self):
        """Test lights below the surface contribute no diffuse."""
        mat = PhongMaterial(kd=(1, 1, 1))
        color = compute_phong(mat, vec3(0, 1, 0), vec3(0, 1, 0), vec3(0, 1, 0), vec3(1, 1, 1))
        assert np.allclose(color, 0.0)

    def test_specular_peak_at_mirror_direction(self):
        """Test the specular lobe peaks when the viewer sits on the reflection."""
        mat = PhongMaterial(ks=(1, 1, 1), p=20.0)
        light_dir = vec3(1, -1, 0) / math.sqrt(2)
        normal = vec3(0, 1, 0)
        mirror_view = vec3(1, 1, 0) / math.sqrt(2)
        off_view = vec3(-1, 1, 0) / math.sqrt(2)
        peak = compute_phong(mat, light_dir, normal, mirror_view, vec3(1, 1, 1))
        off = compute_phong(mat, light_dir, normal, off_view, vec3(1, 1, 1))
        assert np.allclose(peak, 1.0)
        assert np.allclose(off, 0.0)

    def test_scaled_by_light_color(self):
        """Test the sum is multiplied by the light color."""
        mat = PhongMaterial(kd=(1, 1, 1))
        color = compute_phong(mat, vec3(0, -1, 0), vec3(0, 1, 0), vec3(0, 1, 0), vec3(0.2, 0.4, 0.8))
        assert np.allclose(color, [0.2, 0.4, 0.8])
