"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules: small ready-made
scenes, materials, and a seeded random generator for randomized checks.
"""

import numpy as np
import pytest

from whitted.core.integrator import TraceSettings
from whitted.geometry.sphere import Sphere
from whitted.materials.phong import PhongMaterial
from whitted.scene.light import DirectionalLight
from whitted.scene.manager import Scene


@pytest.fixture
def rng():
    """Seeded generator so randomized tests are reproducible."""
    return np.random.default_rng(12345)


@pytest.fixture
def diffuse_white():
    """Purely diffuse white material (kd=1, everything else 0)."""
    return PhongMaterial(kd=(1.0, 1.0, 1.0))


@pytest.fixture
def unit_sphere_scene(diffuse_white):
    """Unit sphere at the origin lit head-on by a white directional light.

    The camera eye sits at (0, 0, 3) looking down -z through a 2x2 view
    plane at z = 2, so the image center sees the sphere's pole at (0, 0, 1).
    """
    scene = Scene(TraceSettings(recursion_depth=2))
    scene.set_camera(
        eye=(0.0, 0.0, 3.0),
        upper_left=(-1.0, 1.0, 2.0),
        upper_right=(1.0, 1.0, 2.0),
        lower_left=(-1.0, -1.0, 2.0),
        lower_right=(1.0, -1.0, 2.0),
    )
    scene.add_element(Sphere((0.0, 0.0, 0.0), 1.0), material=diffuse_white)
    scene.add_light(DirectionalLight((0.0, 0.0, -1.0), (1.0, 1.0, 1.0)))
    scene.build()
    return scene
