"""Whitted-style recursive ray tracing integrator.

For each ray the integrator finds the nearest surface through the scene's
BVH and sums:

    - the ambient term of every ambient light (never shadowed),
    - the Phong diffuse and specular terms of every directional and point
      light that is not occluded, tested with a short-circuit shadow ray,
    - the mirror term: a reflected ray traced one level deeper and scaled by
      the material's reflective coefficient.

Recursion stops when the remaining depth drops below zero, which yields
black. Rays that miss everything are black as well. Colors are unclamped
floats; clamping is left to image export.

Example:
    >>> from whitted.core.integrator import TraceSettings, trace_ray
    >>> from whitted.scene.manager import Scene
    >>> scene = Scene(settings=TraceSettings(recursion_depth=3))
    >>> ...  # add elements and lights, then scene.build()
    >>> color = trace_ray(scene, ray, scene.settings.recursion_depth)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from whitted.core.ray import Ray, Vec3, normalize

if TYPE_CHECKING:
    from whitted.scene.manager import Scene

# =============================================================================
# Constants
# =============================================================================

# Default number of mirror bounces per primary ray
MAX_DEPTH = 2

# Minimum hit distance for shadow and reflected rays
RAY_EPSILON = 1e-4

# Primary rays accept any t > 0
PRIMARY_T_MIN = math.nextafter(0.0, math.inf)


@dataclass
class TraceSettings:
    """Tunable parameters of the tracer.

    Attributes:
        recursion_depth: Mirror bounces allowed per primary ray. With 0 only
            the primary hit is shaded.
        shadow_epsilon: Offset and minimum distance used for secondary rays
            to keep them from re-hitting the surface they leave.
        normal_shading: Debug mode. Return ``0.5 * (normal + 1)`` at the
            primary hit instead of shading.
    """

    recursion_depth: int = MAX_DEPTH
    shadow_epsilon: float = RAY_EPSILON
    normal_shading: bool = False

    def __post_init__(self) -> None:
        if self.shadow_epsilon < 0.0:
            raise ValueError(f"shadow_epsilon must be non-negative, got {self.shadow_epsilon}")


def black() -> Vec3:
    return np.zeros(3)


def shade_direct(scene: Scene, element_index: int, point: Vec3, normal: Vec3, view_dir: Vec3) -> Vec3:
    """Sum the ambient and unshadowed Phong terms of every light at a hit."""
    eps = scene.settings.shadow_epsilon
    element = scene.elements[element_index]
    color = black()

    for light in scene.lights:
        if light.is_ambient:
            color += element.compute_ambient(light)
            continue

        to_light = -light.direction_at(point)
        distance = light.distance_to(point)
        shadow_ray = Ray(point + eps * to_light, to_light)
        if scene.tree.occluded(shadow_ray, eps, _before(distance)):
            continue
        color += element.compute_phong(point, normal, view_dir, light)

    return color


def _before(distance: float) -> float:
    # Half-open [eps, distance): stop just short of the light itself
    if math.isinf(distance):
        return distance
    return math.nextafter(distance, -math.inf)


def trace_ray(scene: Scene, ray: Ray, depth: int, t_min: float = PRIMARY_T_MIN) -> Vec3:
    """Trace a ray and return its color.

    Args:
        scene: Built scene providing elements, lights, camera and BVH.
        ray: The ray to trace.
        depth: Remaining mirror bounces. Negative depth returns black.
        t_min: Smallest accepted hit distance. Primary rays accept any
            positive distance; reflected rays start at the shadow epsilon.

    Returns:
        Unclamped RGB color.
    """
    if depth < 0:
        return black()

    settings = scene.settings
    hit = scene.tree.trace(ray, t_min, math.inf)
    if hit is None:
        return black()

    point = ray.point_at(hit.t)
    normal = hit.normal
    view_dir = normalize(scene.camera.eye - point)

    if settings.normal_shading:
        return 0.5 * (normal + 1.0)

    color = shade_direct(scene, hit.index, point, normal, view_dir)

    material = scene.elements[hit.index].material
    if material.is_reflective:
        bounce = -view_dir + 2.0 * float(np.dot(view_dir, normal)) * normal
        color += material.kr * trace_ray(
            scene, Ray(point, bounce), depth - 1, settings.shadow_epsilon
        )

    return color


def trace_pixel(scene: Scene, u: float, v: float) -> Vec3:
    """Color seen through normalized image coordinates (u, v)."""
    ray = scene.camera.get_ray(u, v)
    return trace_ray(scene, ray, scene.settings.recursion_depth)
