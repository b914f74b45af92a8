"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere shape using the robust quadratic formula from
Ray Tracing Gems to avoid floating-point artifacts.

The robust quadratic formula avoids catastrophic cancellation when b^2 is
nearly equal to 4ac by using a reformulated calculation that maintains
numerical stability.

Example:
    >>> from whitted.core.ray import Ray, vec3
    >>> from whitted.geometry.sphere import Sphere
    >>> sphere = Sphere(center=vec3(0, 0, -5), radius=1.0)
    >>> hit = sphere.intersects(Ray(vec3(0, 0, 0), vec3(0, 0, -1)), 0.0, 100.0)
    >>> hit.t
    4.0
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from whitted.core.ray import Ray, Vec3, as_vec3
from whitted.geometry.aabb import AxisAlignedBox
from whitted.geometry.shape import Hit, Shape


def _solve_quadratic_robust(h: float, a: float, c: float, sqrt_d: float) -> tuple[float, float]:
    """Solve quadratic equation using robust formula from Ray Tracing Gems.

    Solves a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = -1.0 if h < 0.0 else 1.0
    q = -(h + sign_h * sqrt_d)

    if abs(q) < 1e-12:
        # Tangent ray through the origin of the equation; fall back
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


class Sphere(Shape):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere. Non-positive radii never hit.
    """

    def __init__(self, center: Sequence[float] | Vec3, radius: float) -> None:
        self.center = as_vec3(center)
        self.radius = float(radius)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius})"

    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Test for ray-sphere intersection using robust quadratic formula.

        The intersection is found by solving:
            |origin + t * direction - center|^2 = radius^2

        which expands to a*t^2 + 2*h*t + c = 0 with
            a = dot(direction, direction)
            h = dot(direction, oc)
            c = dot(oc, oc) - radius^2
            oc = origin - center

        The smaller root is preferred; the larger is used when the smaller
        lies outside [t_min, t_max] (ray starting inside the sphere).

        Args:
            ray: The ray to test.
            t_min: Minimum accepted t (inclusive).
            t_max: Maximum accepted t (inclusive).

        Returns:
            Hit with the outward normal, or None.
        """
        if self.radius <= 0.0:
            return None

        oc = ray.origin - self.center
        a = float(np.dot(ray.direction, ray.direction))
        if a == 0.0:
            return None
        h = float(np.dot(ray.direction, oc))
        c = float(np.dot(oc, oc)) - self.radius * self.radius

        discriminant = h * h - a * c
        if discriminant < 0.0:
            return None

        t0, t1 = _solve_quadratic_robust(h, a, c, math.sqrt(discriminant))
        for t in (t0, t1):
            if t_min <= t <= t_max:
                normal = (ray.point_at(t) - self.center) / self.radius
                return Hit(t, normal)
        return None

    def bounds(self) -> AxisAlignedBox:
        r = np.full(3, max(self.radius, 0.0))
        return AxisAlignedBox(self.center - r, self.center + r)
