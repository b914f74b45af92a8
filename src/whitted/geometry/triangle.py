"""Triangle primitive using the Moller-Trumbore intersection test."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from whitted.core.ray import Ray, Vec3, as_vec3, normalize
from whitted.geometry.aabb import AxisAlignedBox
from whitted.geometry.shape import Hit, Shape

# Determinants below this magnitude are treated as parallel or degenerate
DET_EPSILON = 1e-12


class Triangle(Shape):
    """A triangle given by three vertices.

    The geometric normal is ``normalize((b - a) x (c - a))``. Intersections
    report it flipped when needed so that it faces the incoming ray.

    Attributes:
        a: First vertex.
        b: Second vertex.
        c: Third vertex.
    """

    def __init__(
        self,
        a: Sequence[float] | Vec3,
        b: Sequence[float] | Vec3,
        c: Sequence[float] | Vec3,
    ) -> None:
        self.a = as_vec3(a)
        self.b = as_vec3(b)
        self.c = as_vec3(c)
        self._e1 = self.b - self.a
        self._e2 = self.c - self.a
        self.normal = normalize(np.cross(self._e1, self._e2))

    def __repr__(self) -> str:
        return f"Triangle(a={self.a.tolist()}, b={self.b.tolist()}, c={self.c.tolist()})"

    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        pvec = np.cross(ray.direction, self._e2)
        det = float(np.dot(self._e1, pvec))
        if abs(det) < DET_EPSILON:
            return None

        inv_det = 1.0 / det
        tvec = ray.origin - self.a
        u = float(np.dot(tvec, pvec)) * inv_det
        if u < 0.0 or u > 1.0:
            return None

        qvec = np.cross(tvec, self._e1)
        v = float(np.dot(ray.direction, qvec)) * inv_det
        if v < 0.0 or u + v > 1.0:
            return None

        t = float(np.dot(self._e2, qvec)) * inv_det
        if t < t_min or t > t_max:
            return None

        normal = -self.normal if det < 0.0 else self.normal
        return Hit(t, normal.copy())

    def bounds(self) -> AxisAlignedBox:
        return AxisAlignedBox.from_points((self.a, self.b, self.c))
