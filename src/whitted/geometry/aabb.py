"""Axis-aligned bounding box.

The box is both a bounding volume for the BVH and an intersectable Shape.
An empty box is encoded as min = +inf and max = -inf on every axis, so that
expanding it by any point or box yields exactly that point or box.

Ray-box intersection uses the three-axis slab test. Zero direction components
produce signed infinities for the reciprocal; a ``0 * inf`` NaN arises only
when the origin lies on a slab plane while travelling parallel to it, and is
treated as being inside that slab.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

from whitted.core.ray import Ray, Vec3, as_vec3
from whitted.geometry.shape import Hit, Shape

if TYPE_CHECKING:
    from whitted.core.transform import Transform


class AxisAlignedBox(Shape):
    """An axis-aligned box given by its min and max corners.

    Attributes:
        min: Lower corner.
        max: Upper corner.
    """

    def __init__(
        self,
        min_corner: Sequence[float] | Vec3 | None = None,
        max_corner: Sequence[float] | Vec3 | None = None,
    ) -> None:
        """Create a box.

        With no arguments the box is empty. With only ``min_corner`` the box
        is degenerate around that single point.
        """
        if min_corner is None:
            self.min = np.full(3, np.inf)
            self.max = np.full(3, -np.inf)
        else:
            self.min = as_vec3(min_corner)
            self.max = as_vec3(min_corner if max_corner is None else max_corner)

    @classmethod
    def from_points(cls, points: Iterable[Vec3]) -> AxisAlignedBox:
        box = cls()
        for p in points:
            box.expand_to(p)
        return box

    def __repr__(self) -> str:
        return f"AxisAlignedBox(min={self.min.tolist()}, max={self.max.tolist()})"

    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    def copy(self) -> AxisAlignedBox:
        return AxisAlignedBox(self.min.copy(), self.max.copy())

    def expand_to(self, point: Vec3) -> AxisAlignedBox:
        """Grow the box in place to contain ``point``."""
        p = as_vec3(point)
        self.min = np.minimum(self.min, p)
        self.max = np.maximum(self.max, p)
        return self

    def union(self, other: AxisAlignedBox) -> AxisAlignedBox:
        """Return a new box containing both boxes."""
        if other.is_empty():
            return self.copy()
        if self.is_empty():
            return other.copy()
        return AxisAlignedBox(np.minimum(self.min, other.min), np.maximum(self.max, other.max))

    def corners(self) -> list[Vec3]:
        return [
            np.array([x, y, z])
            for x in (self.min[0], self.max[0])
            for y in (self.min[1], self.max[1])
            for z in (self.min[2], self.max[2])
        ]

    def transformed(self, transform: Transform) -> AxisAlignedBox:
        """Return a conservative box around this box mapped by ``transform``.

        All eight corners are transformed and re-bounded. An empty box stays
        empty.
        """
        if self.is_empty():
            return AxisAlignedBox()
        return AxisAlignedBox.from_points(transform.apply(c) for c in self.corners())

    def midpoint(self) -> Vec3:
        return 0.5 * (self.min + self.max)

    def contains(self, point: Vec3, eps: float = 0.0) -> bool:
        p = as_vec3(point)
        return bool(np.all(p >= self.min - eps) and np.all(p <= self.max + eps))

    def bounds(self) -> AxisAlignedBox:
        return self.copy()

    def slab_interval(self, ray: Ray) -> tuple[float, float, int, int]:
        """Compute the parametric entry and exit of the ray's line.

        Returns:
            Tuple of (t_entry, t_exit, entry_axis, exit_axis). The line misses
            the box when t_entry > t_exit.
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            inv = 1.0 / ray.direction
            t0 = (self.min - ray.origin) * inv
            t1 = (self.max - ray.origin) * inv
        tnear = np.minimum(t0, t1)
        tfar = np.maximum(t0, t1)
        # NaN means origin on a slab plane with a parallel direction
        tnear = np.where(np.isnan(tnear), -np.inf, tnear)
        tfar = np.where(np.isnan(tfar), np.inf, tfar)
        entry_axis = int(np.argmax(tnear))
        exit_axis = int(np.argmin(tfar))
        return float(tnear[entry_axis]), float(tfar[exit_axis]), entry_axis, exit_axis

    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Slab test against the box.

        When the entry lies at or after ``t_min`` the hit is the entry with
        the entry face's outward normal. When the ray starts inside the
        interval the hit is reported at ``t_min`` with the exit face's
        outward normal.
        """
        if self.is_empty():
            return None
        t_entry, t_exit, entry_axis, exit_axis = self.slab_interval(ray)
        if t_entry > t_exit or t_exit < t_min or t_entry > t_max:
            return None

        normal = np.zeros(3)
        if t_entry >= t_min:
            normal[entry_axis] = -np.sign(ray.direction[entry_axis])
            return Hit(t_entry, normal)
        normal[exit_axis] = np.sign(ray.direction[exit_axis])
        return Hit(t_min, normal)
