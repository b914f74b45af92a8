"""Shape capability shared by all geometric primitives.

Every primitive answers two questions: where (if anywhere) does a ray first
hit it inside an inclusive parameter interval, and what axis-aligned box
encloses it. Intersection tests are pure functions of their inputs and never
raise; a miss is reported as ``None``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from whitted.core.ray import Ray, Vec3

if TYPE_CHECKING:
    from whitted.geometry.aabb import AxisAlignedBox


@dataclass(frozen=True)
class Hit:
    """Record of a ray-shape intersection.

    Attributes:
        t: Ray parameter of the hit point.
        normal: Unit surface normal at the hit point.
    """

    t: float
    normal: Vec3


class Shape(ABC):
    """Abstract base for intersectable primitives."""

    @abstractmethod
    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Find the nearest intersection with t in [t_min, t_max].

        Args:
            ray: The ray to test.
            t_min: Smallest accepted ray parameter (inclusive).
            t_max: Largest accepted ray parameter (inclusive).

        Returns:
            The hit, or None when the ray misses within the interval.
        """

    @abstractmethod
    def bounds(self) -> AxisAlignedBox:
        """Return an axis-aligned box enclosing the shape."""
