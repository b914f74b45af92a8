"""Ray data structure and vector utilities.

This module provides the fundamental Ray dataclass and the small set of
vector helpers used throughout the tracer. Vectors, points and colors are
all plain numpy float64 arrays of shape (3,).

Example:
    >>> from whitted.core.ray import Ray, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    >>> ray.direction  # normalized on construction
    array([ 0.,  0., -1.])
    >>> point = ray.point_at(5.0)  # Point 5 units along the ray
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

# Type alias for 3D vectors, points and RGB colors
Vec3 = npt.NDArray[np.float64]


def vec3(x: float, y: float, z: float) -> Vec3:
    """Create a 3D float64 vector."""
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(value: Sequence[float] | Vec3) -> Vec3:
    """Convert a 3-element sequence to a float64 vector.

    Args:
        value: Any sequence or array holding exactly three numbers.

    Returns:
        A new float64 array of shape (3,).

    Raises:
        ValueError: If the input does not hold exactly three components.
    """
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got {arr.size}")
    return arr


def length(v: Vec3) -> float:
    return float(np.sqrt(np.dot(v, v)))


def normalize(v: Vec3) -> Vec3:
    """Return v scaled to unit length.

    A zero vector is returned unchanged instead of producing NaN.
    """
    n = length(v)
    if n == 0.0:
        return np.array(v, dtype=np.float64)
    return v / n


def dot(a: Vec3, b: Vec3) -> float:
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    return np.cross(a, b)


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Reflect v about the plane with unit normal n.

    Returns:
        v - 2 * dot(v, n) * n
    """
    return v - 2.0 * np.dot(v, n) * n


@dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    The direction is normalized in ``__post_init__``. A zero direction is left
    as-is; such a ray never hits anything.

    Attributes:
        origin: The starting point of the ray.
        direction: Unit-length direction of travel.
    """

    origin: Vec3
    direction: Vec3

    def __post_init__(self) -> None:
        self.origin = as_vec3(self.origin)
        self.direction = normalize(as_vec3(self.direction))

    def point_at(self, t: float) -> Vec3:
        """Compute the point along the ray at parameter t.

        Args:
            t: The parameter value. Positive values are in front of the origin.

        Returns:
            The point origin + t * direction.
        """
        return self.origin + t * self.direction
