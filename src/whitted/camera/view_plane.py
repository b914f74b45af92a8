"""View-plane camera for primary ray generation.

The camera is an eye point plus the four corners of a rectangular view plane
in world space. Normalized image coordinates (u, v) in [0, 1] are mapped
bilinearly onto the plane, with u = 0 at the left edge and v = 0 at the top
edge, and the primary ray runs from the eye through that point.

Default placement looks down -z from (0, 0, 1) through the square
[-1, 1] x [-1, 1] at z = 0.

Example:
    >>> from whitted.camera.view_plane import ViewPlaneCamera
    >>> camera = ViewPlaneCamera()
    >>> ray = camera.get_ray(0.5, 0.5)  # Ray through image center
    >>> ray.direction
    array([ 0.,  0., -1.])
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from whitted.core.ray import Ray, Vec3, as_vec3, vec3

# =============================================================================
# Default View
# =============================================================================

DEFAULT_EYE = (0.0, 0.0, 1.0)
DEFAULT_UPPER_LEFT = (-1.0, 1.0, 0.0)
DEFAULT_UPPER_RIGHT = (1.0, 1.0, 0.0)
DEFAULT_LOWER_LEFT = (-1.0, -1.0, 0.0)
DEFAULT_LOWER_RIGHT = (1.0, -1.0, 0.0)


@dataclass
class ViewPlaneCamera:
    """Eye point and the four world-space corners of the view plane.

    Attributes:
        eye: Camera position.
        upper_left: View-plane corner at (u, v) = (0, 0).
        upper_right: View-plane corner at (u, v) = (1, 0).
        lower_left: View-plane corner at (u, v) = (0, 1).
        lower_right: View-plane corner at (u, v) = (1, 1).
    """

    eye: Vec3 = field(default_factory=lambda: vec3(*DEFAULT_EYE))
    upper_left: Vec3 = field(default_factory=lambda: vec3(*DEFAULT_UPPER_LEFT))
    upper_right: Vec3 = field(default_factory=lambda: vec3(*DEFAULT_UPPER_RIGHT))
    lower_left: Vec3 = field(default_factory=lambda: vec3(*DEFAULT_LOWER_LEFT))
    lower_right: Vec3 = field(default_factory=lambda: vec3(*DEFAULT_LOWER_RIGHT))

    def __post_init__(self) -> None:
        self.set(self.eye, self.upper_left, self.upper_right, self.lower_left, self.lower_right)

    def set(
        self,
        eye: Sequence[float] | Vec3,
        upper_left: Sequence[float] | Vec3,
        upper_right: Sequence[float] | Vec3,
        lower_left: Sequence[float] | Vec3,
        lower_right: Sequence[float] | Vec3,
    ) -> None:
        """Replace the eye and all four view-plane corners."""
        self.eye = as_vec3(eye)
        self.upper_left = as_vec3(upper_left)
        self.upper_right = as_vec3(upper_right)
        self.lower_left = as_vec3(lower_left)
        self.lower_right = as_vec3(lower_right)

    def point_on_plane(self, u: float, v: float) -> Vec3:
        """Bilinear interpolation of the view-plane corners."""
        left = v * self.lower_left + (1.0 - v) * self.upper_left
        right = v * self.lower_right + (1.0 - v) * self.upper_right
        return (1.0 - u) * left + u * right

    def get_ray(self, u: float, v: float) -> Ray:
        """Generate the primary ray through image coordinates (u, v).

        Args:
            u: Horizontal coordinate, 0 at the left edge.
            v: Vertical coordinate, 0 at the top edge.

        Returns:
            Ray starting at the eye with unit direction.
        """
        return Ray(self.eye, self.point_on_plane(u, v) - self.eye)

    def to_dict(self) -> dict[str, Any]:
        return {
            "eye": self.eye.tolist(),
            "upper_left": self.upper_left.tolist(),
            "upper_right": self.upper_right.tolist(),
            "lower_left": self.lower_left.tolist(),
            "lower_right": self.lower_right.tolist(),
        }
