"""Light sources for Phong shading.

Three kinds of light are supported:

    AmbientLight: constant color added to every visible surface through the
        material's ambient coefficient. Never shadow-tested.
    DirectionalLight: parallel light travelling along a fixed direction from
        infinitely far away.
    PointLight: light emitted from a position, optionally attenuated with
        distance (no falloff, 1/d, or 1/d^2).

Every light exposes the same small interface used by the tracer:
``direction_at(point)`` is the unit direction the light travels when it
reaches ``point``; ``distance_to(point)`` is how far a shadow ray has to
travel to reach the light; ``color_at(point)`` is the attenuated color.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np

from whitted.core.ray import Vec3, as_vec3, normalize
from whitted.core.transform import rotation_matrix


class Falloff(IntEnum):
    """Distance attenuation of a point light."""

    NONE = 0
    LINEAR = 1
    QUADRATIC = 2


def _rotate_y(v: Vec3, degrees: float) -> Vec3:
    return rotation_matrix(0.0, degrees, 0.0) @ v


@dataclass
class AmbientLight:
    """Uniform ambient illumination.

    Attributes:
        color: Light color (RGB).
    """

    color: Vec3

    is_ambient = True

    def __post_init__(self) -> None:
        self.color = as_vec3(self.color)

    def color_at(self, point: Vec3) -> Vec3:
        return self.color

    def rotate(self, degrees: float) -> None:
        """Ambient light has no direction; rotation is a no-op."""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "ambient", "color": self.color.tolist()}


@dataclass
class DirectionalLight:
    """Light arriving from infinitely far away along a fixed direction.

    Attributes:
        direction: Unit direction the light travels (normalized on creation).
        color: Light color (RGB).
    """

    direction: Vec3
    color: Vec3

    is_ambient = False

    def __post_init__(self) -> None:
        self.direction = normalize(as_vec3(self.direction))
        self.color = as_vec3(self.color)

    def direction_at(self, point: Vec3) -> Vec3:
        return self.direction

    def distance_to(self, point: Vec3) -> float:
        return math.inf

    def color_at(self, point: Vec3) -> Vec3:
        return self.color

    def rotate(self, degrees: float) -> None:
        """Rotate the light direction about the world Y axis."""
        self.direction = normalize(_rotate_y(self.direction, degrees))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "directional",
            "direction": self.direction.tolist(),
            "color": self.color.tolist(),
        }


@dataclass
class PointLight:
    """Light emitted from a single position.

    Attributes:
        position: Light position in world space.
        color: Light color (RGB) before attenuation.
        falloff: Distance attenuation mode.
    """

    position: Vec3
    color: Vec3
    falloff: Falloff = field(default=Falloff.NONE)

    is_ambient = False

    def __post_init__(self) -> None:
        self.position = as_vec3(self.position)
        self.color = as_vec3(self.color)
        self.falloff = Falloff(self.falloff)

    def direction_at(self, point: Vec3) -> Vec3:
        return normalize(as_vec3(point) - self.position)

    def distance_to(self, point: Vec3) -> float:
        return float(np.linalg.norm(as_vec3(point) - self.position))

    def color_at(self, point: Vec3) -> Vec3:
        """Light color at ``point`` after distance attenuation.

        Linear falloff scales by 1/d and quadratic by 1/d^2. A point exactly
        at the light position receives infinite intensity.
        """
        if self.falloff == Falloff.NONE:
            return self.color
        d = self.distance_to(point)
        if self.falloff == Falloff.QUADRATIC:
            d = d * d
        with np.errstate(divide="ignore"):
            return self.color * (np.float64(1.0) / d)

    def rotate(self, degrees: float) -> None:
        """Rotate the light position about the world Y axis."""
        self.position = _rotate_y(self.position, degrees)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "point",
            "position": self.position.tolist(),
            "color": self.color.tolist(),
            "falloff": int(self.falloff),
        }


Light = AmbientLight | DirectionalLight | PointLight


def point_light(
    position: Sequence[float], color: Sequence[float], falloff: int = 0
) -> PointLight:
    """Create a point light from a raw falloff code.

    Codes other than 1 (linear) and 2 (quadratic) mean no falloff.
    """
    try:
        mode = Falloff(int(falloff))
    except ValueError:
        mode = Falloff.NONE
    return PointLight(position, color, mode)
