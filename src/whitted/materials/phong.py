"""Phong material for Whitted-style local illumination.

The Phong model combines three local terms plus a mirror term that the
tracer evaluates recursively:

    ambient  = ka * light_color
    diffuse  = kd * max(-L . N, 0)
    specular = ks * max(R . V, 0)^p,   R = L - 2 (L . N) N
    mirror   = kr * trace(reflected ray)

where L is the unit direction the light travels (toward the shaded point),
N the unit surface normal and V the unit direction from the point toward the
viewer. The diffuse and specular terms are scaled by the light's color at the
point, which includes any distance falloff.

Example:
    >>> from whitted.materials.phong import PhongMaterial
    >>> mat = PhongMaterial(kd=(0.8, 0.3, 0.3), ks=(0.5, 0.5, 0.5), p=32.0)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from whitted.core.ray import Vec3, as_vec3


def _black() -> Vec3:
    return np.zeros(3)


@dataclass
class PhongMaterial:
    """Phong material coefficients.

    Attributes:
        ka: Ambient reflectance (RGB).
        kd: Diffuse reflectance (RGB).
        ks: Specular reflectance (RGB).
        kr: Mirror reflectance applied to the recursively traced bounce (RGB).
        p: Specular exponent (non-negative).
    """

    ka: Vec3 = field(default_factory=_black)
    kd: Vec3 = field(default_factory=_black)
    ks: Vec3 = field(default_factory=_black)
    kr: Vec3 = field(default_factory=_black)
    p: float = 1.0

    def __post_init__(self) -> None:
        self.ka = as_vec3(self.ka)
        self.kd = as_vec3(self.kd)
        self.ks = as_vec3(self.ks)
        self.kr = as_vec3(self.kr)
        self.p = float(self.p)
        if self.p < 0.0:
            raise ValueError(f"Specular exponent must be non-negative, got {self.p}")

    @classmethod
    def from_values(cls, values: Sequence[float]) -> PhongMaterial:
        """Build a material from 13 numbers: ka(3) kd(3) ks(3) p kr(3)."""
        if len(values) != 13:
            raise ValueError(f"Expected 13 material values, got {len(values)}")
        return cls(
            ka=values[0:3],
            kd=values[3:6],
            ks=values[6:9],
            p=values[9],
            kr=values[10:13],
        )

    @property
    def is_reflective(self) -> bool:
        return bool(np.any(self.kr != 0.0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "ka": self.ka.tolist(),
            "kd": self.kd.tolist(),
            "ks": self.ks.tolist(),
            "kr": self.kr.tolist(),
            "p": self.p,
        }


def compute_ambient(material: PhongMaterial, light_color: Vec3) -> Vec3:
    """Ambient term: ``ka * light_color``."""
    return material.ka * light_color


def compute_phong(
    material: PhongMaterial,
    light_dir: Vec3,
    normal: Vec3,
    view_dir: Vec3,
    light_color: Vec3,
) -> Vec3:
    """Evaluate the diffuse and specular Phong terms for one light.

    Args:
        material: Surface coefficients.
        light_dir: Unit direction the light travels, toward the surface.
        normal: Unit surface normal.
        view_dir: Unit direction from the surface toward the viewer.
        light_color: Light color arriving at the point, after falloff.

    Returns:
        ``(kd * max(-L.N, 0) + ks * max(R.V, 0)^p) * light_color``
    """
    l_dot_n = float(np.dot(light_dir, normal))
    diffuse = material.kd * max(-l_dot_n, 0.0)

    reflected = light_dir - 2.0 * l_dot_n * normal
    r_dot_v = max(float(np.dot(reflected, view_dir)), 0.0)
    specular = material.ks * (r_dot_v**material.p)

    return (diffuse + specular) * light_color
