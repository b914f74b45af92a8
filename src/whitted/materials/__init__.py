"""Material models.

Components:
    phong: Phong material coefficients and shading terms
"""

from .phong import PhongMaterial, compute_ambient, compute_phong

__all__ = [
    "PhongMaterial",
    "compute_ambient",
    "compute_phong",
]
