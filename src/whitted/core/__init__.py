"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    transform: Affine transforms with cached inverse
    integrator: Whitted recursive tracing and trace settings
    progressive: Whole-image rendering with sample accumulation

Note: integrator and progressive are NOT imported here; they depend on the
scene package. Import them directly from whitted.core.integrator or
whitted.core.progressive when needed.
"""

from .ray import Ray, Vec3, as_vec3, cross, dot, length, normalize, reflect, vec3
from .transform import Transform, rotation_matrix

__all__ = [
    "Ray",
    "Vec3",
    "vec3",
    "as_vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "Transform",
    "rotation_matrix",
]
