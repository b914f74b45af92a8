"""Geometry module for shape primitives and spatial acceleration.

Components:
    shape: Shape base class and Hit record
    aabb: Axis-aligned bounding box (also usable as a shape)
    sphere: Sphere with robust quadratic intersection
    triangle: Triangle with Moller-Trumbore intersection
    bvh: Bounding volume hierarchy over scene elements
"""

from .aabb import AxisAlignedBox
from .bvh import BVHInternal, BVHLeaf, BVHNode, BVHTree, TreeHit, build_node
from .shape import Hit, Shape
from .sphere import Sphere
from .triangle import Triangle

__all__ = [
    "Hit",
    "Shape",
    "AxisAlignedBox",
    "Sphere",
    "Triangle",
    "BVHTree",
    "BVHNode",
    "BVHLeaf",
    "BVHInternal",
    "TreeHit",
    "build_node",
]
