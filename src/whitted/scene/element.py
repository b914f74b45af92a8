"""Scene element: a shape placed in the world with a material.

An element owns one Shape and pairs it with a Transform and a PhongMaterial.
Intersection happens in the shape's own (object) space: the world ray is
mapped through the inverse transform, the parameter interval is rescaled by
the mapped direction's length, and the result is mapped back.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from whitted.core.ray import Ray, Vec3
from whitted.core.transform import Transform
from whitted.geometry.aabb import AxisAlignedBox
from whitted.geometry.shape import Hit, Shape
from whitted.materials.phong import PhongMaterial, compute_ambient, compute_phong

if TYPE_CHECKING:
    from whitted.scene.light import Light


class Element:
    """A shape with a world transform and a material.

    Attributes:
        shape: The object-space geometry.
        transform: Object-to-world transform. Copied on construction.
        material: Surface material.
    """

    def __init__(
        self,
        shape: Shape,
        transform: Transform | None = None,
        material: PhongMaterial | None = None,
    ) -> None:
        self.shape = shape
        self.transform = Transform() if transform is None else transform.copy()
        self.material = PhongMaterial() if material is None else material

    def __repr__(self) -> str:
        return f"Element({self.shape!r})"

    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Intersect a world-space ray with this element.

        Args:
            ray: World-space ray.
            t_min: Smallest accepted world-space parameter.
            t_max: Largest accepted world-space parameter.

        Returns:
            Hit with the world-space distance and unit normal, or None. A
            singular transform never reports a hit.
        """
        obj_ray, s = self.transform.apply_inverse_ray(ray)
        if s == 0.0 or not math.isfinite(s):
            return None
        hit = self.shape.intersects(obj_ray, t_min * s, t_max * s)
        if hit is None:
            return None
        return Hit(hit.t / s, self.transform.apply_normal(hit.normal))

    def bounds(self) -> AxisAlignedBox:
        """World-space bounds of the transformed shape."""
        return self.shape.bounds().transformed(self.transform)

    def compute_ambient(self, light: Light) -> Vec3:
        return compute_ambient(self.material, light.color)

    def compute_phong(self, point: Vec3, normal: Vec3, view_dir: Vec3, light: Light) -> Vec3:
        """Diffuse plus specular contribution of a non-ambient light."""
        return compute_phong(
            self.material,
            light.direction_at(point),
            normal,
            view_dir,
            light.color_at(point),
        )
