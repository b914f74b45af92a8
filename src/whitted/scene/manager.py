"""Scene container and tracing entry point.

The Scene owns the elements, lights, camera and trace settings, and the BVH
built over the elements. Construction happens through ``add_*`` calls; once
everything is added, ``build()`` indexes the elements and the scene is ready
to trace. Adding elements afterwards marks the index stale until the next
``build()``.

Tracing is read-only: ``trace(u, v)`` has no side effects, so pixels can be
evaluated in any order. Per-frame changes such as ``rotate_lights`` are made
explicitly by the caller between frames.

Example:
    >>> from whitted.scene.manager import Scene
    >>> from whitted.geometry.sphere import Sphere
    >>> from whitted.materials.phong import PhongMaterial
    >>> from whitted.scene.light import DirectionalLight
    >>> scene = Scene()
    >>> scene.add_element(Sphere((0, 0, -3), 1.0), material=PhongMaterial(kd=(1, 0, 0)))
    0
    >>> scene.add_light(DirectionalLight((0, 0, -1), (1, 1, 1)))
    >>> tree = scene.build()
    >>> color = scene.trace(0.5, 0.5)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np

from whitted.camera.view_plane import ViewPlaneCamera
from whitted.core.integrator import TraceSettings, trace_ray
from whitted.core.ray import Ray, Vec3
from whitted.core.transform import Transform
from whitted.geometry.bvh import BVHTree
from whitted.geometry.shape import Shape
from whitted.geometry.triangle import Triangle
from whitted.io.obj import load_obj
from whitted.materials.phong import PhongMaterial
from whitted.scene.element import Element
from whitted.scene.light import Light

logger = logging.getLogger(__name__)


class Scene:
    """Elements, lights and camera, with a BVH for ray queries.

    Attributes:
        elements: Scene elements; handles returned by ``add_element`` index
            into this list.
        lights: Light sources, in insertion order.
        camera: The view-plane camera.
        settings: Trace settings (recursion depth, epsilon, debug shading).
    """

    def __init__(self, settings: TraceSettings | None = None) -> None:
        """Initialize an empty scene."""
        self.elements: list[Element] = []
        self.lights: list[Light] = []
        self.camera = ViewPlaneCamera()
        self.settings = TraceSettings() if settings is None else settings
        self._tree: BVHTree | None = None

    def clear(self) -> None:
        """Remove all elements and lights and reset the camera."""
        self.elements.clear()
        self.lights.clear()
        self.camera = ViewPlaneCamera()
        self._tree = None

    # =========================================================================
    # Construction
    # =========================================================================

    def add_element(
        self,
        shape: Shape,
        transform: Transform | None = None,
        material: PhongMaterial | None = None,
    ) -> int:
        """Add a shape with its transform and material.

        Args:
            shape: Object-space geometry. Owned by the scene from now on.
            transform: Object-to-world transform (copied). Identity if None.
            material: Surface material. A black material if None.

        Returns:
            Handle of the new element (its index in ``elements``).
        """
        self.elements.append(Element(shape, transform, material))
        self._tree = None
        return len(self.elements) - 1

    def add_mesh(
        self,
        vertices: Sequence[Sequence[float]] | np.ndarray,
        triangles: Sequence[Sequence[int]] | np.ndarray,
        transform: Transform | None = None,
        material: PhongMaterial | None = None,
    ) -> list[int]:
        """Add a triangle mesh as one element per triangle.

        Args:
            vertices: Vertex positions, shape (V, 3).
            triangles: Zero-based vertex indices, shape (T, 3).
            transform: Transform shared by every triangle.
            material: Material shared by every triangle.

        Returns:
            Handles of the added elements, in triangle order.

        Raises:
            ValueError: If the arrays are malformed or an index is out of range.
        """
        verts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        faces = np.asarray(triangles, dtype=np.int64)
        if faces.size == 0:
            return []
        if faces.ndim != 2 or faces.shape[1] != 3:
            raise ValueError(f"Triangles must have shape (T, 3), got {faces.shape}")
        if faces.min() < 0 or faces.max() >= len(verts):
            raise ValueError(f"Triangle index out of range for {len(verts)} vertices")

        handles = [
            self.add_element(Triangle(verts[i], verts[j], verts[k]), transform, material)
            for i, j, k in faces
        ]
        logger.debug("Added mesh with %d triangles", len(handles))
        return handles

    def add_obj(
        self,
        path: str | Path,
        transform: Transform | None = None,
        material: PhongMaterial | None = None,
    ) -> list[int]:
        """Load a Wavefront OBJ file and add it as a mesh."""
        vertices, triangles = load_obj(path)
        logger.info("Loaded %s: %d vertices, %d triangles", path, len(vertices), len(triangles))
        return self.add_mesh(vertices, triangles, transform, material)

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    def set_camera(
        self,
        eye: Sequence[float] | Vec3,
        upper_left: Sequence[float] | Vec3,
        upper_right: Sequence[float] | Vec3,
        lower_left: Sequence[float] | Vec3,
        lower_right: Sequence[float] | Vec3,
    ) -> None:
        """Place the camera eye and the four view-plane corners."""
        self.camera.set(eye, upper_left, upper_right, lower_left, lower_right)

    def rotate_lights(self, degrees: float) -> None:
        """Rotate every light about the world Y axis.

        Directional lights rotate their direction and point lights their
        position. Called by the host between frames.
        """
        for light in self.lights:
            light.rotate(degrees)

    def build(self) -> BVHTree:
        """Build the BVH over the current elements.

        Returns:
            The new tree.
        """
        self._tree = BVHTree(self.elements)
        logger.info(
            "Built BVH: %d elements, depth %d, %d lights",
            len(self.elements),
            self._tree.depth(),
            len(self.lights),
        )
        return self._tree

    # =========================================================================
    # Tracing
    # =========================================================================

    @property
    def is_built(self) -> bool:
        return self._tree is not None

    @property
    def tree(self) -> BVHTree:
        """The BVH over the elements.

        Raises:
            RuntimeError: If ``build()`` has not been called since the last
                element was added.
        """
        if self._tree is None:
            raise RuntimeError("Scene BVH not built. Call build() first.")
        return self._tree

    def trace(self, u: float, v: float) -> Vec3:
        """Color seen through normalized image coordinates (u, v).

        Args:
            u: Horizontal coordinate, 0 at the left edge.
            v: Vertical coordinate, 0 at the top edge.

        Returns:
            Unclamped RGB color.
        """
        return self.trace_ray(self.camera.get_ray(u, v))

    def trace_ray(self, ray: Ray, depth: int | None = None) -> Vec3:
        """Trace an arbitrary ray, by default with the configured depth."""
        if self._tree is None:
            raise RuntimeError("Scene BVH not built. Call build() first.")
        if depth is None:
            depth = self.settings.recursion_depth
        return trace_ray(self, ray, depth)

    # =========================================================================
    # Inspection
    # =========================================================================

    def summary(self) -> str:
        """Short human-readable description of the scene contents."""
        kinds: dict[str, int] = {}
        for element in self.elements:
            name = type(element.shape).__name__.lower()
            kinds[name] = kinds.get(name, 0) + 1
        parts = [f"{count} {name}(s)" for name, count in sorted(kinds.items())]
        return (
            f"Scene: {len(self.elements)} elements ({', '.join(parts) or 'none'}), "
            f"{len(self.lights)} lights"
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene description to a dictionary.

        Returns:
            A dictionary with camera, settings, lights and per-element
            shape type, bounds and material.
        """
        elements = []
        for element in self.elements:
            box = element.bounds()
            elements.append(
                {
                    "shape": type(element.shape).__name__.lower(),
                    "bounds": [box.min.tolist(), box.max.tolist()],
                    "material": element.material.to_dict(),
                }
            )
        return {
            "camera": self.camera.to_dict(),
            "settings": {
                "recursion_depth": self.settings.recursion_depth,
                "shadow_epsilon": self.settings.shadow_epsilon,
                "normal_shading": self.settings.normal_shading,
            },
            "lights": [light.to_dict() for light in self.lights],
            "elements": elements,
        }
