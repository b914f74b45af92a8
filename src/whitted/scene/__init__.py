"""Scene management module.

Components:
    light: Ambient, directional and point lights
    element: Shape + transform + material
    manager: Scene container, BVH build and tracing entry point
"""

from .element import Element
from .light import AmbientLight, DirectionalLight, Falloff, Light, PointLight
from .manager import Scene

__all__ = [
    "Element",
    "AmbientLight",
    "DirectionalLight",
    "PointLight",
    "Falloff",
    "Light",
    "Scene",
]
