"""Output utilities for rendered images.

Components:
    export: Clamp-and-quantize PNG export via Pillow
"""

from .export import image_to_uint8, load_png, save_png

__all__ = [
    "image_to_uint8",
    "save_png",
    "load_png",
]
