"""Image export utilities for rendered images.

This module converts the tracer's unclamped linear colors into 8-bit images
and writes them to disk. Colors are clamped to [0, 1]; no tone mapping or
gamma correction is applied.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from whitted.preview.export import save_png
    >>> renderer.render()
    >>> save_png(renderer.get_image_numpy(), "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float RGB image to uint8.

    Args:
        image: Image array of shape (H, W, 3) with nominal range [0, 1].

    Returns:
        8-bit image array of shape (H, W, 3). Values are clamped, scaled by
        255 and rounded. NaN becomes 0.

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    image = np.asarray(image, dtype=np.float64)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image of shape (H, W, 3), got {image.shape}")
    clamped = np.clip(np.nan_to_num(image, nan=0.0), 0.0, 1.0)
    return np.round(clamped * 255.0).astype(np.uint8)


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a float RGB image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3); row 0 is the top of the image.
        filepath: Output file path (should end in .png).

    Returns:
        The path written.
    """
    path = Path(filepath)
    image_uint8 = image_to_uint8(image)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(path, format="PNG")
    return path


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Read a PNG back as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"))
