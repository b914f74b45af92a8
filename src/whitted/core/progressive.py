"""Whole-image rendering by accumulating jittered samples.

This module drives the tracer over a whole image. It supports:
- Image refinement across repeated calls
- Several passes per call, each adding one stratified jittered set of
  samples to every pixel
- Progress callbacks for CLI or UI updates
- Resetting the buffer to start over at the same size

The ProgressiveRenderer class owns the accumulation buffer and provides a
single entry point for the CLI and for scripted renders.

Example:
    >>> from whitted.core.progressive import ProgressiveRenderer
    >>> from whitted.io.scene_file import load_scene
    >>>
    >>> scene = load_scene(["examples/scenes/spheres.txt"])
    >>> tree = scene.build()
    >>>
    >>> renderer = ProgressiveRenderer(scene, 256, 256, samples_per_axis=2)
    >>> renderer.render()  # One pass: 4 samples per pixel
    >>> image = renderer.get_image_numpy()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from whitted.camera.sampler import JitterSampler

if TYPE_CHECKING:
    from whitted.scene.manager import Scene

logger = logging.getLogger(__name__)

# Maximum supported image dimension
MAX_DIMENSION = 8192

# Type alias for progress callback
# Callback receives (completed_rows, total_rows) for the current call
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates traced samples into an averaged image.

    Each pass traces ``samples_per_axis ** 2`` jittered samples per pixel and
    adds them to a float64 color buffer. The displayed image is the running
    average.

    Attributes:
        scene: The built scene being rendered.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(
        self,
        scene: Scene,
        width: int,
        height: int,
        samples_per_axis: int = 1,
        *,
        jitter: bool = True,
        seed: int | None = None,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            scene: Scene to render. Must be built before ``render``.
            width: Image width in pixels.
            height: Image height in pixels.
            samples_per_axis: Sub-pixel grid size; each pass takes the square
                of this many samples per pixel.
            jitter: Randomly displace samples within their sub-pixel.
            seed: Seed for the jitter random generator.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise ValueError(
                f"Dimensions {width}x{height} exceed maximum {MAX_DIMENSION}x{MAX_DIMENSION}"
            )
        self.scene = scene
        self._sampler = JitterSampler(width, height, samples_per_axis, jitter=jitter, seed=seed)
        self._accum = np.zeros((height, width, 3), dtype=np.float64)
        self._samples = 0

    @property
    def width(self) -> int:
        return self._sampler.width

    @property
    def height(self) -> int:
        return self._sampler.height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return self._samples

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        self._accum.fill(0.0)
        self._samples = 0

    def _render_row(self, row: int) -> None:
        for column in range(self.width):
            for u, v in self._sampler.pixel_samples(column, row):
                self._accum[row, column] += self.scene.trace(float(u), float(v))

    def render_progressive(self, num_passes: int = 1) -> Generator[tuple[int, int], None, None]:
        """Render passes row by row, yielding progress after each row.

        Args:
            num_passes: Number of full-image passes to add.

        Yields:
            Tuple of (completed_rows, total_rows) counted over all passes.
        """
        if num_passes <= 0:
            return

        total_rows = num_passes * self.height
        done = 0
        for _ in range(num_passes):
            for row in range(self.height):
                self._render_row(row)
                done += 1
                yield done, total_rows
            self._samples += self._sampler.samples_per_pixel

    def render(self, num_passes: int = 1, callback: ProgressCallback | None = None) -> None:
        """Render passes with an optional progress callback.

        Can be called multiple times to continue refining the image.

        Args:
            num_passes: Number of full-image passes to add.
            callback: Called after every row with (completed_rows, total_rows).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} rows")
            >>> renderer.render(2, callback=progress)
        """
        start = time.perf_counter()
        for done, total in self.render_progressive(num_passes):
            if callback is not None:
                callback(done, total)
        logger.info(
            "Rendered %dx%d, %d samples/pixel in %.2fs",
            self.width,
            self.height,
            self._samples,
            time.perf_counter() - start,
        )

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged image as a NumPy array.

        Values are unclamped. Row 0 is the top of the image.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float64. All
            zeros before anything has been rendered.
        """
        if self._samples == 0:
            return np.zeros_like(self._accum)
        return self._accum / self._samples

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
