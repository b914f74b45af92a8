"""Stratified jittered sampling of image coordinates.

Each pixel is split into an n x n grid of sub-pixels. One sample is drawn
per sub-pixel at its center, displaced by a uniform random offset of up to
half a sub-pixel in each direction.

For pixel column c, row r, sub-pixel column sc and sub-pixel row sr of a
w x h image:

    u = c / w + (sc + 0.5) / (w * n) + ju,   ju in [-0.5, 0.5) / (w * n)
    v = r / h + (sr + 0.5) / (h * n) + jv,   jv in [-0.5, 0.5) / (h * n)

Example:
    >>> from whitted.camera.sampler import JitterSampler
    >>> sampler = JitterSampler(640, 480, samples_per_axis=2, seed=7)
    >>> uv = sampler.pixel_samples(10, 20)  # (4, 2) array of (u, v)
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
import numpy.typing as npt


class JitterSampler:
    """Generates jittered sub-pixel sample positions.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_axis: Sub-pixels per pixel along each axis.
        jitter: When False, samples sit exactly at sub-pixel centers.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_axis: int = 1,
        *,
        jitter: bool = True,
        seed: int | None = None,
    ) -> None:
        """Initialize the sampler.

        Raises:
            ValueError: If any dimension or the sample count is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if samples_per_axis <= 0:
            raise ValueError(f"samples_per_axis must be positive, got {samples_per_axis}")
        self.width = width
        self.height = height
        self.samples_per_axis = samples_per_axis
        self.jitter = jitter
        self._rng = np.random.default_rng(seed)

        n = samples_per_axis
        sub = (np.arange(n) + 0.5) / n
        # Sub-pixel offsets in row-major order (sr, sc)
        sr, sc = np.meshgrid(sub, sub, indexing="ij")
        self._offsets = np.stack([sc.ravel(), sr.ravel()], axis=1)

    @property
    def samples_per_pixel(self) -> int:
        return self.samples_per_axis * self.samples_per_axis

    def pixel_samples(self, column: int, row: int) -> npt.NDArray[np.float64]:
        """Return the (u, v) samples for one pixel.

        Args:
            column: Pixel column, 0 at the left.
            row: Pixel row, 0 at the top.

        Returns:
            Array of shape (samples_per_pixel, 2).
        """
        uv = (np.array([column, row], dtype=np.float64) + self._offsets) / (
            self.width,
            self.height,
        )
        if self.jitter:
            sub_size = np.array(
                [1.0 / (self.width * self.samples_per_axis), 1.0 / (self.height * self.samples_per_axis)]
            )
            uv += (self._rng.random(uv.shape) - 0.5) * sub_size
        return uv

    def __iter__(self) -> Iterator[tuple[int, int, float, float]]:
        """Iterate over every sample as (column, row, u, v), row by row."""
        for row in range(self.height):
            for column in range(self.width):
                for u, v in self.pixel_samples(column, row):
                    yield column, row, float(u), float(v)
