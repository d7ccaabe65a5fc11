"""Jittered stratified sampler.

Each pixel's samples_per_pixel = x_pixel_samples * y_pixel_samples samples
are spread over as many strata. For every dimension the sample index is
mapped to a stratum by a permutation seeded by (pixel, dimension, seed),
so each stratum is used exactly once per pixel while the order in which
strata are visited differs between pixels and dimensions. Within the
stratum the sample is either jittered uniformly or placed at its center.

Example:
    >>> from src.pixelsampling.samplers.stratified import StratifiedSampler
    >>> sampler = StratifiedSampler(4, 4, jitter=False)
    >>> sampler.start_pixel_sample((0, 0), 5)
    >>> u, v = sampler.get_2d()  # the center of one of the 16 strata
"""

import numpy as np

from src.pixelsampling.core.hashing import permutation_element, pixel_dimension_hash
from src.pixelsampling.core.lowdiscrepancy import ONE_MINUS_EPSILON
from src.pixelsampling.core.rng import pixel_stream
from src.pixelsampling.samplers.base import Sampler, SamplerType
from src.pixelsampling.samplers.random_sampler import SAMPLE_STREAM_STRIDE, pixel_sequence_index


class StratifiedSampler(Sampler):
    """Stratified sampler over an x_pixel_samples x y_pixel_samples grid.

    Attributes:
        x_pixel_samples: Number of strata along x.
        y_pixel_samples: Number of strata along y.
        jitter: Whether samples are jittered inside their stratum.
    """

    sampler_type = SamplerType.STRATIFIED

    def __init__(self, x_pixel_samples: int, y_pixel_samples: int, jitter: bool = True, seed: int = 0) -> None:
        """Initialize the stratified sampler.

        Args:
            x_pixel_samples: Number of strata along x.
            y_pixel_samples: Number of strata along y.
            jitter: Jitter samples inside their stratum; otherwise use the
                stratum center.
            seed: Seed decorrelating this sampler from others.

        Raises:
            ValueError: If either stratum count is not positive.
        """
        if x_pixel_samples <= 0 or y_pixel_samples <= 0:
            raise ValueError(
                f"Stratum counts must be positive, got {x_pixel_samples}x{y_pixel_samples}"
            )
        super().__init__(x_pixel_samples * y_pixel_samples, seed)
        self.x_pixel_samples = x_pixel_samples
        self.y_pixel_samples = y_pixel_samples
        self.jitter = jitter
        self._rng: np.random.Generator | None = None

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        super().start_pixel_sample(pixel, sample_index, dimension)
        self._rng = pixel_stream(
            pixel_sequence_index(pixel, self._seed),
            sample_index * SAMPLE_STREAM_STRIDE + dimension,
        )

    def _stratum(self, pixel: tuple[int, int]) -> int:
        hash_value = pixel_dimension_hash(pixel, self._dimension, self._seed)
        return permutation_element(self._sample_index, self._samples_per_pixel, hash_value)

    def _delta(self) -> float:
        return float(self._rng.random()) if self.jitter else 0.5

    def get_1d(self) -> float:
        pixel = self._require_started()
        stratum = self._stratum(pixel)
        self._dimension += 1
        return min((stratum + self._delta()) / self._samples_per_pixel, ONE_MINUS_EPSILON)

    def get_2d(self) -> tuple[float, float]:
        pixel = self._require_started()
        stratum = self._stratum(pixel)
        self._dimension += 2
        x = stratum % self.x_pixel_samples
        y = stratum // self.x_pixel_samples
        dx = self._delta()
        dy = self._delta()
        return (
            min((x + dx) / self.x_pixel_samples, ONE_MINUS_EPSILON),
            min((y + dy) / self.y_pixel_samples, ONE_MINUS_EPSILON),
        )
