"""Independent uniform random sampler.

Every value is a fresh draw from a PCG64 stream selected by the pixel and
seed, skipped ahead by the sample index and starting dimension. There is
no stratification at all, which makes this sampler the baseline that the
others are measured against.
"""

import numpy as np

from src.pixelsampling.core.hashing import MASK64
from src.pixelsampling.core.rng import pixel_stream
from src.pixelsampling.samplers.base import Sampler, SamplerType

# Draws reserved for each sample index within a pixel's stream
SAMPLE_STREAM_STRIDE = 65536


def pixel_sequence_index(pixel: tuple[int, int], seed: int) -> int:
    """Return the stream selector for a pixel: (x + y * 65536) | (seed << 32)."""
    return ((pixel[0] + pixel[1] * 65536) | ((seed & MASK64) << 32)) & MASK64


class RandomSampler(Sampler):
    """Uniform random sampler."""

    sampler_type = SamplerType.RANDOM

    def __init__(self, samples_per_pixel: int, seed: int = 0) -> None:
        super().__init__(samples_per_pixel, seed)
        self._rng: np.random.Generator | None = None

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        super().start_pixel_sample(pixel, sample_index, dimension)
        self._rng = pixel_stream(
            pixel_sequence_index(pixel, self._seed),
            sample_index * SAMPLE_STREAM_STRIDE + dimension,
        )

    def get_1d(self) -> float:
        self._require_started()
        self._dimension += 1
        return float(self._rng.random())

    def get_2d(self) -> tuple[float, float]:
        self._require_started()
        self._dimension += 2
        return float(self._rng.random()), float(self._rng.random())
