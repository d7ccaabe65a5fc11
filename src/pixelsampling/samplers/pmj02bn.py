"""Progressive multi-jittered (0,2) sampler with blue-noise point sets.

The pixel sample (dimensions 0 and 1) comes from a tile of pixels cut out
of the first PMJ02BN point set: the set is stretched over a square of
pixel_tile_size^2 pixels and each pixel keeps the samples_per_pixel
points that land in it. Because the set is a (0,2)-sequence with blue-noise
spacing, these per-pixel points are well stratified and well spread
across neighbouring pixels.

Further 2D dimensions read the other point sets directly (reusing them
with a permuted index once they run out), 1D dimensions use a permuted
stratum plus a blue-noise offset, and both are decorrelated between
pixels by a blue-noise Cranley-Patterson rotation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pixelsampling.samplers.pmj02bn import PMJ02BNSampler
    >>> sampler = PMJ02BNSampler(16)
    >>> sampler.start_pixel_sample((5, 9), 0)
    >>> u_pixel = sampler.get_2d()
"""

import functools
import warnings

import numpy as np
import numpy.typing as npt

from src.pixelsampling.core.bluenoise import blue_noise
from src.pixelsampling.core.hashing import permutation_element, pixel_dimension_hash
from src.pixelsampling.core.lowdiscrepancy import (
    ONE_MINUS_EPSILON,
    is_power_of_4,
    log4_int,
    round_up_pow4,
)
from src.pixelsampling.core.pmj02tables import (
    PMJ02BN_SAMPLE_COUNT,
    PMJ02BN_SET_COUNT,
    get_pmj02bn_sample,
    pmj02bn_samples,
)
from src.pixelsampling.samplers.base import Sampler, SamplerType


def pixel_tile_size(samples_per_pixel: int) -> int:
    """Return the side, in pixels, of the tile that one point set covers."""
    return 1 << (log4_int(PMJ02BN_SAMPLE_COUNT) - log4_int(round_up_pow4(samples_per_pixel)))


@functools.lru_cache(maxsize=None)
def pixel_tile_samples(samples_per_pixel: int) -> npt.NDArray[np.float64]:
    """Distribute the first point set over a tile of pixels.

    Points are assigned in sequence order to the pixel they fall in, and a
    pixel that already holds samples_per_pixel points is skipped, so each
    pixel receives the earliest points of the set inside it.

    Args:
        samples_per_pixel: Number of samples per pixel.

    Returns:
        Read-only array of shape (tile_size * tile_size, samples_per_pixel, 2)
        holding pixel-local sample positions, indexed by px + py * tile_size.

    Raises:
        RuntimeError: If the point set cannot fill every pixel.
    """
    tile_size = pixel_tile_size(samples_per_pixel)
    n_pixels = tile_size * tile_size
    points = pmj02bn_samples()[0] * tile_size
    cells = np.floor(points).astype(np.int64)

    tile = np.empty((n_pixels, samples_per_pixel, 2), dtype=np.float64)
    stored = np.zeros(n_pixels, dtype=np.int64)
    for point, (cx, cy) in zip(points, cells):
        offset = cx + cy * tile_size
        if stored[offset] == samples_per_pixel:
            continue
        tile[offset, stored[offset]] = point - (cx, cy)
        stored[offset] += 1
    if (stored != samples_per_pixel).any():
        raise RuntimeError(
            f"PMJ02BN point set cannot place {samples_per_pixel} samples in every pixel "
            f"of a {tile_size}x{tile_size} tile"
        )

    np.minimum(tile, ONE_MINUS_EPSILON, out=tile)
    tile.flags.writeable = False
    return tile


class PMJ02BNSampler(Sampler):
    """Sampler based on precomputed pmj02bn point sets.

    Attributes:
        pixel_tile_size: Side of the pixel tile covered by the first set.
    """

    sampler_type = SamplerType.PMJ02BN
    _shared_attributes = ("_pixel_samples",)

    def __init__(self, samples_per_pixel: int, seed: int = 0) -> None:
        """Initialize the PMJ02BN sampler.

        Args:
            samples_per_pixel: Number of samples taken in each pixel. Powers
                of four give the best stratification.
            seed: Seed decorrelating this sampler from others.

        Raises:
            ValueError: If more samples are requested than a point set holds.
        """
        super().__init__(samples_per_pixel, seed)
        if not is_power_of_4(samples_per_pixel):
            warnings.warn(
                f"PMJ02BNSampler results are best with power-of-4 sample counts "
                f"(got {samples_per_pixel}).",
                stacklevel=2,
            )
        if samples_per_pixel > PMJ02BN_SAMPLE_COUNT:
            raise ValueError(
                f"PMJ02BNSampler supports at most {PMJ02BN_SAMPLE_COUNT} samples per pixel "
                f"(got {samples_per_pixel})"
            )
        self.pixel_tile_size = pixel_tile_size(samples_per_pixel)
        self._pixel_samples = pixel_tile_samples(samples_per_pixel)

    def _permuted_index(self, pixel: tuple[int, int]) -> int:
        hash_value = pixel_dimension_hash(pixel, self._dimension, self._seed)
        return permutation_element(self._sample_index, self._samples_per_pixel, hash_value)

    def get_1d(self) -> float:
        pixel = self._require_started()
        index = self._permuted_index(pixel)
        delta = blue_noise(self._dimension, pixel)
        self._dimension += 1
        return min((index + delta) / self._samples_per_pixel, ONE_MINUS_EPSILON)

    def get_2d(self) -> tuple[float, float]:
        pixel = self._require_started()
        if self._dimension == 0:
            px = pixel[0] % self.pixel_tile_size
            py = pixel[1] % self.pixel_tile_size
            self._dimension += 2
            u = self._pixel_samples[px + py * self.pixel_tile_size, self._sample_index % self._samples_per_pixel]
            return float(u[0]), float(u[1])

        index = self._sample_index
        instance = self._dimension // 2
        if instance >= PMJ02BN_SET_COUNT:
            index = self._permuted_index(pixel)

        u0, u1 = get_pmj02bn_sample(instance, index)
        u0 += blue_noise(self._dimension, pixel)
        u1 += blue_noise(self._dimension + 1, pixel)
        if u0 >= 1.0:
            u0 -= 1.0
        if u1 >= 1.0:
            u1 -= 1.0
        self._dimension += 2
        return min(u0, ONE_MINUS_EPSILON), min(u1, ONE_MINUS_EPSILON)
