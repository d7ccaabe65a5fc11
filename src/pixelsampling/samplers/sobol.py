"""Sobol' samplers.

Two ways of distributing the Sobol' sequence over the image:

- PaddedSobolSampler uses the first samples_per_pixel points of the
  (0, 2)-sequence formed by the first two Sobol' dimensions in every pixel
  and every pair of dimensions. Correlation between pixels and between
  dimensions is removed by permuting the sample index per (pixel,
  dimension) and by randomizing each value.
- SobolSampler walks a single Sobol' sequence over the whole image: each
  pixel uses the points of the global sequence whose first two dimensions
  fall inside it, so consecutive dimensions stay well distributed over the
  image as a whole.

Both accept a RandomizeStrategy selecting how raw sample bits are
randomized (none, Cranley-Patterson rotation, XOR or Owen scrambling).

Example:
    >>> from src.pixelsampling.samplers.base import RandomizeStrategy
    >>> from src.pixelsampling.samplers.sobol import SobolSampler
    >>> sampler = SobolSampler(16, (640, 480), RandomizeStrategy.OWEN)
    >>> sampler.start_pixel_sample((100, 200), 3)
    >>> u_pixel = sampler.get_2d()  # position inside pixel (100, 200)
"""

import warnings

from src.pixelsampling.core.bluenoise import blue_noise
from src.pixelsampling.core.hashing import MASK32, mix_bits, permutation_element, pixel_dimension_hash
from src.pixelsampling.core.lowdiscrepancy import (
    ONE_MINUS_EPSILON,
    CranleyPattersonRotator,
    NoRandomizer,
    OwenScrambler,
    XORScrambler,
    is_power_of_2,
    round_up_pow2,
    sobol_interval_to_index,
    sobol_sample,
)
from src.pixelsampling.core.sobol_tables import N_SOBOL_DIMENSIONS
from src.pixelsampling.samplers.base import RandomizeStrategy, Sampler, SamplerType

# Tolerance of the pixel remap in SobolSampler before it is treated as a bug
PIXEL_REMAP_TOLERANCE = 1e-7


def _scrambled_sample(strategy: RandomizeStrategy, a: int, dimension: int, scramble_seed: int) -> float:
    """Evaluate a Sobol' sample with a bit-scrambling strategy."""
    if strategy == RandomizeStrategy.NONE:
        return sobol_sample(a, dimension, NoRandomizer())
    if strategy == RandomizeStrategy.XOR:
        return sobol_sample(a, dimension, XORScrambler(scramble_seed))
    if strategy == RandomizeStrategy.OWEN:
        return sobol_sample(a, dimension, OwenScrambler(scramble_seed))
    raise RuntimeError(f"Unhandled randomization strategy: {strategy!r}")


class PaddedSobolSampler(Sampler):
    """Per-pixel padded Sobol' sampler.

    Attributes:
        randomize: The randomization strategy.
    """

    sampler_type = SamplerType.PADDED_SOBOL

    def __init__(
        self,
        samples_per_pixel: int,
        randomize: RandomizeStrategy = RandomizeStrategy.OWEN,
        seed: int = 0,
    ) -> None:
        """Initialize the padded Sobol' sampler.

        Args:
            samples_per_pixel: Number of samples taken in each pixel. Powers
                of two give the best stratification.
            randomize: How raw Sobol' values are randomized.
            seed: Seed decorrelating this sampler from others.
        """
        super().__init__(samples_per_pixel, seed)
        if not is_power_of_2(samples_per_pixel):
            warnings.warn(
                f"Sobol samplers with non power-of-two sample counts ({samples_per_pixel}) "
                "are sub-optimal.",
                stacklevel=2,
            )
        self.randomize = randomize

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, randomize={self.randomize.label})"

    def _permuted_index(self, pixel: tuple[int, int]) -> tuple[int, int]:
        hash_value = pixel_dimension_hash(pixel, self._dimension, self._seed)
        index = permutation_element(self._sample_index, self._samples_per_pixel, hash_value)
        return index, hash_value

    def get_1d(self) -> float:
        pixel = self._require_started()
        index, hash_value = self._permuted_index(pixel)
        dim = self._dimension
        self._dimension += 1
        if self.randomize == RandomizeStrategy.CRANLEY_PATTERSON:
            return sobol_sample(index, 0, CranleyPattersonRotator.from_float(blue_noise(dim, pixel)))
        return _scrambled_sample(self.randomize, index, 0, hash_value >> 32)

    def get_2d(self) -> tuple[float, float]:
        pixel = self._require_started()
        index, hash_value = self._permuted_index(pixel)
        dim = self._dimension
        self._dimension += 2
        if self.randomize == RandomizeStrategy.CRANLEY_PATTERSON:
            return (
                sobol_sample(index, 0, CranleyPattersonRotator.from_float(blue_noise(dim, pixel))),
                sobol_sample(index, 1, CranleyPattersonRotator.from_float(blue_noise(dim + 1, pixel))),
            )
        return (
            _scrambled_sample(self.randomize, index, 0, (hash_value >> 8) & MASK32),
            _scrambled_sample(self.randomize, index, 1, hash_value >> 32),
        )


class SobolSampler(Sampler):
    """Image-wide Sobol' sampler.

    Attributes:
        randomize: The randomization strategy (dimensions 0 and 1 are never
            randomized).
        scale: Side of the square power-of-two grid that the first two
            dimensions are stretched over.
    """

    sampler_type = SamplerType.SOBOL

    def __init__(
        self,
        samples_per_pixel: int,
        full_resolution: tuple[int, int],
        randomize: RandomizeStrategy = RandomizeStrategy.OWEN,
        seed: int = 0,
    ) -> None:
        """Initialize the Sobol' sampler.

        Args:
            samples_per_pixel: Number of samples taken in each pixel. Powers
                of two give the best stratification.
            full_resolution: Image resolution (width, height) in pixels.
            randomize: How raw Sobol' values are randomized.
            seed: Seed decorrelating this sampler from others.
        """
        super().__init__(samples_per_pixel, seed)
        if not is_power_of_2(samples_per_pixel):
            warnings.warn(
                f"Non power-of-two sample count {samples_per_pixel} will perform "
                "sub-optimally with the SobolSampler.",
                stacklevel=2,
            )
        self.randomize = randomize
        self.scale = round_up_pow2(max(full_resolution[0], full_resolution[1]))
        self._log2_scale = self.scale.bit_length() - 1
        self._sobol_index = 0

    @property
    def sobol_index(self) -> int:
        """Get the global Sobol' index of the current sample."""
        return self._sobol_index

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        """Start a sample path and locate its point of the global sequence.

        Raises:
            ValueError: If the pixel lies outside the sampled image extent.
        """
        if not (0 <= pixel[0] < self.scale and 0 <= pixel[1] < self.scale):
            raise ValueError(f"Pixel {tuple(pixel)} outside the {self.scale}x{self.scale} Sobol' grid")
        super().start_pixel_sample(pixel, sample_index, dimension)
        self._sobol_index = sobol_interval_to_index(self._log2_scale, sample_index, self._pixel)

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, randomize={self.randomize.label})"

    def get_1d(self) -> float:
        self._require_started()
        if self._dimension >= N_SOBOL_DIMENSIONS:
            self._dimension = 2
        dim = self._dimension
        self._dimension += 1
        return self._sample_dimension(dim)

    def get_2d(self) -> tuple[float, float]:
        pixel = self._require_started()
        if self._dimension + 1 >= N_SOBOL_DIMENSIONS:
            self._dimension = 2
        dim = self._dimension
        self._dimension += 2
        u = [self._sample_dimension(dim), self._sample_dimension(dim + 1)]
        if dim == 0:
            # Map the image-wide value into the pixel
            for axis in range(2):
                local = u[axis] * self.scale - pixel[axis]
                if local < -PIXEL_REMAP_TOLERANCE or local > 1.0 + PIXEL_REMAP_TOLERANCE:
                    raise RuntimeError(
                        f"Sobol' sample {u[axis]} of index {self._sobol_index} is outside "
                        f"pixel {pixel} on axis {axis}"
                    )
                u[axis] = min(max(local, 0.0), ONE_MINUS_EPSILON)
        return u[0], u[1]

    def _sample_dimension(self, dimension: int) -> float:
        if dimension < 2 or self.randomize == RandomizeStrategy.NONE:
            return sobol_sample(self._sobol_index, dimension, NoRandomizer())

        scramble_seed = mix_bits((dimension << 32) ^ self._seed) & MASK32
        if self.randomize == RandomizeStrategy.CRANLEY_PATTERSON:
            return sobol_sample(self._sobol_index, dimension, CranleyPattersonRotator(scramble_seed))
        return _scrambled_sample(self.randomize, self._sobol_index, dimension, scramble_seed)
