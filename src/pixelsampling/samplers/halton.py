"""Halton sequence sampler with digit-permutation scrambling.

The image plane is tiled with the first two Halton dimensions: a tile of
baseScales[0] x baseScales[1] pixels (powers of 2 and 3) covers the first
two dimensions of `stride = baseScales[0] * baseScales[1]` consecutive
Halton points exactly once per pixel. A pixel's k-th sample uses the
Halton index `offset(pixel) + k * stride`, where the per-pixel offset is
found by inverting the radical inverses of the pixel coordinates and
combining the two axes with the Chinese remainder theorem.

Dimensions 0 and 1 are reserved for the pixel sample. All other
dimensions use digit-permuted radical inverses in consecutive prime bases
and wrap back to dimension 2 when the prime table is exhausted.

Example:
    >>> from src.pixelsampling.samplers.halton import HaltonSampler
    >>> sampler = HaltonSampler(16, (64, 64))
    >>> sampler.start_pixel_sample((0, 0), 0)
    >>> sampler.get_2d()
    (0.0, 0.0)
"""

from src.pixelsampling.core.lowdiscrepancy import (
    PRIME_TABLE_SIZE,
    compute_radical_inverse_permutations,
    inverse_radical_inverse,
    radical_inverse,
    scrambled_radical_inverse,
)
from src.pixelsampling.samplers.base import Sampler, SamplerType

# Pixel tiles never exceed this many pixels along an axis
MAX_HALTON_RESOLUTION = 128


def extended_gcd(a: int, b: int) -> tuple[int, int]:
    """Return Bezout coefficients (x, y) with a*x + b*y == gcd(a, b)."""
    old_x, x = 1, 0
    old_y, y = 0, 1
    while b:
        q = a // b
        a, b = b, a - q * b
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y
    return old_x, old_y


def multiplicative_inverse(a: int, n: int) -> int:
    """Return the inverse of a modulo n (a and n must be coprime)."""
    x, _ = extended_gcd(a, n)
    return x % n


class HaltonSampler(Sampler):
    """Scrambled Halton sampler with per-pixel index offsets.

    Attributes:
        base_scales: Tile size in pixels along x (a power of 2) and y
            (a power of 3).
        base_exponents: Base-2 and base-3 logarithms of base_scales.
        mult_inverse: Modular inverses used to combine the axis offsets.
    """

    sampler_type = SamplerType.HALTON
    _shared_attributes = ("_digit_permutations",)

    def __init__(self, samples_per_pixel: int, full_resolution: tuple[int, int], seed: int = 0) -> None:
        """Initialize the Halton sampler.

        Args:
            samples_per_pixel: Number of samples taken in each pixel.
            full_resolution: Image resolution (width, height) in pixels.
            seed: Seed of the digit permutations.
        """
        super().__init__(samples_per_pixel, seed)
        self._digit_permutations = compute_radical_inverse_permutations(seed)

        scales = []
        exponents = []
        for base, resolution in zip((2, 3), full_resolution):
            scale, exponent = 1, 0
            while scale < min(resolution, MAX_HALTON_RESOLUTION):
                scale *= base
                exponent += 1
            scales.append(scale)
            exponents.append(exponent)
        self.base_scales = (scales[0], scales[1])
        self.base_exponents = (exponents[0], exponents[1])
        self.mult_inverse = (
            multiplicative_inverse(scales[1], scales[0]),
            multiplicative_inverse(scales[0], scales[1]),
        )
        self._halton_index = 0

    @property
    def halton_index(self) -> int:
        """Get the global Halton index of the current sample."""
        return self._halton_index

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        super().start_pixel_sample(pixel, sample_index, dimension)
        stride = self.base_scales[0] * self.base_scales[1]
        index = 0
        if stride > 1:
            for i, base in enumerate((2, 3)):
                pm = pixel[i] % MAX_HALTON_RESOLUTION
                offset = inverse_radical_inverse(pm, base, self.base_exponents[i])
                index += offset * (stride // self.base_scales[i]) * self.mult_inverse[i]
            index %= stride
        self._halton_index = index + sample_index * stride

    def get_1d(self) -> float:
        self._require_started()
        if self._dimension >= PRIME_TABLE_SIZE:
            self._dimension = 2
        dim = self._dimension
        self._dimension += 1
        return self._sample_dimension(dim)

    def get_2d(self) -> tuple[float, float]:
        self._require_started()
        if self._dimension == 0:
            # Pixel sample: the digits beyond the tile select the position in the pixel
            self._dimension += 2
            return (
                radical_inverse(0, self._halton_index >> self.base_exponents[0]),
                radical_inverse(1, self._halton_index // self.base_scales[1]),
            )

        if self._dimension + 1 >= PRIME_TABLE_SIZE:
            self._dimension = 2
        dim = self._dimension
        self._dimension += 2
        return self._sample_dimension(dim), self._sample_dimension(dim + 1)

    def _sample_dimension(self, dim: int) -> float:
        return scrambled_radical_inverse(dim, self._halton_index, self._digit_permutations[dim])
