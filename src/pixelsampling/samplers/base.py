"""Common sampler interface.

Every sampler produces the uniform sample values that a renderer consumes
for one sample path. The calling protocol is:

1. start_pixel_sample(pixel, sample_index) selects the path and resets the
   dimension cursor.
2. A fixed sequence of get_1d() / get_2d() calls reads consecutive
   dimensions (one or two at a time).

The values returned depend only on the pixel, the sample index, the
dimension at the time of the call, the seed and the call order, so a path
can be regenerated exactly by repeating the same calls.

Samplers hold per-path mutable state and must not be shared between
workers. clone() makes independent copies for parallel use; copies share
only the immutable precomputed tables.

Example:
    >>> from src.pixelsampling.samplers.random_sampler import RandomSampler
    >>> sampler = RandomSampler(samples_per_pixel=4, seed=7)
    >>> sampler.start_pixel_sample((3, 2), 1)
    >>> u = sampler.get_1d()
    >>> u0, u1 = sampler.get_2d()
"""

import copy
from enum import IntEnum


class SamplerType(IntEnum):
    """The closed set of sampler variants."""

    HALTON = 0
    PADDED_SOBOL = 1
    SOBOL = 2
    PMJ02BN = 3
    RANDOM = 4
    STRATIFIED = 5
    MLT = 6
    DEBUG_MLT = 7


class RandomizeStrategy(IntEnum):
    """Randomization applied to raw Sobol' sample values."""

    NONE = 0
    CRANLEY_PATTERSON = 1
    XOR = 2
    OWEN = 3

    @classmethod
    def from_name(cls, name: str) -> "RandomizeStrategy":
        """Parse a strategy name as used in sampler parameters.

        Args:
            name: One of "none", "cranleypatterson", "xor" or "owen".

        Returns:
            The matching strategy.

        Raises:
            ValueError: If the name is not recognised.
        """
        strategy = _STRATEGY_NAMES.get(name)
        if strategy is None:
            raise ValueError(
                f"{name}: unknown randomization strategy "
                f"(expected one of {', '.join(_STRATEGY_NAMES)})"
            )
        return strategy

    @property
    def label(self) -> str:
        """The parameter name of this strategy."""
        return next(name for name, strategy in _STRATEGY_NAMES.items() if strategy is self)


_STRATEGY_NAMES = {
    "none": RandomizeStrategy.NONE,
    "cranleypatterson": RandomizeStrategy.CRANLEY_PATTERSON,
    "xor": RandomizeStrategy.XOR,
    "owen": RandomizeStrategy.OWEN,
}


class Sampler:
    """Base class for all samplers.

    Subclasses implement start_pixel_sample(), get_1d() and get_2d() and
    set `sampler_type`. Attributes holding immutable shared tables are
    listed in `_shared_attributes`; clone() copies everything else.

    Attributes:
        sampler_type: The variant of this sampler.
    """

    sampler_type: SamplerType
    _shared_attributes: tuple[str, ...] = ()

    def __init__(self, samples_per_pixel: int, seed: int = 0) -> None:
        """Initialize the shared sampler state.

        Args:
            samples_per_pixel: Number of samples taken in each pixel.
            seed: Seed decorrelating this sampler from others.

        Raises:
            ValueError: If samples_per_pixel is not positive.
        """
        if samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
        self._samples_per_pixel = samples_per_pixel
        self._seed = seed
        self._pixel: tuple[int, int] | None = None
        self._sample_index = 0
        self._dimension = 0

    @property
    def samples_per_pixel(self) -> int:
        """Get the number of samples per pixel."""
        return self._samples_per_pixel

    @property
    def seed(self) -> int:
        """Get the sampler seed."""
        return self._seed

    @property
    def dimension(self) -> int:
        """Get the dimension that the next get_1d() / get_2d() call reads."""
        return self._dimension

    def start_pixel_sample(self, pixel: tuple[int, int], sample_index: int, dimension: int = 0) -> None:
        """Start generating the sample values of one sample path.

        Args:
            pixel: Pixel coordinates (x, y).
            sample_index: Index of the sample within the pixel.
            dimension: Dimension that the first get call reads.
        """
        self._pixel = (pixel[0], pixel[1])
        self._sample_index = sample_index
        self._dimension = dimension

    def get_1d(self) -> float:
        """Return the next sample value in [0, 1) and advance one dimension."""
        raise NotImplementedError

    def get_2d(self) -> tuple[float, float]:
        """Return the next two sample values in [0, 1) and advance two dimensions."""
        raise NotImplementedError

    def clone(self, n: int = 1) -> list["Sampler"]:
        """Create independent copies of this sampler for parallel use.

        Args:
            n: Number of copies.

        Returns:
            A list of n samplers in the same state as this one. Mutable state
            is copied; precomputed tables are shared.
        """
        shared = [getattr(self, name) for name in self._shared_attributes]
        # A fresh memo per copy; pre-seeding it makes deepcopy reuse the tables
        return [copy.deepcopy(self, {id(table): table for table in shared}) for _ in range(n)]

    def _require_started(self) -> tuple[int, int]:
        """Return the current pixel.

        Raises:
            RuntimeError: If start_pixel_sample() has not been called.
        """
        if self._pixel is None:
            raise RuntimeError(
                f"{type(self).__name__}: start_pixel_sample() must be called before reading samples"
            )
        return self._pixel

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(samples_per_pixel={self._samples_per_pixel}, "
            f"seed={self._seed}, pixel={self._pixel}, sample_index={self._sample_index}, "
            f"dimension={self._dimension})"
        )
