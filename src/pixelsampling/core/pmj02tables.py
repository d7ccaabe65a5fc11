"""Progressive multi-jittered (0,2) point sets with blue-noise properties.

Each set is a progressive (0,2)-sequence in base 2: every prefix of 2^k
points has exactly one point in each elementary interval of area 2^-k.
The sets are produced by progressively Owen-scrambling the first two
Sobol' dimensions. When a point is added, the scrambling flips already
fixed by earlier points are reused (which keeps the net structure), and
the remaining free flips are chosen best-candidate style: several random
choices are drawn and the one farthest (toroidally) from the existing
points is kept, which pushes the sets toward blue noise.

Sets are built on first use and cached as a read-only numpy array.

Example:
    >>> from src.pixelsampling.core.pmj02tables import get_pmj02bn_sample
    >>> u, v = get_pmj02bn_sample(0, 5)
"""

import functools

import numpy as np
import numpy.typing as npt

from src.pixelsampling.core.lowdiscrepancy import ONE_MINUS_EPSILON, sobol_bits

# Number of independent point sets
PMJ02BN_SET_COUNT = 5

# Points per set (a power of four)
PMJ02BN_SAMPLE_COUNT = 4096

# Scrambled bits per coordinate (log2 of PMJ02BN_SAMPLE_COUNT)
_LEVELS = 12

# Random low bits appended below the scrambled bits
_TAIL_BITS = 20

# Best-candidate trials per point
_CANDIDATES = 8

_PMJ02BN_SEED = 0x504D4A


def _toroidal_min_distance_sq(candidates: npt.NDArray, points: npt.NDArray) -> npt.NDArray:
    """Squared toroidal distance from each candidate to its nearest point."""
    delta = np.abs(candidates[:, np.newaxis, :] - points[np.newaxis, :, :])
    delta = np.minimum(delta, 1.0 - delta)
    return (delta * delta).sum(axis=-1).min(axis=1)


def _build_set(rng: np.random.Generator) -> npt.NDArray[np.float64]:
    """Build one PMJ02BN point set of PMJ02BN_SAMPLE_COUNT points."""
    shift = 32 - _LEVELS
    scale = 1.0 / (1 << 32)
    points = np.empty((PMJ02BN_SAMPLE_COUNT, 2), dtype=np.float64)
    # One dict of fixed flips per axis, keyed by (level, original prefix)
    flips: tuple[dict[tuple[int, int], int], dict[tuple[int, int], int]] = ({}, {})

    for i in range(PMJ02BN_SAMPLE_COUNT):
        candidates = np.empty((_CANDIDATES, 2), dtype=np.float64)
        free_choices = []
        for axis in range(2):
            original = sobol_bits(i, axis) >> shift
            fixed = original
            free_levels = []
            for level in range(_LEVELS):
                key = (level, original >> (_LEVELS - level))
                flip = flips[axis].get(key)
                if flip is None:
                    free_levels.append(level)
                elif flip:
                    fixed ^= 1 << (_LEVELS - 1 - level)

            weights = np.array([1 << (_LEVELS - 1 - level) for level in free_levels], dtype=np.int64)
            bits = rng.integers(0, 2, size=(_CANDIDATES, len(free_levels)), dtype=np.int64)
            scrambled = fixed ^ (bits @ weights) if free_levels else np.full(_CANDIDATES, fixed)
            tails = rng.integers(0, 1 << _TAIL_BITS, size=_CANDIDATES, dtype=np.int64)
            candidates[:, axis] = ((scrambled << _TAIL_BITS) | tails) * scale
            free_choices.append((original, free_levels, bits))

        best = 0
        if i > 0:
            best = int(np.argmax(_toroidal_min_distance_sq(candidates, points[:i])))
        points[i] = candidates[best]

        for axis, (original, free_levels, bits) in enumerate(free_choices):
            for j, level in enumerate(free_levels):
                flips[axis][(level, original >> (_LEVELS - level))] = int(bits[best, j])

    return points


@functools.lru_cache(maxsize=None)
def pmj02bn_samples() -> npt.NDArray[np.float64]:
    """Build (once) and return every PMJ02BN point set.

    Returns:
        Read-only array of shape (PMJ02BN_SET_COUNT, PMJ02BN_SAMPLE_COUNT, 2)
        with coordinates in [0, 1).
    """
    rng = np.random.default_rng(_PMJ02BN_SEED)
    sets = np.stack([_build_set(rng) for _ in range(PMJ02BN_SET_COUNT)])
    np.minimum(sets, ONE_MINUS_EPSILON, out=sets)
    sets.flags.writeable = False
    return sets


def get_pmj02bn_sample(set_index: int, sample_index: int) -> tuple[float, float]:
    """Return a point of a PMJ02BN set.

    Both indices wrap around the table dimensions.

    Args:
        set_index: Which point set to read.
        sample_index: Index of the point within the set.

    Returns:
        The point (u, v) in [0, 1)^2.
    """
    samples = pmj02bn_samples()
    point = samples[set_index % PMJ02BN_SET_COUNT, sample_index % PMJ02BN_SAMPLE_COUNT]
    return float(point[0]), float(point[1])
