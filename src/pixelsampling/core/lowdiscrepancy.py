"""Low-discrepancy sequence primitives.

This module implements the building blocks used by the quasi-Monte Carlo
samplers:

- A prime table for the Halton sequence bases.
- Radical inverses, their inverse, and digit-permuted (scrambled) radical
  inverses with per-base DigitPermutation tables.
- Sobol' sample evaluation with pluggable randomizers (none,
  Cranley-Patterson rotation, XOR scrambling, hash-based Owen scrambling).
- The mapping from a (pixel, sample) pair to the index of the global Sobol'
  sequence whose first two dimensions fall inside that pixel.

Sample values are Python floats in [0, 1); every integer operation is
emulated with masked Python integers so results are reproducible bit for bit.

Example:
    >>> from src.pixelsampling.core.lowdiscrepancy import radical_inverse, sobol_sample
    >>> radical_inverse(0, 3)  # base 2: 0.11b
    0.75
    >>> sobol_sample(2, 1)
    0.75
"""

import functools
import math

import numpy as np

from src.pixelsampling.core.hashing import MASK32, hash_ints, mix_bits, permutation_elements
from src.pixelsampling.core.sobol_tables import SOBOL_MATRICES, SOBOL_MATRIX_SIZE

# Largest double strictly less than one
ONE_MINUS_EPSILON = float.fromhex("0x1.fffffffffffffp-1")

# 2^-32 as a float, converts 32-bit fixed point to [0, 1)
_INV_2_32 = 2.0**-32

# =============================================================================
# Prime Table
# =============================================================================

PRIME_TABLE_SIZE = 1000


def _first_primes(count: int) -> tuple[int, ...]:
    """Return the first `count` primes using a sieve of Eratosthenes."""
    limit = 16
    while True:
        sieve = np.ones(limit + 1, dtype=bool)
        sieve[:2] = False
        for p in range(2, math.isqrt(limit) + 1):
            if sieve[p]:
                sieve[p * p :: p] = False
        primes = np.flatnonzero(sieve)
        if len(primes) >= count:
            return tuple(int(p) for p in primes[:count])
        limit *= 2


PRIMES = _first_primes(PRIME_TABLE_SIZE)

# =============================================================================
# Radical Inverse
# =============================================================================


def radical_inverse(base_index: int, a: int) -> float:
    """Compute the radical inverse of `a` in the base PRIMES[base_index].

    The digits of `a` are mirrored around the radix point, so that
    a = d_k ... d_1 d_0 becomes 0.d_0 d_1 ... d_k.

    Args:
        base_index: Index into the prime table selecting the base.
        a: Non-negative integer to invert.

    Returns:
        The radical inverse in [0, 1).
    """
    base = PRIMES[base_index]
    inv_base = 1.0 / base
    inv_base_m = 1.0
    reversed_digits = 0
    while a:
        next_a = a // base
        digit = a - next_a * base
        reversed_digits = reversed_digits * base + digit
        inv_base_m *= inv_base
        a = next_a
    return min(reversed_digits * inv_base_m, ONE_MINUS_EPSILON)


def inverse_radical_inverse(inverse: int, base: int, n_digits: int) -> int:
    """Invert radical_inverse for a value given as an n_digits-digit integer.

    Args:
        inverse: The digits of the radical inverse, read as an integer
            (i.e. radical_inverse(...) * base**n_digits).
        base: The numeral base.
        n_digits: Number of digits to reverse.

    Returns:
        The index whose first n_digits radical-inverse digits are `inverse`.
    """
    index = 0
    for _ in range(n_digits):
        digit = inverse % base
        inverse //= base
        index = index * base + digit
    return index


class DigitPermutation:
    """Per-digit random permutations of the digits of one base.

    One permutation of [0, base) is stored for every digit position that
    affects a double precision radical inverse. The table is immutable after
    construction.

    Attributes:
        base: The numeral base.
        n_digits: Number of digit positions with a permutation.
        permutations: Read-only (n_digits, base) array; row i permutes the
            digit values at position i.
    """

    def __init__(self, base: int, seed: int) -> None:
        self.base = base
        n_digits = 0
        inv_base = 1.0 / base
        inv_base_m = 1.0
        while 1.0 - (base - 1) * inv_base_m < 1.0:
            n_digits += 1
            inv_base_m *= inv_base
        self.n_digits = n_digits

        digit_seeds = np.array(
            [hash_ints(base, digit_index, seed) for digit_index in range(n_digits)],
            dtype=np.uint64,
        )
        table = permutation_elements(np.arange(base)[np.newaxis, :], base, digit_seeds[:, np.newaxis])
        self.permutations = table.astype(np.uint16 if base <= 0xFFFF else np.uint32)
        self.permutations.flags.writeable = False
        self._rows = self.permutations.tolist()

    def permute(self, digit_index: int, digit_value: int) -> int:
        """Return the permuted value of a digit at the given position."""
        return self._rows[digit_index][digit_value]


class RadicalInversePermutations:
    """Digit permutations for every base in the prime table.

    Permutations are built the first time a base is requested and are
    immutable afterwards, so one instance can be shared by any number of
    sampler clones. Filling the cache is idempotent: a base built twice by
    concurrent readers yields equal tables, and every reader gets the one
    stored first.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self._permutations: dict[int, DigitPermutation] = {}

    def __len__(self) -> int:
        return PRIME_TABLE_SIZE

    def __getitem__(self, base_index: int) -> DigitPermutation:
        permutation = self._permutations.get(base_index)
        if permutation is None:
            permutation = self._permutations.setdefault(
                base_index, DigitPermutation(PRIMES[base_index], self.seed)
            )
        return permutation


@functools.lru_cache(maxsize=None)
def compute_radical_inverse_permutations(seed: int) -> RadicalInversePermutations:
    """Return the shared digit permutation tables for a seed."""
    return RadicalInversePermutations(seed)


def scrambled_radical_inverse(base_index: int, a: int, permutation: DigitPermutation) -> float:
    """Compute a radical inverse with every digit passed through a permutation.

    All n_digits positions are permuted, including the leading zero digits
    of `a`, so that scrambled values fill [0, 1) uniformly.

    Args:
        base_index: Index into the prime table selecting the base.
        a: Non-negative integer to invert.
        permutation: Digit permutation table for PRIMES[base_index].

    Returns:
        The scrambled radical inverse in [0, 1).
    """
    base = PRIMES[base_index]
    inv_base = 1.0 / base
    inv_base_m = 1.0
    reversed_digits = 0
    for digit_index in range(permutation.n_digits):
        next_a = a // base
        digit_value = a - next_a * base
        reversed_digits = reversed_digits * base + permutation.permute(digit_index, digit_value)
        inv_base_m *= inv_base
        a = next_a
    return min(inv_base_m * reversed_digits, ONE_MINUS_EPSILON)


# =============================================================================
# Sobol' Randomizers
# =============================================================================


class NoRandomizer:
    """Leave Sobol' samples unmodified."""

    def __call__(self, v: int) -> int:
        return v


class CranleyPattersonRotator:
    """Add a constant offset modulo 1 (modulo 2^32 in fixed point)."""

    def __init__(self, offset: int) -> None:
        self.offset = offset & MASK32

    @classmethod
    def from_float(cls, value: float) -> "CranleyPattersonRotator":
        """Create a rotator from an offset in [0, 1)."""
        return cls(int(value * (1 << 32)))

    def __call__(self, v: int) -> int:
        return (v + self.offset) & MASK32


class XORScrambler:
    """XOR all samples with a fixed 32-bit pattern (random digit scrambling)."""

    def __init__(self, scrambler: int) -> None:
        self.scrambler = scrambler & MASK32

    def __call__(self, v: int) -> int:
        return v ^ self.scrambler


class OwenScrambler:
    """Hash-based nested uniform (Owen) scrambling.

    Bit b of the sample is flipped depending on a hash of the higher bits
    and the seed, which permutes the elementary intervals at every level of
    the binary tree while preserving stratification.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed & MASK32

    def __call__(self, v: int) -> int:
        if self.seed & 1:
            v ^= 1 << 31
        for b in range(1, 32):
            mask = (MASK32 << (32 - b)) & MASK32
            if mix_bits((v & mask) ^ self.seed) & (1 << b):
                v ^= 1 << (31 - b)
        return v


# =============================================================================
# Sobol' Sampling
# =============================================================================


def sobol_bits(a: int, dimension: int) -> int:
    """Return the raw 32-bit fixed point Sobol' sample for index `a`.

    Raises:
        ValueError: If `a` needs more bits than the generator matrices have.
    """
    if a >> SOBOL_MATRIX_SIZE:
        raise ValueError(f"Sobol' index {a} exceeds 2^{SOBOL_MATRIX_SIZE}")
    matrix = SOBOL_MATRICES[dimension]
    v = 0
    i = 0
    while a:
        if a & 1:
            v ^= matrix[i]
        a >>= 1
        i += 1
    return v


def sobol_sample(a: int, dimension: int, randomizer=None) -> float:
    """Evaluate the Sobol' sequence at index `a` in the given dimension.

    Args:
        a: Sample index.
        dimension: Sobol' dimension, below N_SOBOL_DIMENSIONS.
        randomizer: Optional callable mapping the 32-bit sample to a
            randomized 32-bit sample.

    Returns:
        The (randomized) sample in [0, 1).
    """
    v = sobol_bits(a, dimension)
    if randomizer is not None:
        v = randomizer(v)
    return min(v * _INV_2_32, ONE_MINUS_EPSILON)


def _invert_gf2(columns: list[int], size: int) -> tuple[int, ...]:
    """Invert a square GF(2) matrix given as bit-packed columns.

    Returns, for every output bit t, the set of input bits (bit-packed)
    whose columns XOR to the unit vector 1 << t.
    """
    pairs = [[column, 1 << c] for c, column in enumerate(columns)]
    for t in range(size):
        pivot = next((k for k in range(t, size) if (pairs[k][0] >> t) & 1), None)
        if pivot is None:
            raise RuntimeError("Sobol' pixel matrix is singular")
        pairs[t], pairs[pivot] = pairs[pivot], pairs[t]
        for k in range(size):
            if k != t and (pairs[k][0] >> t) & 1:
                pairs[k][0] ^= pairs[t][0]
                pairs[k][1] ^= pairs[t][1]
    return tuple(preimage for _, preimage in pairs)


@functools.lru_cache(maxsize=None)
def _pixel_index_matrices(log2_scale: int) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Matrices relating Sobol' index bits to the pixel a sample falls in.

    The pixel of index i at resolution 2^m is given by the top m bits of
    the first two dimensions, packed as (x << m) | y. That is a GF(2)-linear
    function of the index bits. The low 2m bits act through an invertible
    matrix (the first two dimensions form a (0, 2)-sequence) and the higher
    "frame" bits act through the remaining columns.

    Returns:
        (frame_columns, inverse): the packed pixel offset contributed by each
        frame bit, and the inverse of the low-bit matrix.
    """
    m = log2_scale
    shift = 32 - m

    def pixel_code(column: int) -> int:
        x = SOBOL_MATRICES[0][column] >> shift
        y = SOBOL_MATRICES[1][column] >> shift
        return (x << m) | y

    low_columns = [pixel_code(c) for c in range(2 * m)]
    frame_columns = tuple(pixel_code(c) for c in range(2 * m, SOBOL_MATRIX_SIZE))
    return frame_columns, _invert_gf2(low_columns, 2 * m)


def sobol_interval_to_index(log2_scale: int, sample_index: int, pixel: tuple[int, int]) -> int:
    """Return the global Sobol' index of a pixel's sample_index-th sample.

    The image is covered by a 2^log2_scale square grid over the first two
    Sobol' dimensions. The returned index i satisfies
    floor(sobol_sample(i, d) * 2^log2_scale) == pixel[d] for d in (0, 1),
    and distinct sample indices give distinct global indices.

    Args:
        log2_scale: Base-2 logarithm of the grid resolution.
        sample_index: Index of the sample within the pixel.
        pixel: Pixel coordinates, each in [0, 2^log2_scale).

    Returns:
        The global Sobol' sequence index.

    Raises:
        ValueError: If sample_index is too large for the generator matrices.
    """
    if log2_scale == 0:
        return sample_index
    m = log2_scale
    frame_columns, inverse = _pixel_index_matrices(m)
    if sample_index >> len(frame_columns):
        raise ValueError(f"Sample index {sample_index} too large for a {1 << m}x{1 << m} Sobol' grid")

    index = sample_index << (2 * m)
    delta = 0
    frame = sample_index
    c = 0
    while frame:
        if frame & 1:
            delta ^= frame_columns[c]
        frame >>= 1
        c += 1

    b = ((pixel[0] << m) | pixel[1]) ^ delta
    c = 0
    while b:
        if b & 1:
            index ^= inverse[c]
        b >>= 1
        c += 1
    return index


# =============================================================================
# Integer Helpers
# =============================================================================


def is_power_of_2(v: int) -> bool:
    """Check whether v is a positive power of two."""
    return v > 0 and (v & (v - 1)) == 0


def is_power_of_4(v: int) -> bool:
    """Check whether v is a positive power of four."""
    return is_power_of_2(v) and (v.bit_length() - 1) % 2 == 0


def round_up_pow2(v: int) -> int:
    """Return the smallest power of two >= v (1 for v <= 1)."""
    return 1 if v <= 1 else 1 << (v - 1).bit_length()


def round_up_pow4(v: int) -> int:
    """Return the smallest power of four >= v (1 for v <= 1)."""
    p = round_up_pow2(v)
    return p if is_power_of_4(p) else p << 1


def log4_int(v: int) -> int:
    """Return floor(log4(v)) for positive v."""
    return (v.bit_length() - 1) // 2
