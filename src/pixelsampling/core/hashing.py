"""Bit mixing, hashing and index permutation utilities.

This module provides the integer hashing primitives shared by every sampler:

- A 64-bit avalanche finalizer (mix_bits) used to derive per-pixel,
  per-dimension seeds.
- MurmurHash64A over packed integers (hash_ints) used to seed digit
  permutation tables.
- A hash-based permutation of [0, n) (permutation_element) that maps a
  sample index to a decorrelated index without collisions. A
  numpy-vectorized version (permutation_elements) builds whole tables at
  once and produces the same values as the scalar version.

All arithmetic is emulated with Python integers masked to 32 or 64 bits so
that results are bit-identical on every platform.

Example:
    >>> from src.pixelsampling.core.hashing import mix_bits, permutation_element
    >>> seed = mix_bits((3 << 48) ^ (2 << 32))
    >>> [permutation_element(i, 4, seed) for i in range(4)]  # some order of 0..3
"""

import struct

import numpy as np
import numpy.typing as npt

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

# MurmurHash64A constants
_MURMUR_M = 0xC6A4A7935BD1E995
_MURMUR_R = 47


def mix_bits(v: int) -> int:
    """Scramble the bits of a 64-bit value so that nearby inputs diverge.

    Args:
        v: The value to mix. Only the low 64 bits are used.

    Returns:
        The mixed 64-bit value.
    """
    v &= MASK64
    v ^= v >> 31
    v = (v * 0x7FB5D329728EA185) & MASK64
    v ^= v >> 27
    v = (v * 0x81DADEF4BC2DD44D) & MASK64
    v ^= v >> 33
    return v


def murmur_hash64a(data: bytes, seed: int = 0) -> int:
    """Compute MurmurHash64A of a byte string.

    Args:
        data: The bytes to hash.
        seed: Optional 64-bit hash seed.

    Returns:
        The 64-bit hash value.
    """
    length = len(data)
    h = (seed ^ (length * _MURMUR_M)) & MASK64

    n_blocks = length // 8
    for (k,) in struct.iter_unpack("<Q", data[: n_blocks * 8]):
        k = (k * _MURMUR_M) & MASK64
        k ^= k >> _MURMUR_R
        k = (k * _MURMUR_M) & MASK64
        h ^= k
        h = (h * _MURMUR_M) & MASK64

    tail = data[n_blocks * 8 :]
    if tail:
        for i in reversed(range(len(tail))):
            h ^= tail[i] << (8 * i)
        h = (h * _MURMUR_M) & MASK64

    h ^= h >> _MURMUR_R
    h = (h * _MURMUR_M) & MASK64
    h ^= h >> _MURMUR_R
    return h


def hash_ints(*values: int) -> int:
    """Hash a tuple of integers into a single 64-bit value.

    Each value is packed as a little-endian 64-bit word (negative values
    wrap modulo 2^64) before hashing with MurmurHash64A.

    Args:
        *values: The integers to hash.

    Returns:
        The 64-bit hash of the packed values.
    """
    packed = struct.pack(f"<{len(values)}Q", *(v & MASK64 for v in values))
    return murmur_hash64a(packed)


def pixel_dimension_hash(pixel: tuple[int, int], dimension: int, seed: int) -> int:
    """Hash a (pixel, dimension, seed) triple into a 64-bit permutation seed.

    Args:
        pixel: Pixel coordinates (x, y).
        dimension: The current sample dimension.
        seed: The global sampler seed.

    Returns:
        The mixed 64-bit hash.
    """
    return mix_bits(
        ((pixel[0] & MASK64) << 48)
        ^ ((pixel[1] & MASK64) << 32)
        ^ (dimension << 16)
        ^ (seed & MASK64)
    )


def _next_pow2_mask(n: int) -> int:
    """Return the all-ones mask covering n - 1 (the smallest 2^k - 1 >= n - 1)."""
    w = (n - 1) & MASK32
    w |= w >> 1
    w |= w >> 2
    w |= w >> 4
    w |= w >> 8
    w |= w >> 16
    return w


def _permute_round(i: int, w: int, p: int) -> int:
    """One round of the invertible hash on [0, w]."""
    i ^= p
    i = (i * 0xE170893D) & MASK32
    i ^= p >> 16
    i ^= (i & w) >> 4
    i ^= p >> 8
    i = (i * 0x0929EB3F) & MASK32
    i ^= p >> 23
    i ^= (i & w) >> 1
    i = (i * (1 | p >> 27)) & MASK32
    i = (i * 0x6935FA69) & MASK32
    i ^= (i & w) >> 11
    i = (i * 0x74DCB303) & MASK32
    i ^= (i & w) >> 2
    i = (i * 0x9E501CC3) & MASK32
    i ^= (i & w) >> 2
    i = (i * 0xC860A3DF) & MASK32
    i &= w
    i ^= i >> 5
    return i


def permutation_element(i: int, n: int, seed: int) -> int:
    """Return the i-th element of a pseudorandom permutation of [0, n).

    For a fixed (n, seed), the map i -> permutation_element(i, n, seed) is a
    bijection on [0, n). Values outside the power-of-two range covering n
    are skipped by cycle walking.

    Args:
        i: Index in [0, n).
        n: Size of the permuted range (must be positive).
        seed: Permutation seed. Only the low 32 bits are used.

    Returns:
        The permuted index in [0, n).
    """
    p = seed & MASK32
    w = _next_pow2_mask(n)
    i &= MASK32
    while True:
        i = _permute_round(i, w, p)
        if i < n:
            break
    return ((i + p) & MASK32) % n


def _permute_round_array(i: npt.NDArray[np.uint32], w: np.uint32, p: npt.NDArray[np.uint32]):
    """Vectorized _permute_round over uint32 arrays (wrapping arithmetic)."""
    i = i ^ p
    i = i * np.uint32(0xE170893D)
    i ^= p >> 16
    i ^= (i & w) >> 4
    i ^= p >> 8
    i = i * np.uint32(0x0929EB3F)
    i ^= p >> 23
    i ^= (i & w) >> 1
    i = i * (np.uint32(1) | (p >> 27))
    i = i * np.uint32(0x6935FA69)
    i ^= (i & w) >> 11
    i = i * np.uint32(0x74DCB303)
    i ^= (i & w) >> 2
    i = i * np.uint32(0x9E501CC3)
    i ^= (i & w) >> 2
    i = i * np.uint32(0xC860A3DF)
    i &= w
    i ^= i >> 5
    return i


def permutation_elements(
    values: npt.ArrayLike, n: int, seeds: npt.ArrayLike
) -> npt.NDArray[np.uint32]:
    """Vectorized permutation_element.

    Args:
        values: Indices in [0, n), any shape.
        n: Size of the permuted range (must be positive).
        seeds: Permutation seeds, broadcastable against values. Only the
            low 32 bits of each seed are used.

    Returns:
        Array of permuted indices with the broadcast shape of the inputs.
    """
    seeds_arr = np.asarray(seeds, dtype=np.uint64) & np.uint64(MASK32)
    values_arr, seeds_arr = np.broadcast_arrays(
        np.asarray(values, dtype=np.uint32), seeds_arr.astype(np.uint32)
    )
    p = np.ascontiguousarray(seeds_arr)
    w = np.uint32(_next_pow2_mask(n))
    bound = np.uint32(n)

    result = _permute_round_array(np.array(values_arr, dtype=np.uint32), w, p)
    pending = result >= bound
    while pending.any():
        result[pending] = _permute_round_array(result[pending], w, p[pending])
        pending = result >= bound
    return (result + p) % bound
