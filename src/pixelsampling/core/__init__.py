"""Core sampling primitives.

This module contains the building blocks shared by every sampler:

Components:
    hashing: Bit mixing, MurmurHash and index permutations
    lowdiscrepancy: Radical inverses, digit permutations and Sobol' samples
    sobol_tables: Sobol' generator matrices
    bluenoise: Blue-noise textures built with a Taichi kernel
    pmj02tables: Progressive multi-jittered (0,2) point sets
    rng: Seeded pseudorandom streams

Tables are built once per process and are read-only afterwards.
"""

from .hashing import (
    MASK32,
    MASK64,
    hash_ints,
    mix_bits,
    murmur_hash64a,
    permutation_element,
    permutation_elements,
    pixel_dimension_hash,
)
from .lowdiscrepancy import (
    ONE_MINUS_EPSILON,
    PRIME_TABLE_SIZE,
    PRIMES,
    CranleyPattersonRotator,
    DigitPermutation,
    NoRandomizer,
    OwenScrambler,
    XORScrambler,
    compute_radical_inverse_permutations,
    inverse_radical_inverse,
    radical_inverse,
    scrambled_radical_inverse,
    sobol_interval_to_index,
    sobol_sample,
)
from .rng import pixel_stream
from .sobol_tables import N_SOBOL_DIMENSIONS, SOBOL_MATRICES, SOBOL_MATRIX_SIZE

# Note: bluenoise and pmj02tables are NOT imported here; their tables are
# built on first use and bluenoise needs Taichi initialised.

__all__ = [
    "MASK32",
    "MASK64",
    "mix_bits",
    "murmur_hash64a",
    "hash_ints",
    "pixel_dimension_hash",
    "permutation_element",
    "permutation_elements",
    "ONE_MINUS_EPSILON",
    "PRIMES",
    "PRIME_TABLE_SIZE",
    "radical_inverse",
    "inverse_radical_inverse",
    "scrambled_radical_inverse",
    "DigitPermutation",
    "compute_radical_inverse_permutations",
    "NoRandomizer",
    "CranleyPattersonRotator",
    "XORScrambler",
    "OwenScrambler",
    "sobol_sample",
    "sobol_interval_to_index",
    "SOBOL_MATRICES",
    "SOBOL_MATRIX_SIZE",
    "N_SOBOL_DIMENSIONS",
    "pixel_stream",
]
