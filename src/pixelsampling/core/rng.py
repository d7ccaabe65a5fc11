"""Seeded pseudorandom streams.

Each (sequence index, offset) pair names a position in an independent
PCG64 stream, so that any sample of any pixel can be regenerated without
replaying the samples before it.
"""

import numpy as np

from src.pixelsampling.core.hashing import MASK64


def pixel_stream(sequence_index: int, offset: int = 0) -> np.random.Generator:
    """Create a generator positioned at `offset` draws into a stream.

    Args:
        sequence_index: Selects the stream. Only the low 64 bits are used.
        offset: Number of 64-bit draws to skip.

    Returns:
        A numpy Generator backed by a PCG64 bit generator.
    """
    bit_generator = np.random.PCG64(np.random.SeedSequence(sequence_index & MASK64))
    if offset:
        bit_generator.advance(offset)
    return np.random.Generator(bit_generator)
