"""Sobol' generator matrices.

The matrices are generated at import time from primitive polynomials and
initial direction numbers (Joe & Kuo, "Constructing Sobol sequences with
better two-dimensional projections", 2008) with the Bratley-Fox recurrence.

Each dimension has SOBOL_MATRIX_SIZE columns. Column c is the 32-bit
direction number that is XORed into the sample when bit c of the sample
index is set; its most significant bit is the first binary digit of the
sample. Dimension 0 is the van der Corput sequence.
"""

# Number of columns (index bits) per generator matrix
SOBOL_MATRIX_SIZE = 52

# (degree, coefficients, initial direction numbers m_1..m_degree) for
# dimensions 1, 2, ... The coefficient bits a_1..a_{degree-1} are stored
# most significant first, so the polynomial is
#   x^degree + a_1 x^(degree-1) + ... + a_{degree-1} x + 1.
SOBOL_DIRECTION_NUMBERS: tuple[tuple[int, int, tuple[int, ...]], ...] = (
    (1, 0, (1,)),
    (2, 1, (1, 3)),
    (3, 1, (1, 3, 1)),
    (3, 2, (1, 1, 1)),
    (4, 1, (1, 1, 3, 3)),
    (4, 4, (1, 3, 5, 13)),
    (5, 2, (1, 1, 5, 5, 17)),
    (5, 4, (1, 1, 5, 5, 5)),
    (5, 7, (1, 1, 7, 11, 19)),
    (5, 11, (1, 1, 5, 1, 1)),
    (5, 13, (1, 1, 1, 3, 11)),
    (5, 14, (1, 3, 5, 5, 31)),
    (6, 1, (1, 3, 3, 9, 7, 49)),
    (6, 13, (1, 1, 1, 15, 21, 21)),
    (6, 16, (1, 3, 1, 13, 27, 49)),
    (6, 19, (1, 1, 1, 15, 7, 5)),
    (6, 22, (1, 3, 1, 15, 13, 25)),
    (6, 25, (1, 1, 5, 5, 19, 61)),
    (7, 1, (1, 3, 7, 11, 23, 15, 103)),
    (7, 4, (1, 3, 7, 13, 13, 15, 69)),
    (7, 7, (1, 1, 3, 13, 7, 35, 63)),
    (7, 8, (1, 3, 5, 9, 1, 25, 53)),
    (7, 14, (1, 3, 1, 13, 9, 35, 107)),
    (7, 19, (1, 3, 1, 5, 27, 61, 31)),
    (7, 21, (1, 1, 5, 11, 19, 41, 61)),
    (7, 28, (1, 3, 5, 3, 3, 13, 69)),
    (7, 31, (1, 1, 7, 13, 1, 19, 1)),
    (7, 32, (1, 3, 7, 5, 13, 19, 59)),
    (7, 37, (1, 1, 3, 9, 25, 29, 41)),
    (7, 41, (1, 3, 5, 13, 23, 1, 55)),
    (7, 42, (1, 3, 7, 3, 13, 59, 17)),
    (7, 50, (1, 3, 1, 3, 5, 53, 69)),
    (7, 55, (1, 1, 5, 5, 23, 33, 13)),
    (7, 56, (1, 1, 7, 7, 1, 61, 123)),
    (7, 59, (1, 1, 7, 9, 13, 61, 49)),
    (7, 62, (1, 3, 3, 5, 3, 55, 33)),
    (8, 14, (1, 3, 1, 15, 31, 13, 49, 245)),
    (8, 21, (1, 3, 5, 15, 31, 59, 63, 97)),
    (8, 22, (1, 3, 1, 11, 11, 11, 77, 249)),
    (8, 38, (1, 3, 1, 11, 27, 43, 71, 9)),
    (8, 47, (1, 1, 7, 15, 21, 11, 81, 45)),
    (8, 49, (1, 3, 7, 3, 25, 31, 65, 79)),
    (8, 50, (1, 3, 1, 1, 19, 11, 3, 205)),
    (8, 52, (1, 1, 5, 9, 19, 21, 29, 157)),
    (8, 56, (1, 3, 7, 11, 1, 33, 89, 185)),
    (8, 67, (1, 3, 3, 3, 15, 9, 79, 71)),
    (8, 70, (1, 3, 7, 11, 15, 39, 119, 27)),
    (8, 84, (1, 1, 3, 1, 11, 31, 97, 225)),
    (8, 97, (1, 1, 1, 3, 23, 43, 57, 177)),
    (8, 103, (1, 3, 7, 7, 17, 17, 37, 71)),
    (8, 115, (1, 3, 1, 5, 27, 63, 123, 213)),
    (8, 122, (1, 1, 3, 5, 11, 43, 53, 133)),
)

# Total number of Sobol' dimensions (van der Corput plus the table above)
N_SOBOL_DIMENSIONS = 1 + len(SOBOL_DIRECTION_NUMBERS)


def _direction_columns(degree: int, coefficients: int, initial: tuple[int, ...]) -> tuple[int, ...]:
    """Expand initial direction numbers into SOBOL_MATRIX_SIZE 32-bit columns."""
    m = list(initial)
    for k in range(degree, SOBOL_MATRIX_SIZE):
        value = m[k - degree] ^ (m[k - degree] << degree)
        for j in range(1, degree):
            if (coefficients >> (degree - 1 - j)) & 1:
                value ^= m[k - j] << j
        m.append(value)
    # m_k / 2^k as a 32-bit fixed point fraction
    return tuple((mk << 32) >> (k + 1) for k, mk in enumerate(m))


def _build_matrices() -> tuple[tuple[int, ...], ...]:
    # Identity matrix: m_k = 1 for every k
    van_der_corput = tuple((1 << 32) >> (k + 1) for k in range(SOBOL_MATRIX_SIZE))
    rest = tuple(
        _direction_columns(degree, coefficients, initial)
        for degree, coefficients, initial in SOBOL_DIRECTION_NUMBERS
    )
    return (van_der_corput,) + rest


SOBOL_MATRICES: tuple[tuple[int, ...], ...] = _build_matrices()
