"""Tests for the Sobol' generator matrices.

Tests cover:
- Primitive polynomials and initial direction numbers
- Generator matrix shape and column ranges
"""


def _polynomial_order(poly: int, degree: int) -> int:
    """Return the multiplicative order of x modulo a GF(2) polynomial."""
    value = 1
    for order in range(1, 1 << degree):
        value <<= 1
        if value >> degree:
            value ^= poly
        if value == 1:
            return order
    return 0


class TestDirectionNumbers:
    """Test the direction number table."""

    def test_polynomials_are_primitive(self):
        """Test that every polynomial generates the full multiplicative group."""
        from src.pixelsampling.core.sobol_tables import SOBOL_DIRECTION_NUMBERS

        for degree, coefficients, _ in SOBOL_DIRECTION_NUMBERS:
            poly = (1 << degree) | (coefficients << 1) | 1
            assert _polynomial_order(poly, degree) == (1 << degree) - 1, (degree, coefficients)

    def test_polynomials_are_distinct(self):
        """Test that no polynomial is used twice."""
        from src.pixelsampling.core.sobol_tables import SOBOL_DIRECTION_NUMBERS

        keys = [(degree, coefficients) for degree, coefficients, _ in SOBOL_DIRECTION_NUMBERS]
        assert len(keys) == len(set(keys))

    def test_initial_numbers_are_valid(self):
        """Test that each m_k is odd and below 2^k."""
        from src.pixelsampling.core.sobol_tables import SOBOL_DIRECTION_NUMBERS

        for degree, _, initial in SOBOL_DIRECTION_NUMBERS:
            assert len(initial) == degree
            for k, m in enumerate(initial, start=1):
                assert m % 2 == 1
                assert m < (1 << k)


class TestSobolMatrices:
    """Test the generated matrices."""

    def test_shape(self):
        """Test the number of dimensions and columns."""
        from src.pixelsampling.core.sobol_tables import (
            N_SOBOL_DIMENSIONS,
            SOBOL_MATRICES,
            SOBOL_MATRIX_SIZE,
        )

        assert N_SOBOL_DIMENSIONS == 53
        assert len(SOBOL_MATRICES) == N_SOBOL_DIMENSIONS
        assert all(len(matrix) == SOBOL_MATRIX_SIZE for matrix in SOBOL_MATRICES)

    def test_columns_fit_32_bits(self):
        """Test that every column is a 32-bit value."""
        from src.pixelsampling.core.sobol_tables import SOBOL_MATRICES

        for matrix in SOBOL_MATRICES:
            assert all(0 <= column < (1 << 32) for column in matrix)

    def test_lowest_bits(self):
        """Test that column k has its lowest set bit at position 31 - k."""
        from src.pixelsampling.core.sobol_tables import SOBOL_MATRICES

        for matrix in SOBOL_MATRICES:
            for k, column in enumerate(matrix[:32]):
                assert (column >> (31 - k)) & 1 == 1
                assert column & ((1 << (31 - k)) - 1) == 0

    def test_van_der_corput(self):
        """Test that dimension 0 is the identity matrix."""
        from src.pixelsampling.core.sobol_tables import SOBOL_MATRICES

        assert SOBOL_MATRICES[0][:4] == (1 << 31, 1 << 30, 1 << 29, 1 << 28)
        assert all(column == 0 for column in SOBOL_MATRICES[0][32:])
