"""Tests for the low-discrepancy primitives.

Tests cover:
- Prime table
- Radical inverse, its inverse, and digit-permuted radical inverses
- Sobol' samples and randomizers
- Mapping pixel samples to global Sobol' indices
- Integer helpers
"""

import pytest


class TestPrimeTable:
    """Test the prime table."""

    def test_size_and_bounds(self):
        """Test the table holds the first 1000 primes."""
        from src.pixelsampling.core.lowdiscrepancy import PRIME_TABLE_SIZE, PRIMES

        assert PRIME_TABLE_SIZE == 1000
        assert len(PRIMES) == PRIME_TABLE_SIZE
        assert PRIMES[:6] == (2, 3, 5, 7, 11, 13)
        assert PRIMES[-1] == 7919

    def test_entries_are_prime(self):
        """Test that the first entries are all prime and increasing."""
        from src.pixelsampling.core.lowdiscrepancy import PRIMES

        for p in PRIMES[:200]:
            assert all(p % d for d in range(2, int(p**0.5) + 1))
        assert list(PRIMES) == sorted(set(PRIMES))


class TestRadicalInverse:
    """Test radical inverses."""

    def test_base_2(self):
        """Test the van der Corput sequence."""
        from src.pixelsampling.core.lowdiscrepancy import radical_inverse

        assert radical_inverse(0, 0) == 0.0
        assert radical_inverse(0, 1) == 0.5
        assert radical_inverse(0, 2) == 0.25
        assert radical_inverse(0, 3) == 0.75
        assert radical_inverse(0, 6) == 0.375

    def test_base_3(self):
        """Test radical inverses in base 3."""
        from src.pixelsampling.core.lowdiscrepancy import radical_inverse

        assert abs(radical_inverse(1, 1) - 1.0 / 3.0) < 1e-12
        assert abs(radical_inverse(1, 3) - 1.0 / 9.0) < 1e-12
        # 5 = 12 (base 3) -> 0.21 (base 3)
        assert abs(radical_inverse(1, 5) - 7.0 / 9.0) < 1e-12

    def test_below_one(self):
        """Test that radical inverses stay below one."""
        from src.pixelsampling.core.lowdiscrepancy import radical_inverse

        for base_index in [0, 1, 2, 50, 999]:
            for a in [0, 1, 17, 2**40 - 1, 2**62]:
                assert 0.0 <= radical_inverse(base_index, a) < 1.0

    @pytest.mark.parametrize("base_index,base,n_digits", [(0, 2, 6), (1, 3, 4), (2, 5, 3)])
    def test_inverse_radical_inverse(self, base_index, base, n_digits):
        """Test that inverse_radical_inverse undoes the digit reversal."""
        from src.pixelsampling.core.lowdiscrepancy import inverse_radical_inverse, radical_inverse

        scale = base**n_digits
        for a in range(scale):
            digits = round(radical_inverse(base_index, a) * scale)
            assert inverse_radical_inverse(digits, base, n_digits) == a


class TestDigitPermutation:
    """Test digit permutation tables."""

    def test_rows_are_permutations(self):
        """Test that every digit position holds a permutation of the digits."""
        from src.pixelsampling.core.lowdiscrepancy import DigitPermutation

        for base in [2, 3, 7, 31]:
            perm = DigitPermutation(base, seed=5)
            assert perm.n_digits > 0
            assert perm.permutations.shape == (perm.n_digits, base)
            for row in perm.permutations:
                assert sorted(row.tolist()) == list(range(base))

    def test_digit_count_matches_precision(self):
        """Test the number of permuted digits for common bases."""
        from src.pixelsampling.core.lowdiscrepancy import DigitPermutation

        assert DigitPermutation(2, 0).n_digits == 54
        # Higher bases need fewer digits to exhaust double precision
        assert DigitPermutation(3, 0).n_digits < DigitPermutation(2, 0).n_digits

    def test_table_is_read_only(self):
        """Test that the permutation table cannot be modified."""
        from src.pixelsampling.core.lowdiscrepancy import DigitPermutation

        perm = DigitPermutation(5, 0)
        with pytest.raises(ValueError):
            perm.permutations[0, 0] = 1

    def test_permute_matches_table(self):
        """Test that permute() reads the table."""
        from src.pixelsampling.core.lowdiscrepancy import DigitPermutation

        perm = DigitPermutation(7, 11)
        for digit_index in range(3):
            for digit in range(7):
                assert perm.permute(digit_index, digit) == int(perm.permutations[digit_index, digit])

    def test_shared_per_seed(self):
        """Test that permutations are computed once per seed."""
        from src.pixelsampling.core.lowdiscrepancy import compute_radical_inverse_permutations

        a = compute_radical_inverse_permutations(3)
        b = compute_radical_inverse_permutations(3)
        assert a is b
        assert a[4] is b[4]
        assert len(a) == 1000
        assert compute_radical_inverse_permutations(4)[4].permutations.tolist() != a[4].permutations.tolist()


class TestScrambledRadicalInverse:
    """Test digit-permuted radical inverses."""

    def test_range(self):
        """Test that scrambled values stay in [0, 1)."""
        from src.pixelsampling.core.lowdiscrepancy import (
            compute_radical_inverse_permutations,
            scrambled_radical_inverse,
        )

        perms = compute_radical_inverse_permutations(0)
        for base_index in [0, 1, 2, 10]:
            for a in range(50):
                v = scrambled_radical_inverse(base_index, a, perms[base_index])
                assert 0.0 <= v < 1.0

    def test_preserves_stratification(self):
        """Test that base^2 consecutive indices still fill all base^2 strata."""
        from src.pixelsampling.core.lowdiscrepancy import (
            compute_radical_inverse_permutations,
            scrambled_radical_inverse,
        )

        perms = compute_radical_inverse_permutations(9)
        base_index, base = 1, 3
        strata = {
            int(scrambled_radical_inverse(base_index, a, perms[base_index]) * base * base + 1e-12)
            for a in range(base * base)
        }
        assert strata == set(range(base * base))

    def test_zero_is_scrambled(self):
        """Test that index zero maps through the permutation of the zero digit."""
        from src.pixelsampling.core.lowdiscrepancy import DigitPermutation, scrambled_radical_inverse

        perm = DigitPermutation(5, 1)
        v = scrambled_radical_inverse(2, 0, perm)
        assert int(v * 5) == perm.permute(0, 0)


class TestSobolSample:
    """Test Sobol' sample evaluation."""

    def test_dimension_0_is_van_der_corput(self):
        """Test that dimension 0 matches the base-2 radical inverse."""
        from src.pixelsampling.core.lowdiscrepancy import radical_inverse, sobol_sample

        for a in range(256):
            assert sobol_sample(a, 0) == radical_inverse(0, a)

    def test_dimension_1_start(self):
        """Test the first points of dimension 1."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_sample

        assert [sobol_sample(a, 1) for a in range(4)] == [0.0, 0.5, 0.75, 0.25]

    def test_first_two_dimensions_form_nets(self, is_02_net):
        """Test that the first 2^m points of dimensions 0-1 form (0, m, 2)-nets."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_sample

        for m in [2, 4, 6, 8]:
            points = [(sobol_sample(a, 0), sobol_sample(a, 1)) for a in range(1 << m)]
            assert is_02_net(points, m)

    def test_every_dimension_is_stratified(self):
        """Test that each dimension's first 256 points fill all 256 strata."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_sample
        from src.pixelsampling.core.sobol_tables import N_SOBOL_DIMENSIONS

        for dim in range(N_SOBOL_DIMENSIONS):
            strata = {int(sobol_sample(a, dim) * 256) for a in range(256)}
            assert len(strata) == 256

    def test_owen_scrambling_preserves_nets(self, is_02_net):
        """Test that Owen scrambling keeps the (0, m, 2)-net property."""
        from src.pixelsampling.core.lowdiscrepancy import OwenScrambler, sobol_sample

        sx = OwenScrambler(0x1234)
        sy = OwenScrambler(0xBEEF)
        points = [(sobol_sample(a, 0, sx), sobol_sample(a, 1, sy)) for a in range(64)]
        assert is_02_net(points, 6)
        assert points != [(sobol_sample(a, 0), sobol_sample(a, 1)) for a in range(64)]

    def test_xor_scrambling_preserves_nets(self, is_02_net):
        """Test that XOR scrambling keeps the (0, m, 2)-net property."""
        from src.pixelsampling.core.lowdiscrepancy import XORScrambler, sobol_sample

        sx = XORScrambler(0x9E3779B9)
        sy = XORScrambler(0x7F4A7C15)
        points = [(sobol_sample(a, 0, sx), sobol_sample(a, 1, sy)) for a in range(64)]
        assert is_02_net(points, 6)

    def test_cranley_patterson_rotation(self):
        """Test that rotation adds an offset modulo one."""
        from src.pixelsampling.core.lowdiscrepancy import CranleyPattersonRotator, sobol_sample

        rotator = CranleyPattersonRotator.from_float(0.75)
        assert sobol_sample(0, 0, rotator) == 0.75
        assert sobol_sample(1, 0, rotator) == 0.25

    def test_no_randomizer_is_identity(self):
        """Test that NoRandomizer leaves samples unchanged."""
        from src.pixelsampling.core.lowdiscrepancy import NoRandomizer, sobol_sample

        for a in range(16):
            assert sobol_sample(a, 3, NoRandomizer()) == sobol_sample(a, 3)

    def test_index_too_large(self):
        """Test that indices beyond the matrix size are rejected."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_sample

        with pytest.raises(ValueError, match="exceeds"):
            sobol_sample(1 << 52, 0)

    def test_range(self):
        """Test that samples stay in [0, 1) for large indices."""
        from src.pixelsampling.core.lowdiscrepancy import OwenScrambler, sobol_sample

        for a in [(1 << 52) - 1, (1 << 40) + 12345, 2**31]:
            for dim in [0, 1, 5, 52]:
                assert 0.0 <= sobol_sample(a, dim) < 1.0
                assert 0.0 <= sobol_sample(a, dim, OwenScrambler(dim)) < 1.0


class TestSobolIntervalToIndex:
    """Test the mapping from pixel samples to global Sobol' indices."""

    def test_zero_scale(self):
        """Test that a 1x1 grid uses the sample index directly."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_interval_to_index

        assert sobol_interval_to_index(0, 17, (0, 0)) == 17

    @pytest.mark.parametrize("log2_scale", [1, 3, 5])
    def test_samples_land_in_their_pixel(self, log2_scale):
        """Test that every returned index falls inside the requested pixel."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_interval_to_index, sobol_sample

        scale = 1 << log2_scale
        seen = set()
        for px in range(scale):
            for py in range(scale):
                for sample_index in range(4):
                    index = sobol_interval_to_index(log2_scale, sample_index, (px, py))
                    assert int(sobol_sample(index, 0) * scale) == px
                    assert int(sobol_sample(index, 1) * scale) == py
                    seen.add(index)
        # Pixel samples partition the first 4 * scale^2 indices
        assert seen == set(range(4 * scale * scale))

    def test_large_sample_index(self):
        """Test containment for sample indices with many frame bits."""
        from src.pixelsampling.core.lowdiscrepancy import sobol_interval_to_index, sobol_sample

        for sample_index in [1000, 65535, 123456]:
            index = sobol_interval_to_index(4, sample_index, (9, 14))
            assert int(sobol_sample(index, 0) * 16) == 9
            assert int(sobol_sample(index, 1) * 16) == 14


class TestIntegerHelpers:
    """Test power-of-two helpers."""

    def test_powers(self):
        """Test power-of-two and power-of-four predicates and rounding."""
        from src.pixelsampling.core.lowdiscrepancy import (
            is_power_of_2,
            is_power_of_4,
            log4_int,
            round_up_pow2,
            round_up_pow4,
        )

        assert is_power_of_2(1) and is_power_of_2(64) and not is_power_of_2(12)
        assert not is_power_of_2(0)
        assert is_power_of_4(1) and is_power_of_4(16) and not is_power_of_4(8)
        assert round_up_pow2(5) == 8
        assert round_up_pow2(8) == 8
        assert round_up_pow2(1) == 1
        assert round_up_pow4(2) == 4
        assert round_up_pow4(5) == 16
        assert round_up_pow4(16) == 16
        assert log4_int(64) == 3
        assert log4_int(4096) == 6
