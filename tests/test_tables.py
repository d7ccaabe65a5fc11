"""Tests for the precomputed sampling tables.

Tests cover:
- Blue-noise textures (rank permutation, spacing, wraparound)
- PMJ02BN point sets ((0,2)-sequence property, lookup)
- Seeded pseudorandom streams
"""

import numpy as np
import pytest


class TestBlueNoise:
    """Test the blue-noise textures."""

    def test_shape_and_read_only(self):
        """Test texture dimensions and immutability."""
        from src.pixelsampling.core.bluenoise import (
            BLUE_NOISE_RESOLUTION,
            BLUE_NOISE_TEXTURE_COUNT,
            blue_noise_textures,
        )

        textures = blue_noise_textures()
        assert textures.shape == (BLUE_NOISE_TEXTURE_COUNT, BLUE_NOISE_RESOLUTION, BLUE_NOISE_RESOLUTION)
        with pytest.raises(ValueError):
            textures[0, 0, 0] = 0.5

    def test_each_texture_is_a_rank_map(self):
        """Test that each texture holds every rank exactly once."""
        from src.pixelsampling.core.bluenoise import BLUE_NOISE_RESOLUTION, blue_noise_textures

        n = BLUE_NOISE_RESOLUTION * BLUE_NOISE_RESOLUTION
        expected = np.arange(n) / n
        for texture in blue_noise_textures():
            assert np.array_equal(np.sort(texture.ravel()), expected.astype(np.float32))

    def test_textures_differ(self):
        """Test that textures are independent."""
        from src.pixelsampling.core.bluenoise import blue_noise_textures

        textures = blue_noise_textures()
        assert not np.array_equal(textures[0], textures[1])

    def test_low_ranks_are_spread_out(self):
        """Test that the first ranked cells are never adjacent (toroidally)."""
        from src.pixelsampling.core.bluenoise import BLUE_NOISE_RESOLUTION, blue_noise_textures

        res = BLUE_NOISE_RESOLUTION
        n = res * res
        for texture in blue_noise_textures()[:4]:
            ys, xs = np.nonzero(texture < 64 / n)
            assert len(xs) == 64
            dx = np.abs(xs[:, np.newaxis] - xs[np.newaxis, :])
            dy = np.abs(ys[:, np.newaxis] - ys[np.newaxis, :])
            dx = np.minimum(dx, res - dx)
            dy = np.minimum(dy, res - dy)
            dist_sq = dx * dx + dy * dy
            np.fill_diagonal(dist_sq, n)
            assert dist_sq.min() >= 4

    def test_lookup_wraps(self):
        """Test that texture index and pixel coordinates wrap around."""
        from src.pixelsampling.core.bluenoise import (
            BLUE_NOISE_RESOLUTION,
            BLUE_NOISE_TEXTURE_COUNT,
            blue_noise,
        )

        res = BLUE_NOISE_RESOLUTION
        value = blue_noise(3, (5, 7))
        assert 0.0 <= value < 1.0
        assert blue_noise(3 + BLUE_NOISE_TEXTURE_COUNT, (5 + res, 7 - res)) == value

    def test_cached(self):
        """Test that the textures are built once."""
        from src.pixelsampling.core.bluenoise import blue_noise_textures

        assert blue_noise_textures() is blue_noise_textures()


class TestPMJ02BNTables:
    """Test the PMJ02BN point sets."""

    def test_shape_and_range(self):
        """Test set dimensions, range and immutability."""
        from src.pixelsampling.core.pmj02tables import (
            PMJ02BN_SAMPLE_COUNT,
            PMJ02BN_SET_COUNT,
            pmj02bn_samples,
        )

        samples = pmj02bn_samples()
        assert samples.shape == (PMJ02BN_SET_COUNT, PMJ02BN_SAMPLE_COUNT, 2)
        assert samples.min() >= 0.0
        assert samples.max() < 1.0
        with pytest.raises(ValueError):
            samples[0, 0, 0] = 0.0

    def test_progressive_02_sequence(self):
        """Test that every power-of-two prefix is a (0, m, 2)-net."""
        from src.pixelsampling.core.pmj02tables import pmj02bn_samples

        for points in pmj02bn_samples():
            for m in range(13):
                prefix = points[: 1 << m]
                for a in range(m + 1):
                    cx = np.floor(prefix[:, 0] * (1 << a)).astype(np.int64)
                    cy = np.floor(prefix[:, 1] * (1 << (m - a))).astype(np.int64)
                    cells = cx * (1 << (m - a)) + cy
                    assert len(np.unique(cells)) == 1 << m

    def test_sets_differ(self):
        """Test that the sets are independent."""
        from src.pixelsampling.core.pmj02tables import pmj02bn_samples

        samples = pmj02bn_samples()
        assert not np.array_equal(samples[0], samples[1])

    def test_lookup_wraps(self):
        """Test that both indices wrap around."""
        from src.pixelsampling.core.pmj02tables import (
            PMJ02BN_SAMPLE_COUNT,
            PMJ02BN_SET_COUNT,
            get_pmj02bn_sample,
            pmj02bn_samples,
        )

        u = get_pmj02bn_sample(2, 77)
        assert u == (float(pmj02bn_samples()[2, 77, 0]), float(pmj02bn_samples()[2, 77, 1]))
        assert get_pmj02bn_sample(2 + PMJ02BN_SET_COUNT, 77 + PMJ02BN_SAMPLE_COUNT) == u


class TestPixelStream:
    """Test seeded pseudorandom streams."""

    def test_deterministic(self):
        """Test that equal stream selectors give equal draws."""
        from src.pixelsampling.core.rng import pixel_stream

        a = pixel_stream(42).random(8)
        b = pixel_stream(42).random(8)
        assert np.array_equal(a, b)

    def test_streams_differ(self):
        """Test that different selectors give different draws."""
        from src.pixelsampling.core.rng import pixel_stream

        assert pixel_stream(1).random() != pixel_stream(2).random()

    def test_offset_skips_draws(self):
        """Test that the offset skips that many uniform draws."""
        from src.pixelsampling.core.rng import pixel_stream

        full = pixel_stream(9).random(10)
        skipped = pixel_stream(9, 4).random(6)
        assert np.array_equal(full[4:], skipped)
