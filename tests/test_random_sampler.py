"""Tests for the independent random sampler."""

import pytest


class TestRandomSampler:
    """Test RandomSampler."""

    def test_fresh_instances_agree(self):
        """Test that two fresh samplers produce the same path."""
        from src.pixelsampling.samplers.random_sampler import RandomSampler

        values = []
        for _ in range(2):
            sampler = RandomSampler(samples_per_pixel=4, seed=7)
            sampler.start_pixel_sample((3, 2), 1, 0)
            values.append([sampler.get_1d(), sampler.get_2d(), sampler.get_1d(), sampler.get_2d()])
        assert values[0] == values[1]

    def test_start_dimension_skips_ahead(self):
        """Test that starting at dimension d continues the dimension-0 stream."""
        from src.pixelsampling.samplers.random_sampler import RandomSampler

        sampler = RandomSampler(4, seed=1)
        sampler.start_pixel_sample((8, 8), 2)
        full = [sampler.get_1d() for _ in range(6)]
        sampler.start_pixel_sample((8, 8), 2, 3)
        assert [sampler.get_1d() for _ in range(3)] == full[3:]
        assert sampler.dimension == 6

    def test_range(self):
        """Test that values lie in [0, 1)."""
        from src.pixelsampling.samplers.random_sampler import RandomSampler

        sampler = RandomSampler(4)
        sampler.start_pixel_sample((0, 0), 0)
        values = [sampler.get_1d() for _ in range(100)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_inputs_change_values(self):
        """Test that pixel, sample index and seed each select a different stream."""
        from src.pixelsampling.samplers.random_sampler import RandomSampler

        def first(seed, pixel, sample_index):
            sampler = RandomSampler(4, seed=seed)
            sampler.start_pixel_sample(pixel, sample_index)
            return sampler.get_1d()

        base = first(0, (1, 1), 0)
        assert first(1, (1, 1), 0) != base
        assert first(0, (2, 1), 0) != base
        assert first(0, (1, 2), 0) != base
        assert first(0, (1, 1), 1) != base

    def test_sequence_index(self):
        """Test the layout of the stream selector."""
        from src.pixelsampling.samplers.random_sampler import pixel_sequence_index

        assert pixel_sequence_index((3, 2), 0) == 3 + 2 * 65536
        assert pixel_sequence_index((3, 2), 7) == (3 + 2 * 65536) | (7 << 32)

    def test_read_before_start(self):
        """Test that reading before start_pixel_sample raises."""
        from src.pixelsampling.samplers.random_sampler import RandomSampler

        with pytest.raises(RuntimeError, match="start_pixel_sample"):
            RandomSampler(4).get_1d()
