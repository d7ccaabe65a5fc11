"""Tests for sampler construction from named configurations.

Tests cover:
- Building every sampler kind with defaults and explicit parameters
- Global render option overrides
- Configuration errors
"""

import warnings

import pytest


class TestSamplerConfig:
    """Test SamplerConfig serialization."""

    def test_dict_round_trip(self):
        """Test exporting and loading a configuration."""
        from src.pixelsampling.samplers.factory import SamplerConfig

        config = SamplerConfig("sobol", {"pixelsamples": 32, "randomization": "xor"})
        loaded = SamplerConfig.from_dict(config.to_dict())
        assert loaded == config
        assert loaded.parameters is not config.parameters

    def test_from_dict_defaults(self):
        """Test that parameters are optional."""
        from src.pixelsampling.samplers.factory import SamplerConfig

        assert SamplerConfig.from_dict({"name": "halton"}).parameters == {}

    def test_from_dict_requires_name(self):
        """Test that a configuration without a name is rejected."""
        from src.pixelsampling.samplers.factory import SamplerConfig

        with pytest.raises(ValueError, match="name"):
            SamplerConfig.from_dict({"parameters": {}})


class TestSquareStrata:
    """Test splitting sample counts into strata grids."""

    @pytest.mark.parametrize("n, expected", [(1, (1, 1)), (12, (3, 4)), (16, (4, 4)), (7, (1, 7)), (32, (4, 8))])
    def test_square_strata(self, n, expected):
        """Test that the grid is as square as the count allows."""
        from src.pixelsampling.samplers.factory import square_strata

        assert square_strata(n) == expected

    def test_rejects_zero(self):
        """Test that zero samples cannot be stratified."""
        from src.pixelsampling.samplers.factory import square_strata

        with pytest.raises(ValueError):
            square_strata(0)


class TestCreateSampler:
    """Test create_sampler()."""

    @pytest.mark.parametrize(
        "name, cls_name, spp",
        [
            ("halton", "HaltonSampler", 16),
            ("sobol", "SobolSampler", 16),
            ("paddedsobol", "PaddedSobolSampler", 16),
            ("pmj02bn", "PMJ02BNSampler", 16),
            ("random", "RandomSampler", 4),
            ("stratified", "StratifiedSampler", 16),
        ],
    )
    def test_defaults(self, name, cls_name, spp):
        """Test each sampler kind with default parameters."""
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler

        sampler = create_sampler(SamplerConfig(name), (64, 64))
        assert type(sampler).__name__ == cls_name
        assert sampler.samples_per_pixel == spp
        assert sampler.seed == 0

    def test_name_is_case_insensitive(self):
        """Test that sampler names ignore case."""
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler
        from src.pixelsampling.samplers.halton import HaltonSampler

        assert isinstance(create_sampler(SamplerConfig("Halton"), (8, 8)), HaltonSampler)

    def test_explicit_parameters(self):
        """Test that parameters reach the sampler."""
        from src.pixelsampling.samplers.base import RandomizeStrategy
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler

        sampler = create_sampler(
            SamplerConfig("paddedsobol", {"pixelsamples": 64, "randomization": "cranleypatterson", "seed": 5}),
            (64, 64),
        )
        assert sampler.samples_per_pixel == 64
        assert sampler.randomize == RandomizeStrategy.CRANLEY_PATTERSON
        assert sampler.seed == 5

    def test_stratified_parameters(self):
        """Test stratum counts and jitter."""
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler

        sampler = create_sampler(SamplerConfig("stratified", {"xsamples": 2, "ysamples": 3, "jitter": False}), (8, 8))
        assert (sampler.x_pixel_samples, sampler.y_pixel_samples) == (2, 3)
        assert sampler.samples_per_pixel == 6
        assert sampler.jitter is False

    def test_option_seed_is_default(self):
        """Test that the global seed applies unless the sampler sets one."""
        from src.pixelsampling.samplers.factory import RenderOptions, SamplerConfig, create_sampler

        options = RenderOptions(seed=11)
        assert create_sampler(SamplerConfig("halton"), (8, 8), options).seed == 11
        assert create_sampler(SamplerConfig("halton", {"seed": 2}), (8, 8), options).seed == 2

    def test_pixel_samples_override(self):
        """Test that the global sample count overrides the parameter."""
        from src.pixelsampling.samplers.factory import RenderOptions, SamplerConfig, create_sampler

        options = RenderOptions(pixel_samples=64)
        sampler = create_sampler(SamplerConfig("sobol", {"pixelsamples": 8}), (16, 16), options)
        assert sampler.samples_per_pixel == 64

        stratified = create_sampler(SamplerConfig("stratified"), (16, 16), RenderOptions(pixel_samples=12))
        assert (stratified.x_pixel_samples, stratified.y_pixel_samples) == (3, 4)

    def test_quick_render(self):
        """Test that quick renders take one sample per pixel."""
        from src.pixelsampling.samplers.factory import RenderOptions, SamplerConfig, create_sampler

        options = RenderOptions(pixel_samples=64, quick_render=True)
        for name in ("halton", "pmj02bn", "stratified"):
            sampler = create_sampler(SamplerConfig(name), (16, 16), options)
            assert sampler.samples_per_pixel == 1

    def test_power_of_two_warning_passes_through(self):
        """Test that construction warnings reach the caller."""
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler

        with pytest.warns(UserWarning):
            create_sampler(SamplerConfig("sobol", {"pixelsamples": 12}), (16, 16))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            create_sampler(SamplerConfig("halton", {"pixelsamples": 12}), (16, 16))

    @pytest.mark.parametrize(
        "name, parameters, message",
        [
            ("bogus", {}, "unknown sampler"),
            ("halton", {"randomization": "owen"}, "unknown parameter"),
            ("stratified", {"pixelsamples": 16}, "unknown parameter"),
            ("sobol", {"randomization": "scramble"}, "unknown randomization"),
            ("sobol", {"randomization": 3}, "must be a string"),
            ("random", {"pixelsamples": 0}, "must be positive"),
            ("random", {"pixelsamples": 2.5}, "must be an integer"),
            ("random", {"seed": True}, "must be an integer"),
            ("stratified", {"jitter": "yes"}, "must be a boolean"),
            ("stratified", {"xsamples": -2}, "must be positive"),
        ],
    )
    def test_configuration_errors(self, name, parameters, message):
        """Test that invalid configurations fail at construction."""
        from src.pixelsampling.samplers.factory import SamplerConfig, create_sampler

        with pytest.raises(ValueError, match=message):
            create_sampler(SamplerConfig(name, parameters), (16, 16))
