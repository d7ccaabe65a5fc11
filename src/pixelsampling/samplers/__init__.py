"""Sampler variants.

Components:
    base: Sampler interface, SamplerType and RandomizeStrategy
    halton: Scrambled Halton sampler
    sobol: Padded and image-wide Sobol' samplers
    pmj02bn: Progressive multi-jittered (0,2) blue-noise sampler
    random_sampler: Uniform random baseline
    stratified: Jittered stratified sampler
    mlt: Metropolis light transport Markov chain sampler and its replay
    factory: Construction from named configurations
"""

from .base import RandomizeStrategy, Sampler, SamplerType
from .factory import RenderOptions, SamplerConfig, create_sampler
from .halton import HaltonSampler
from .mlt import MLTSampler, create_debug_mlt_sampler
from .pmj02bn import PMJ02BNSampler
from .random_sampler import RandomSampler
from .sobol import PaddedSobolSampler, SobolSampler
from .stratified import StratifiedSampler

__all__ = [
    "Sampler",
    "SamplerType",
    "RandomizeStrategy",
    "HaltonSampler",
    "PaddedSobolSampler",
    "SobolSampler",
    "PMJ02BNSampler",
    "RandomSampler",
    "StratifiedSampler",
    "MLTSampler",
    "create_debug_mlt_sampler",
    "RenderOptions",
    "SamplerConfig",
    "create_sampler",
]
