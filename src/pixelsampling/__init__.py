"""Pixel sample generation for Monte Carlo rendering.

This package provides the samplers that feed a renderer its sample values,
with support for:
- Quasi-Monte Carlo sequences (Halton, Sobol', PMJ02BN) with scrambling
- Random and jittered stratified baselines
- A Markov chain sampler for Metropolis light transport, with replay
- Configuration-driven construction and camera sample helpers
- Sample pattern inspection and display (Matplotlib)

Subpackages:
    core: Hashing, low-discrepancy primitives and precomputed tables
    samplers: The sampler variants and their factory
    camera: Camera sample generation
    preview: Sample pattern inspection and display
"""

__version__ = "0.1.0"
