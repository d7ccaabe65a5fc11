"""Construct samplers from named configurations.

A SamplerConfig names a sampler and carries its parameters as a plain
dictionary (as read from a scene description). create_sampler() checks the
parameters, applies the defaults and the global RenderOptions, and builds
the sampler.

Recognised parameters:

    ============== ===================================== =====================
    Key            Samplers                              Default
    ============== ===================================== =====================
    pixelsamples   all but stratified                    16 (random: 4)
    seed           all                                   RenderOptions.seed
    randomization  sobol, paddedsobol                    "owen"
    jitter         stratified                            True
    xsamples       stratified                            4
    ysamples       stratified                            4
    ============== ===================================== =====================

Example:
    >>> from src.pixelsampling.samplers.factory import RenderOptions, SamplerConfig, create_sampler
    >>> config = SamplerConfig("sobol", {"pixelsamples": 64, "randomization": "xor"})
    >>> sampler = create_sampler(config, (1920, 1080), RenderOptions(seed=3))
"""

import math
from dataclasses import dataclass, field
from typing import Any

from src.pixelsampling.samplers.base import RandomizeStrategy, Sampler
from src.pixelsampling.samplers.halton import HaltonSampler
from src.pixelsampling.samplers.pmj02bn import PMJ02BNSampler
from src.pixelsampling.samplers.random_sampler import RandomSampler
from src.pixelsampling.samplers.sobol import PaddedSobolSampler, SobolSampler
from src.pixelsampling.samplers.stratified import StratifiedSampler

DEFAULT_PIXEL_SAMPLES = 16
DEFAULT_RANDOM_PIXEL_SAMPLES = 4
DEFAULT_STRATA = 4
DEFAULT_RANDOMIZATION = "owen"

# Parameter keys accepted by each sampler name
SAMPLER_PARAMETERS: dict[str, frozenset[str]] = {
    "halton": frozenset({"pixelsamples", "seed"}),
    "sobol": frozenset({"pixelsamples", "seed", "randomization"}),
    "paddedsobol": frozenset({"pixelsamples", "seed", "randomization"}),
    "pmj02bn": frozenset({"pixelsamples", "seed"}),
    "random": frozenset({"pixelsamples", "seed"}),
    "stratified": frozenset({"xsamples", "ysamples", "jitter", "seed"}),
}


@dataclass
class RenderOptions:
    """Global options that affect every sampler.

    Attributes:
        seed: Default seed for samplers that do not set one.
        pixel_samples: If set, overrides every sampler's sample count.
        quick_render: Force a single sample per pixel.
        disable_pixel_jitter: Place camera samples at pixel centers.
    """

    seed: int = 0
    pixel_samples: int | None = None
    quick_render: bool = False
    disable_pixel_jitter: bool = False


@dataclass
class SamplerConfig:
    """A named sampler with its parameters.

    Attributes:
        name: Sampler name, one of SAMPLER_PARAMETERS.
        parameters: Parameter values keyed by parameter name.
    """

    name: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        return {"name": self.name, "parameters": dict(self.parameters)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SamplerConfig":
        """Load a configuration from a dictionary.

        Args:
            data: Dictionary with a 'name' key and an optional 'parameters' key.

        Raises:
            ValueError: If the dictionary has no sampler name.
        """
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError(f"Sampler configuration needs a string 'name', got {name!r}")
        return cls(name=name, parameters=dict(data.get("parameters", {})))


# =============================================================================
# Parameter Validation
# =============================================================================


def _get_int(parameters: dict[str, Any], key: str, default: int) -> int:
    value = parameters.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Parameter '{key}' must be an integer, got {value!r}")
    return value


def _get_positive_int(parameters: dict[str, Any], key: str, default: int) -> int:
    value = _get_int(parameters, key, default)
    if value <= 0:
        raise ValueError(f"Parameter '{key}' must be positive, got {value}")
    return value


def _get_bool(parameters: dict[str, Any], key: str, default: bool) -> bool:
    value = parameters.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"Parameter '{key}' must be a boolean, got {value!r}")
    return value


def _get_randomization(parameters: dict[str, Any]) -> RandomizeStrategy:
    value = parameters.get("randomization", DEFAULT_RANDOMIZATION)
    if not isinstance(value, str):
        raise ValueError(f"Parameter 'randomization' must be a string, got {value!r}")
    return RandomizeStrategy.from_name(value)


def square_strata(samples: int) -> tuple[int, int]:
    """Split a sample count into the most square (xsamples, ysamples) grid."""
    if samples <= 0:
        raise ValueError(f"Sample count must be positive, got {samples}")
    div = math.isqrt(samples)
    while samples % div != 0:
        div -= 1
    y = samples // div
    return samples // y, y


# =============================================================================
# Sampler Creation
# =============================================================================


def create_sampler(
    config: SamplerConfig,
    full_resolution: tuple[int, int],
    options: RenderOptions | None = None,
) -> Sampler:
    """Create a sampler from its configuration.

    Args:
        config: Sampler name and parameters.
        full_resolution: Image resolution (width, height) in pixels.
        options: Global render options. Defaults to RenderOptions().

    Returns:
        The configured sampler.

    Raises:
        ValueError: If the name is unknown or a parameter is unknown, of
            the wrong type, or out of range.
    """
    if options is None:
        options = RenderOptions()

    name = config.name.lower()
    allowed = SAMPLER_PARAMETERS.get(name)
    if allowed is None:
        raise ValueError(
            f"{config.name}: unknown sampler (expected one of {', '.join(SAMPLER_PARAMETERS)})"
        )
    unknown = sorted(set(config.parameters) - allowed)
    if unknown:
        raise ValueError(f"{name}: unknown parameter(s) {', '.join(unknown)}")

    parameters = config.parameters
    seed = _get_int(parameters, "seed", options.seed)

    if name == "stratified":
        jitter = _get_bool(parameters, "jitter", True)
        x_samples = _get_positive_int(parameters, "xsamples", DEFAULT_STRATA)
        y_samples = _get_positive_int(parameters, "ysamples", DEFAULT_STRATA)
        if options.pixel_samples is not None:
            x_samples, y_samples = square_strata(options.pixel_samples)
        if options.quick_render:
            x_samples = y_samples = 1
        return StratifiedSampler(x_samples, y_samples, jitter, seed)

    default_samples = DEFAULT_RANDOM_PIXEL_SAMPLES if name == "random" else DEFAULT_PIXEL_SAMPLES
    samples_per_pixel = _get_positive_int(parameters, "pixelsamples", default_samples)
    if options.pixel_samples is not None:
        samples_per_pixel = options.pixel_samples
    if options.quick_render:
        samples_per_pixel = 1
    if samples_per_pixel <= 0:
        raise ValueError(f"Sample count must be positive, got {samples_per_pixel}")

    if name == "halton":
        return HaltonSampler(samples_per_pixel, full_resolution, seed)
    if name == "sobol":
        return SobolSampler(samples_per_pixel, full_resolution, _get_randomization(parameters), seed)
    if name == "paddedsobol":
        return PaddedSobolSampler(samples_per_pixel, _get_randomization(parameters), seed)
    if name == "pmj02bn":
        return PMJ02BNSampler(samples_per_pixel, seed)
    return RandomSampler(samples_per_pixel, seed)
