"""Camera sample generation from a pixel sampler.

A camera sample bundles the sample values a camera needs to generate one
ray: the film position (pixel plus filter offset), the shutter time and
the lens position. They are drawn from a sampler in a fixed order (one 2D
value for the filter, one 1D value for time, one 2D value for the lens) so
that the pixel sample always uses the sampler's reserved first dimensions.

Example:
    >>> from src.pixelsampling.camera.sample import BoxFilter, get_camera_sample
    >>> from src.pixelsampling.samplers.halton import HaltonSampler
    >>> sampler = HaltonSampler(16, (64, 64))
    >>> sampler.start_pixel_sample((10, 20), 0)
    >>> cs = get_camera_sample(sampler, (10, 20), BoxFilter())
    >>> cs.p_film  # inside [10, 11) x [20, 21)
"""

from dataclasses import dataclass

from src.pixelsampling.samplers.base import Sampler


@dataclass
class FilterSample:
    """An offset from the pixel center drawn from a reconstruction filter.

    Attributes:
        p: Offset (x, y) from the pixel center.
        weight: Sample weight.
    """

    p: tuple[float, float]
    weight: float


@dataclass
class BoxFilter:
    """Box reconstruction filter.

    Attributes:
        radius: Half-width (x, y) of the filter support in pixels.
    """

    radius: tuple[float, float] = (0.5, 0.5)

    def sample(self, u: tuple[float, float]) -> FilterSample:
        """Map a uniform sample to an offset inside the filter support."""
        return FilterSample(
            p=(
                (1.0 - u[0]) * -self.radius[0] + u[0] * self.radius[0],
                (1.0 - u[1]) * -self.radius[1] + u[1] * self.radius[1],
            ),
            weight=1.0,
        )


@dataclass
class CameraSample:
    """Sample values for generating one camera ray.

    Attributes:
        p_film: Position on the film in raster coordinates.
        time: Shutter time in [0, 1).
        p_lens: Position on the lens in [0, 1)^2.
        filter_weight: Weight of the filter sample.
    """

    p_film: tuple[float, float]
    time: float
    p_lens: tuple[float, float]
    filter_weight: float = 1.0


def get_camera_sample(
    sampler: Sampler,
    pixel: tuple[int, int],
    filter: BoxFilter | None = None,
    disable_pixel_jitter: bool = False,
) -> CameraSample:
    """Draw a camera sample for a pixel.

    start_pixel_sample() must already have been called on the sampler.

    Args:
        sampler: The sampler positioned at the start of a sample path.
        pixel: The pixel (x, y) being sampled.
        filter: Reconstruction filter. Defaults to a box of radius 0.5.
        disable_pixel_jitter: Place the film position at the pixel center
            (the filter sample is still consumed).

    Returns:
        The camera sample.
    """
    if filter is None:
        filter = BoxFilter()

    filter_sample = filter.sample(sampler.get_2d())
    if disable_pixel_jitter:
        filter_sample = FilterSample(p=(0.0, 0.0), weight=1.0)

    p_film = (
        pixel[0] + filter_sample.p[0] + 0.5,
        pixel[1] + filter_sample.p[1] + 0.5,
    )
    time = sampler.get_1d()
    p_lens = sampler.get_2d()
    return CameraSample(p_film=p_film, time=time, p_lens=p_lens, filter_weight=filter_sample.weight)
