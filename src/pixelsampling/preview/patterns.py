"""Sample pattern collection and error measurement.

This module gathers the 2D sample pattern that a sampler produces in one
pixel, for plotting, and measures the error of Monte Carlo estimates
against an exact value.

Example:
    >>> from src.pixelsampling.preview.patterns import collect_pixel_samples
    >>> from src.pixelsampling.samplers.stratified import StratifiedSampler
    >>>
    >>> sampler = StratifiedSampler(4, 4)
    >>> points = collect_pixel_samples(sampler, (0, 0))
    >>> points.shape
    (16, 2)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.pixelsampling.samplers.base import Sampler


def collect_pixel_samples(
    sampler: Sampler,
    pixel: tuple[int, int],
    dimension: int = 0,
) -> npt.NDArray[np.float64]:
    """Collect one 2D sample per sample index of a pixel.

    Args:
        sampler: The sampler to read.
        pixel: Pixel coordinates (x, y).
        dimension: Dimension of the 2D sample (0 is the pixel sample).

    Returns:
        Array of shape (samples_per_pixel, 2).
    """
    points = np.empty((sampler.samples_per_pixel, 2), dtype=np.float64)
    for sample_index in range(sampler.samples_per_pixel):
        sampler.start_pixel_sample(pixel, sample_index, dimension)
        points[sample_index] = sampler.get_2d()
    return points


def strata_occupancy(
    points: npt.ArrayLike,
    grid: tuple[int, int],
) -> npt.NDArray[np.int64]:
    """Count the points falling in each cell of an nx x ny grid.

    Args:
        points: Array-like of shape (N, 2) with values in [0, 1).
        grid: Number of cells (nx, ny).

    Returns:
        Array of shape (ny, nx) with the number of points per cell.

    Raises:
        ValueError: If a point lies outside [0, 1)^2.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if ((pts < 0.0) | (pts >= 1.0)).any():
        raise ValueError("Sample points must lie in [0, 1)^2")

    nx, ny = grid
    cols = np.minimum((pts[:, 0] * nx).astype(np.int64), nx - 1)
    rows = np.minimum((pts[:, 1] * ny).astype(np.int64), ny - 1)
    counts = np.zeros((ny, nx), dtype=np.int64)
    np.add.at(counts, (rows, cols), 1)
    return counts


def compute_rmse(
    estimates: npt.ArrayLike,
    reference: float | npt.ArrayLike,
) -> float:
    """Compute the root mean squared error of estimates against a reference.

    Args:
        estimates: Estimated values.
        reference: Exact value, either a scalar or an array with the same
            shape as estimates.

    Returns:
        RMSE value (lower is better).

    Raises:
        ValueError: If an array reference has a different shape.
    """
    estimates = np.asarray(estimates, dtype=np.float64)
    reference = np.asarray(reference, dtype=np.float64)
    if reference.ndim and reference.shape != estimates.shape:
        raise ValueError(
            f"Shapes must match: {estimates.shape} vs {reference.shape}"
        )

    diff = estimates - reference
    return float(np.sqrt(np.mean(diff**2)))
