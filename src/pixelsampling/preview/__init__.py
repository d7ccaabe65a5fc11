"""Preview module for inspecting sample patterns.

This module provides:
- Collection of a pixel's 2D sample pattern from any sampler
- Strata occupancy counts and RMSE of estimates
- Matplotlib scatter plots for side-by-side comparison
"""

from src.pixelsampling.preview.display import show_pattern, show_pattern_comparison
from src.pixelsampling.preview.patterns import (
    collect_pixel_samples,
    compute_rmse,
    strata_occupancy,
)

__all__ = [
    "collect_pixel_samples",
    "compute_rmse",
    "strata_occupancy",
    "show_pattern",
    "show_pattern_comparison",
]
