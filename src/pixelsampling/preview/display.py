"""Matplotlib display of sample patterns.

Example:
    >>> from src.pixelsampling.preview.display import show_pattern_comparison
    >>> from src.pixelsampling.preview.patterns import collect_pixel_samples
    >>>
    >>> patterns = {"halton": collect_pixel_samples(halton, (0, 0))}
    >>> show_pattern_comparison(patterns, grid=(4, 4))
"""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt


def _draw_pattern(ax, points: npt.ArrayLike, title: str, grid: tuple[int, int] | None) -> None:
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if grid is not None:
        for k in range(1, grid[0]):
            ax.axvline(k / grid[0], color="0.75", linewidth=0.5)
        for k in range(1, grid[1]):
            ax.axhline(k / grid[1], color="0.75", linewidth=0.5)
    ax.scatter(pts[:, 0], pts[:, 1], s=8, color="black")
    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(0.0, 1.0)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_title(f"{title} ({len(pts)} samples)")


def show_pattern(
    points: npt.ArrayLike,
    *,
    title: str = "Sample pattern",
    grid: tuple[int, int] | None = None,
    figsize: tuple[float, float] = (6, 6),
    block: bool = True,
) -> None:
    """Display a 2D sample pattern as a scatter plot.

    Args:
        points: Array-like of shape (N, 2) with values in [0, 1).
        title: Figure title.
        grid: Optional (nx, ny) strata grid drawn beneath the points.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    _draw_pattern(ax, points, title, grid)
    plt.tight_layout()
    plt.show(block=block)


def show_pattern_comparison(
    patterns: dict[str, npt.ArrayLike],
    *,
    grid: tuple[int, int] | None = None,
    columns: int = 3,
    block: bool = True,
) -> None:
    """Display several sample patterns side by side.

    Args:
        patterns: Points of each pattern keyed by label.
        grid: Optional (nx, ny) strata grid drawn beneath every pattern.
        columns: Number of plots per row.
        block: Whether to block execution until figure is closed.

    Raises:
        ValueError: If there are no patterns.
    """
    import matplotlib.pyplot as plt

    if not patterns:
        raise ValueError("No sample patterns to display")

    columns = min(columns, len(patterns))
    rows = math.ceil(len(patterns) / columns)
    fig, axes = plt.subplots(rows, columns, figsize=(4 * columns, 4 * rows), squeeze=False)
    for ax, (label, points) in zip(axes.flat, patterns.items()):
        _draw_pattern(ax, points, label, grid)
    for ax in axes.flat[len(patterns):]:
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)
