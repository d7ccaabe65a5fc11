"""Pytest configuration for pixelsampling tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    The blue-noise textures are built by a Taichi kernel the first time a
    sampler needs them; using session scope keeps a single runtime (and a
    single table build) for every test.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


def _is_02_net(points, m: int) -> bool:
    """Check that 2^m points form a (0, m, 2)-net in base 2."""
    n = 1 << m
    if len(points) != n:
        return False
    for a in range(m + 1):
        cells = {(int(x * (1 << a)), int(y * (1 << (m - a)))) for x, y in points}
        if len(cells) != n:
            return False
    return True


@pytest.fixture
def is_02_net():
    """Checker for the (0, m, 2)-net property.

    Every elementary interval [i/2^a, (i+1)/2^a) x [j/2^(m-a), (j+1)/2^(m-a))
    must hold exactly one of the 2^m points.
    """
    return _is_02_net
