"""Camera sample generation.

Components:
    sample: CameraSample, BoxFilter and get_camera_sample
"""

from .sample import BoxFilter, CameraSample, FilterSample, get_camera_sample

__all__ = [
    "BoxFilter",
    "CameraSample",
    "FilterSample",
    "get_camera_sample",
]
