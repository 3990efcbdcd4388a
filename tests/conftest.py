"""Shared fixtures: synthetic RGBA buffers and a fixed seed source."""

import numpy as np
import pytest


class FixedSeeds:
    """Stands in for numpy.random.Generator, returning preset seed indices."""

    def __init__(self, indices):
        self.indices = list(indices)

    def integers(self, low, high, size=None):
        return np.array(self.indices[:size], dtype=np.int64)


@pytest.fixture
def fixed_seeds():
    return FixedSeeds


@pytest.fixture
def solid_rgba():
    """Build an (h, w, 4) uint8 image filled with one color."""
    def make(rgb, width=12, height=12, alpha=255):
        img = np.zeros((height, width, 4), dtype=np.uint8)
        img[..., :3] = rgb
        img[..., 3] = alpha
        return img
    return make
