"""
Pytest configuration and fixtures.
"""

import numpy as np
import pytest

from framestack.buffer import PixelBuffer


@pytest.fixture
def solid_frame():
    """Create a frame with every pixel set to one RGBA value."""
    def _create(width=4, height=4, rgba=(0, 0, 0, 255)):
        return PixelBuffer.filled(width, height, rgba)

    return _create


@pytest.fixture
def random_frames():
    """Create a list of random RGBA frames with a fixed seed."""
    def _create(n=5, width=16, height=12, seed=42):
        rng = np.random.default_rng(seed)
        return [
            PixelBuffer.from_array(rng.integers(0, 256, (height, width, 4), dtype=np.uint8))
            for _ in range(n)
        ]

    return _create


@pytest.fixture
def single_pixel_frames():
    """Create 1x1 frames from a list of R values (G, B, A fixed)."""
    def _create(r_values, g=0, b=0, a=255):
        return [PixelBuffer(1, 1, [r, g, b, a]) for r in r_values]

    return _create
