"""
Tests for the io module.
"""

import imageio.v3 as iio
import numpy as np
import pytest

from framestack.errors import InvalidBuffer
from framestack.io import list_frames, read_frame, to_rgba, write_frame


class TestReadWrite:
    """Tests for image decoding and encoding."""

    def test_png_preserves_rgba(self, tmp_path, random_frames):
        (frame,) = random_frames(n=1)
        path = write_frame(frame, tmp_path / "sub" / "frame.png")

        assert path.exists()
        assert read_frame(path) == frame

    def test_rgb_png_gets_opaque_alpha(self, tmp_path):
        rgb = np.zeros((3, 4, 3), dtype=np.uint8)
        rgb[..., 0] = 200
        path = tmp_path / "rgb.png"
        iio.imwrite(path, rgb)

        frame = read_frame(path)

        assert frame.size == (4, 3)
        assert frame.pixel(2, 1) == (200, 0, 0, 255)


class TestToRGBA:
    """Tests for channel layout conversion."""

    def test_grayscale(self):
        gray = np.full((2, 2), 42, dtype=np.uint8)
        rgba = to_rgba(gray)
        assert rgba.shape == (2, 2, 4)
        assert tuple(rgba[0, 0]) == (42, 42, 42, 255)

    def test_gray_alpha(self):
        la = np.zeros((1, 1, 2), dtype=np.uint8)
        la[0, 0] = [9, 100]
        assert tuple(to_rgba(la)[0, 0]) == (9, 9, 9, 100)

    def test_16bit_rejected(self):
        with pytest.raises(InvalidBuffer, match="8-bit"):
            to_rgba(np.zeros((2, 2, 3), dtype=np.uint16))


class TestListFrames:
    """Tests for frame discovery."""

    def test_discovery_and_exclusions(self, tmp_path):
        for name in ["b.png", "a.PNG", "c.jpg", "notes.txt", "astro-stacked-median-1.png"]:
            (tmp_path / name).write_bytes(b"")
        (tmp_path / "nested.png").mkdir()

        frames = list_frames(tmp_path)

        assert [p.name for p in frames] == ["a.PNG", "b.png", "c.jpg"]

    def test_keep_previous_composites(self, tmp_path):
        (tmp_path / "astro-stacked-average-1.png").write_bytes(b"")
        assert len(list_frames(tmp_path, exclude_stacked=False)) == 1

    def test_prefixed_pattern(self, tmp_path):
        """Patterns match whole file names, not only suffixes."""
        for name in ["light_001.png", "LIGHT_002.PNG", "dark_001.png"]:
            (tmp_path / name).write_bytes(b"")

        frames = list_frames(tmp_path, patterns=("light_*.png",))

        assert [p.name for p in frames] == ["LIGHT_002.PNG", "light_001.png"]

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(ValueError, match="not a directory"):
            list_frames(tmp_path / "missing")
