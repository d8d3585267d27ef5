"""
Tests for the tone module.

Tests cover:
- Identity transform
- Parameter validation
- Step order (brightness, contrast, saturation) and clamping
- Non-accumulating adjustments
"""

import numpy as np
import pytest

from framestack.buffer import PixelBuffer
from framestack.config import MAX_TONE_FACTOR, ToneParameters
from framestack.errors import InvalidParameter, ToneError
from framestack.tone import ToneProcessor, adjust


class TestIdentity:
    """Default parameters leave the image unchanged."""

    def test_identity_returns_equal_buffer(self, random_frames):
        (source,) = random_frames(n=1)
        result = adjust(source, brightness=1.0, contrast=1.0, saturation=1.0)

        assert result == source
        assert result is not source

    def test_identity_via_params(self, random_frames):
        (source,) = random_frames(n=1)
        assert ToneProcessor(ToneParameters()).apply(source) == source


class TestValidation:
    """Out-of-domain parameters are rejected."""

    def test_zero_brightness(self, solid_frame):
        with pytest.raises(InvalidParameter) as excinfo:
            adjust(solid_frame(), brightness=0)
        assert excinfo.value.name == "brightness"
        assert excinfo.value.value == 0

    def test_negative_saturation(self, solid_frame):
        with pytest.raises(InvalidParameter) as excinfo:
            adjust(solid_frame(), saturation=-1)
        assert excinfo.value.name == "saturation"
        assert excinfo.value.value == -1

    def test_non_positive_contrast(self, solid_frame):
        with pytest.raises(InvalidParameter, match="contrast"):
            adjust(solid_frame(), contrast=0.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite(self, value):
        with pytest.raises(InvalidParameter, match="finite"):
            ToneParameters(brightness=value)

    @pytest.mark.parametrize("name", ["brightness", "contrast", "saturation"])
    def test_huge_finite_factor_rejected(self, name):
        """Factors that would overflow the float pipeline are rejected, not wrapped."""
        source = PixelBuffer(1, 1, [255, 0, 0, 255])
        with pytest.raises(InvalidParameter, match=name) as excinfo:
            adjust(source, **{name: 1e308})
        assert excinfo.value.value == 1e308

    def test_upper_bound_is_accepted(self):
        source = PixelBuffer(1, 1, [255, 0, 0, 255])
        result = adjust(source, brightness=MAX_TONE_FACTOR)
        assert result.pixel(0, 0)[0] == 255

    def test_numpy_scalars_accepted(self, solid_frame):
        params = ToneParameters(brightness=np.float32(1.5), contrast=np.float64(1.0), saturation=np.int64(1))
        source = PixelBuffer(1, 1, [100, 100, 100, 255])
        assert adjust(source, params).pixel(0, 0)[0] == 150

    def test_bool_rejected(self):
        with pytest.raises(InvalidParameter, match="real number"):
            ToneParameters(brightness=True)

    def test_zero_saturation_is_valid(self, solid_frame):
        adjust(solid_frame(), saturation=0.0)

    def test_error_hierarchy(self):
        with pytest.raises(ToneError):
            ToneParameters(brightness=-0.5)
        with pytest.raises(ValueError):
            ToneParameters(brightness=-0.5)


class TestPipeline:
    """Numeric behavior of the tone curve."""

    def test_hand_computed_pixel(self):
        """
        brightness 1.2: (120, 180, 240)
        contrast 1.5:   (116, 206, 296)
        gray = 0.299*116 + 0.587*206 + 0.114*296 = 189.35
        saturation 0.5: (152.675, 197.675, 242.675)
        """
        source = PixelBuffer(1, 1, [100, 150, 200, 77])
        result = adjust(source, brightness=1.2, contrast=1.5, saturation=0.5)

        assert result.pixel(0, 0) == (153, 198, 243, 77)

    def test_brightness_only(self):
        source = PixelBuffer(1, 1, [10, 100, 200, 255])
        assert adjust(source, brightness=1.5).pixel(0, 0) == (15, 150, 255, 255)

    def test_contrast_around_mid_gray(self):
        source = PixelBuffer(1, 1, [128, 138, 10, 255])
        result = adjust(source, contrast=2.0)
        assert result.pixel(0, 0) == (128, 148, 0, 255)

    def test_zero_saturation_gives_luma_gray(self):
        source = PixelBuffer(1, 1, [255, 0, 0, 255])
        r, g, b, a = adjust(source, saturation=0.0).pixel(0, 0)
        assert r == g == b == 76  # 0.299 * 255 = 76.2
        assert a == 255

    def test_gray_pixels_unaffected_by_saturation(self, solid_frame):
        source = solid_frame(3, 3, (90, 90, 90, 255))
        assert adjust(source, saturation=3.0) == source

    def test_clamping(self):
        source = PixelBuffer(1, 2, [200, 200, 200, 255, 10, 10, 10, 255])
        result = adjust(source, brightness=2.0, contrast=2.0)

        assert result.pixel(0, 0)[:3] == (255, 255, 255)
        assert result.pixel(0, 1)[:3] == (0, 0, 0)

    def test_alpha_untouched(self, random_frames):
        (source,) = random_frames(n=1)
        result = adjust(source, brightness=0.7, contrast=1.4, saturation=1.8)
        np.testing.assert_array_equal(result.array[..., 3], source.array[..., 3])

    def test_source_not_modified(self, random_frames):
        (source,) = random_frames(n=1)
        before = source.to_bytes()
        adjust(source, brightness=1.3)
        assert source.to_bytes() == before


class TestNonAccumulating:
    """Re-applying to the original gives the same result every time."""

    def test_repeatable(self, random_frames):
        (source,) = random_frames(n=1)
        params = ToneParameters(brightness=1.1, contrast=0.9, saturation=1.3)

        assert adjust(source, params) == adjust(source, params)

    def test_chaining_differs_from_single_application(self):
        """Applying twice compounds; callers must re-derive from the original."""
        source = PixelBuffer(1, 1, [100, 100, 100, 255])
        once = adjust(source, brightness=1.5)
        twice = adjust(once, brightness=1.5)

        assert once.pixel(0, 0)[0] == 150
        assert twice.pixel(0, 0)[0] == 225
