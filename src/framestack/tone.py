"""
Tone adjustment (brightness, contrast, saturation) for stacked composites.

The pipeline is applied per pixel to the RGB channels in a fixed order, each
step working on the result of the previous one:

1. brightness:  v = v * brightness
2. contrast:    v = 128 + (v - 128) * contrast
3. saturation:  gray = 0.299 R + 0.587 G + 0.114 B
                v = gray + (v - gray) * saturation

Values are rounded half up and clamped to [0, 255] only after the last step.
Alpha is copied unchanged.

Adjustments never accumulate: callers keep the original composite and call
:func:`adjust` on it afresh whenever parameters change.
"""

from __future__ import annotations

import logging

import numpy as np

from .buffer import PixelBuffer
from .config import ToneParameters

logger = logging.getLogger(__name__)

MID_GRAY = 128.0
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def apply_brightness(rgb: np.ndarray, brightness: float) -> np.ndarray:
    """Multiply channel values by ``brightness``."""
    return rgb * brightness


def apply_contrast(rgb: np.ndarray, contrast: float) -> np.ndarray:
    """Scale channel values around mid-gray."""
    return MID_GRAY + (rgb - MID_GRAY) * contrast


def apply_saturation(rgb: np.ndarray, saturation: float) -> np.ndarray:
    """Blend each pixel away from (or toward) its luma gray."""
    gray = (rgb @ LUMA_WEIGHTS)[..., np.newaxis]
    return gray + (rgb - gray) * saturation


def quantize(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp float channel values to uint8."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


class ToneProcessor:
    """
    Stateless tone curve bound to one set of parameters.

    Parameters
    ----------
    params : ToneParameters
        Validated adjustment factors.

    Examples
    --------
    >>> processor = ToneProcessor(ToneParameters(brightness=1.2, saturation=0.8))
    >>> preview = processor.apply(composite)
    """

    def __init__(self, params: ToneParameters | None = None):
        self.params = params if params is not None else ToneParameters()
        self.params.validate()

    def apply(self, source: PixelBuffer) -> PixelBuffer:
        """
        Return a new, adjusted copy of ``source``.

        Parameters
        ----------
        source : PixelBuffer
            The original composite (never a previously adjusted result).

        Returns
        -------
        PixelBuffer
            Buffer with the same dimensions; alpha identical to the source.
        """
        params = self.params
        if params.is_identity:
            return PixelBuffer._wrap(source.array.copy())

        logger.debug(
            "Adjusting %dx%d: brightness=%.3f contrast=%.3f saturation=%.3f",
            source.width, source.height,
            params.brightness, params.contrast, params.saturation,
        )

        rgb = source.array[..., :3].astype(np.float64)
        rgb = apply_brightness(rgb, params.brightness)
        rgb = apply_contrast(rgb, params.contrast)
        rgb = apply_saturation(rgb, params.saturation)

        out = np.empty_like(source.array)
        out[..., :3] = quantize(rgb)
        out[..., 3] = source.array[..., 3]
        return PixelBuffer._wrap(out)


def adjust(
    source: PixelBuffer,
    params: ToneParameters | None = None,
    *,
    brightness: float = 1.0,
    contrast: float = 1.0,
    saturation: float = 1.0,
) -> PixelBuffer:
    """
    Apply brightness, contrast and saturation to a composite.

    Either pass a :class:`ToneParameters` or the individual factors.

    Parameters
    ----------
    source : PixelBuffer
        Original stacked composite.
    params : ToneParameters, optional
        Adjustment factors; overrides the keyword factors when given.
    brightness : float, default 1.0
        Must be > 0.
    contrast : float, default 1.0
        Must be > 0.
    saturation : float, default 1.0
        Must be >= 0.

    Returns
    -------
    PixelBuffer

    Raises
    ------
    InvalidParameter
        If a factor is outside its domain or not finite.
    """
    if params is None:
        params = ToneParameters(brightness=brightness, contrast=contrast, saturation=saturation)
    return ToneProcessor(params).apply(source)
