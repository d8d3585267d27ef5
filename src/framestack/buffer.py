"""
Pixel buffers and frame sets.

A PixelBuffer is an immutable RGBA raster with 8 bits per channel, stored
row-major as a read-only numpy array of shape (height, width, 4). Flat index
of channel c of pixel (x, y) is ``(y * width + x) * 4 + c``.

A FrameSet is an ordered, non-empty collection of PixelBuffers sharing the
same dimensions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np

from .errors import DimensionMismatch, EmptyFrameSet, InvalidBuffer

logger = logging.getLogger(__name__)

N_CHANNELS = 4


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


class PixelBuffer:
    """
    Immutable RGBA8 raster.

    Parameters
    ----------
    width, height : int
        Dimensions in pixels, both > 0.
    channels : bytes, sequence of int, or np.ndarray
        Flat channel values in row-major RGBA order, length width*height*4,
        each in [0, 255]. The data is copied.

    Raises
    ------
    InvalidBuffer
        If the dimensions or the channel data are inconsistent.

    Examples
    --------
    >>> buf = PixelBuffer(1, 1, [10, 20, 30, 255])
    >>> buf.pixel(0, 0)
    (10, 20, 30, 255)
    """

    __slots__ = ("_data",)

    def __init__(self, width: int, height: int, channels):
        width = _check_dimension("width", width)
        height = _check_dimension("height", height)
        expected = width * height * N_CHANNELS

        if isinstance(channels, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(bytes(channels), dtype=np.uint8)
        else:
            flat = _to_uint8(np.asarray(channels).reshape(-1))

        if flat.size != expected:
            raise InvalidBuffer(
                f"Expected {expected} channel values for {width}x{height}, got {flat.size}"
            )
        self._data = _readonly(flat.reshape(height, width, N_CHANNELS).copy())

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        """
        Build a buffer from an (H, W, 4) array of channel values.

        The array is copied; later changes to it do not affect the buffer.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != N_CHANNELS:
            raise InvalidBuffer(f"Expected array of shape (H, W, 4), got {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def filled(cls, width: int, height: int, rgba: Sequence[int]) -> PixelBuffer:
        """Build a buffer with every pixel set to the same RGBA value."""
        if len(rgba) != N_CHANNELS:
            raise InvalidBuffer(f"Expected 4 channel values, got {len(rgba)}")
        width = _check_dimension("width", width)
        height = _check_dimension("height", height)
        pixel = _to_uint8(np.asarray(rgba))
        return cls(width, height, np.tile(pixel, width * height))

    @classmethod
    def _wrap(cls, array: np.ndarray) -> PixelBuffer:
        """Take ownership of a freshly computed uint8 array without copying."""
        buf = cls.__new__(cls)
        buf._data = _readonly(array)
        return buf

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)."""
        return self.width, self.height

    @property
    def array(self) -> np.ndarray:
        """Read-only (H, W, 4) uint8 view."""
        return self._data

    @property
    def channels(self) -> np.ndarray:
        """Read-only flat uint8 view in row-major RGBA order."""
        return self._data.reshape(-1)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (r, g, b, a) values of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        r, g, b, a = (int(v) for v in self._data[y, x])
        return r, g, b, a

    def to_bytes(self) -> bytes:
        """Channel data as raw RGBA bytes."""
        return self._data.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._data.shape == other._data.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidBuffer(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidBuffer(f"{name} must be > 0, got {value}")
    return int(value)


def _to_uint8(values: np.ndarray) -> np.ndarray:
    """Convert channel values to uint8, rejecting anything outside [0, 255]."""
    if values.dtype == np.uint8:
        return values
    if values.size == 0:
        return values.astype(np.uint8)
    if values.dtype.kind == "b" or values.dtype.kind not in "iuf":
        raise InvalidBuffer(f"Channel values must be numeric, got dtype {values.dtype}")
    if values.dtype.kind == "f" and not np.all(np.isfinite(values)):
        raise InvalidBuffer("Channel values must be finite")
    if values.min() < 0 or values.max() > 255:
        raise InvalidBuffer(
            f"Channel values must be in [0, 255], got range [{values.min()}, {values.max()}]"
        )
    if values.dtype.kind == "f" and not np.array_equal(values, np.floor(values)):
        raise InvalidBuffer("Channel values must be integers")
    return values.astype(np.uint8)


class FrameSet:
    """
    Ordered collection of same-size frames to combine.

    Use :meth:`build` to construct; it validates that the set is non-empty and
    that every frame matches the dimensions of the first one. Capture order is
    preserved but does not affect any aggregation result.
    """

    __slots__ = ("_frames",)

    def __init__(self, frames: tuple[PixelBuffer, ...]):
        self._frames = frames

    @classmethod
    def build(cls, frames: Sequence[PixelBuffer]) -> FrameSet:
        """
        Validate frames and build a FrameSet.

        Parameters
        ----------
        frames : sequence of PixelBuffer
            Frames in capture order.

        Returns
        -------
        FrameSet

        Raises
        ------
        EmptyFrameSet
            If no frames are given.
        DimensionMismatch
            For the first frame whose size differs from frame 0.
        InvalidBuffer
            If an element is not a PixelBuffer.
        """
        if isinstance(frames, FrameSet):
            return frames

        frames = tuple(frames)
        if len(frames) == 0:
            raise EmptyFrameSet()

        for i, frame in enumerate(frames):
            if not isinstance(frame, PixelBuffer):
                raise InvalidBuffer(f"Frame {i} is not a PixelBuffer: {type(frame).__name__}")

        expected = frames[0].size
        for i, frame in enumerate(frames[1:], start=1):
            if frame.size != expected:
                raise DimensionMismatch(i, expected, frame.size)

        logger.debug("Built frame set: %d frames of %dx%d", len(frames), *expected)
        return cls(frames)

    @property
    def width(self) -> int:
        return self._frames[0].width

    @property
    def height(self) -> int:
        return self._frames[0].height

    @property
    def frames(self) -> tuple[PixelBuffer, ...]:
        return self._frames

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> PixelBuffer:
        return self._frames[index]

    def __iter__(self) -> Iterator[PixelBuffer]:
        return iter(self._frames)

    def __repr__(self) -> str:
        if not self._frames:
            return "FrameSet(empty)"
        return f"FrameSet({len(self._frames)} x {self.width}x{self.height})"


def build_frameset(frames: Sequence[PixelBuffer]) -> FrameSet:
    """Validate frames and build a FrameSet. See :meth:`FrameSet.build`."""
    return FrameSet.build(frames)
