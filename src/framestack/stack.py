"""
Frame stacking engine.

Combines a FrameSet into one composite PixelBuffer using a per-pixel,
per-channel aggregation method (average, median, maximum).

Designed for memory efficiency with many large frames: the image is processed
in horizontal blocks of ``chunk_rows`` rows. Average and maximum keep one
running accumulator per block regardless of frame count; median reuses a
single scratch array across all blocks, with the block height shrunk so the
scratch stays under a byte budget.

Progress is reported and cancellation is polled at every block boundary.
A cancelled call raises StackCancelled and never returns a partial buffer.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence

import numpy as np

from .aggregate import allocate_median_scratch, average_rows, maximum_rows, median_rows
from .buffer import FrameSet, PixelBuffer
from .config import AggregationMethod, StackConfig
from .errors import EmptyFrameSet, StackCancelled

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

MEDIAN_SCRATCH_BYTES = 256 * 1024**2


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and a stacking call.

    Thread-safe: ``cancel()`` may be called from any thread; the engine
    observes it at its next row-block checkpoint.

    Examples
    --------
    >>> token = CancellationToken()
    >>> token.cancel()
    >>> token.cancelled
    True
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, rows_done: int = 0, height: int = 0) -> None:
        """Raise StackCancelled if cancellation was requested."""
        if self._event.is_set():
            raise StackCancelled(rows_done, height)


class StackingEngine:
    """
    Stateless stacking engine.

    Parameters
    ----------
    chunk_rows : int, default 64
        Rows per block. Smaller blocks mean more frequent progress updates
        and cancellation checks; the result does not depend on it.
    max_scratch_bytes : int, default MEDIAN_SCRATCH_BYTES
        Ceiling on the median scratch array. For wide images or many frames
        the median block is shrunk to fit, down to a single row, so the
        scratch never exceeds max(max_scratch_bytes, n_frames * width * 4).

    Examples
    --------
    >>> engine = StackingEngine(chunk_rows=32)
    >>> composite = engine.stack(frameset, AggregationMethod.MEDIAN)
    """

    def __init__(self, chunk_rows: int = 64, max_scratch_bytes: int | None = None):
        StackConfig(chunk_rows=chunk_rows).validate()
        if max_scratch_bytes is None:
            max_scratch_bytes = MEDIAN_SCRATCH_BYTES
        if isinstance(max_scratch_bytes, bool) or not isinstance(max_scratch_bytes, int):
            raise ValueError(f"max_scratch_bytes must be an integer, got {max_scratch_bytes!r}")
        if max_scratch_bytes < 1:
            raise ValueError(f"max_scratch_bytes must be >= 1, got {max_scratch_bytes}")
        self.chunk_rows = chunk_rows
        self.max_scratch_bytes = max_scratch_bytes

    @classmethod
    def from_config(cls, config: StackConfig) -> StackingEngine:
        config.validate()
        return cls(chunk_rows=config.chunk_rows)

    def stack(
        self,
        frameset: FrameSet | Sequence[PixelBuffer],
        method: AggregationMethod | str = AggregationMethod.AVERAGE,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> PixelBuffer:
        """
        Combine all frames into one composite.

        Parameters
        ----------
        frameset : FrameSet or sequence of PixelBuffer
            Frames to combine; a plain sequence is validated first.
        method : AggregationMethod or str
            Combination method.
        progress : callable, optional
            Called with the fraction of rows completed after every block.
        cancel : CancellationToken, optional
            Polled before every block.

        Returns
        -------
        PixelBuffer
            Composite with the dimensions of the input frames.

        Raises
        ------
        EmptyFrameSet
            If the frame set has no frames.
        DimensionMismatch
            If a plain sequence holds frames of different sizes.
        StackCancelled
            If cancellation was requested before the last block completed.
        """
        frameset = FrameSet.build(frameset)
        method = AggregationMethod.parse(method)
        if len(frameset) == 0:
            raise EmptyFrameSet()

        n_frames = len(frameset)
        height, width = frameset.height, frameset.width
        chunk_rows = min(self.chunk_rows, height)
        if method is AggregationMethod.MEDIAN and n_frames > 1:
            rows_fit = max(1, self.max_scratch_bytes // (n_frames * width * 4))
            chunk_rows = min(chunk_rows, rows_fit)
        n_chunks = (height + chunk_rows - 1) // chunk_rows

        logger.info(
            "Stacking %d frames (%dx%d) with method=%s, chunk_rows=%d",
            n_frames, width, height, method.value, chunk_rows,
        )
        t0 = time.perf_counter()

        arrays = [frame.array for frame in frameset]
        scratch = None
        if method is AggregationMethod.MEDIAN and n_frames > 1:
            scratch = allocate_median_scratch(n_frames, chunk_rows, width)

        stacked = np.empty((height, width, 4), dtype=np.uint8)

        for chunk_idx in range(n_chunks):
            row_start = chunk_idx * chunk_rows
            row_end = min(row_start + chunk_rows, height)

            if cancel is not None:
                cancel.raise_if_cancelled(row_start, height)

            if chunk_idx % 10 == 0:
                logger.debug(
                    "Processing chunk %d/%d (rows %d-%d)",
                    chunk_idx + 1, n_chunks, row_start, row_end - 1,
                )

            blocks = [a[row_start:row_end] for a in arrays]
            stacked[row_start:row_end] = self._combine(blocks, method, scratch)

            if progress is not None:
                progress(row_end / height)

        logger.info(
            "Stack complete: %d frames, method=%s in %.3fs",
            n_frames, method.value, time.perf_counter() - t0,
        )
        return PixelBuffer._wrap(stacked)

    @staticmethod
    def _combine(
        blocks: Sequence[np.ndarray],
        method: AggregationMethod,
        scratch: np.ndarray | None,
    ) -> np.ndarray:
        if len(blocks) == 1:
            return blocks[0]
        if method is AggregationMethod.AVERAGE:
            return average_rows(blocks)
        if method is AggregationMethod.MEDIAN:
            return median_rows(blocks, scratch)
        return maximum_rows(blocks)


def stack(
    frames: FrameSet | Sequence[PixelBuffer],
    method: AggregationMethod | str = AggregationMethod.AVERAGE,
    *,
    progress: ProgressCallback | None = None,
    cancel: CancellationToken | None = None,
    chunk_rows: int = 64,
) -> PixelBuffer:
    """
    Stack frames into one composite.

    Convenience wrapper that validates ``frames`` into a FrameSet (if needed)
    and runs a :class:`StackingEngine`.

    Parameters
    ----------
    frames : FrameSet or sequence of PixelBuffer
        Frames in capture order.
    method : AggregationMethod or str, default "average"
        "average", "median" or "maximum".
    progress : callable, optional
        Receives the fraction of rows completed.
    cancel : CancellationToken, optional
        Cooperative cancellation flag.
    chunk_rows : int, default 64
        Rows per processing block.

    Returns
    -------
    PixelBuffer

    Raises
    ------
    EmptyFrameSet, DimensionMismatch, StackCancelled
    """
    frameset = FrameSet.build(frames)
    return StackingEngine(chunk_rows=chunk_rows).stack(
        frameset, method, progress=progress, cancel=cancel
    )
