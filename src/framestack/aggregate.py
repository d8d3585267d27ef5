"""
Aggregation methods for frame stacking.

Each method combines the n samples of one pixel channel into a single 8-bit
value:

- average: sum / n, rounded half up
- median: middle sample of the sorted values; for even n, the midpoint of the
  two middle samples rounded half up
- maximum: largest sample

The scalar functions (``average_of``, ``median_of``, ``maximum_of``) define
the semantics on a plain list of samples. The ``*_rows`` kernels apply the
same arithmetic to a block of rows from every frame at once and are what the
stacking engine uses.

All arithmetic is exact integer arithmetic; results always lie in [0, 255].
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from .config import AggregationMethod
from .errors import EmptyFrameSet

logger = logging.getLogger(__name__)


def _round_half_up_div(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with ties going up, for non-negative ints."""
    return (2 * numerator + denominator) // (2 * denominator)


def average_of(values: Sequence[int]) -> int:
    """
    Rounded mean of channel samples.

    >>> average_of([10, 200, 100])
    103
    """
    if len(values) == 0:
        raise EmptyFrameSet("Cannot aggregate zero samples")
    return _round_half_up_div(sum(int(v) for v in values), len(values))


def median_of(values: Sequence[int]) -> int:
    """
    Median of channel samples, midpoint rounded half up for even counts.

    >>> median_of([50, 51])
    51
    """
    n = len(values)
    if n == 0:
        raise EmptyFrameSet("Cannot aggregate zero samples")
    ordered = sorted(int(v) for v in values)
    mid = n // 2
    if n % 2:
        return ordered[mid]
    return _round_half_up_div(ordered[mid - 1] + ordered[mid], 2)


def maximum_of(values: Sequence[int]) -> int:
    """Largest channel sample."""
    if len(values) == 0:
        raise EmptyFrameSet("Cannot aggregate zero samples")
    return max(int(v) for v in values)


_SCALAR = {
    AggregationMethod.AVERAGE: average_of,
    AggregationMethod.MEDIAN: median_of,
    AggregationMethod.MAXIMUM: maximum_of,
}


def aggregate_values(values: Sequence[int], method: AggregationMethod | str) -> int:
    """
    Combine the samples of one pixel channel with the given method.

    Parameters
    ----------
    values : sequence of int
        Samples in [0, 255], one per frame.
    method : AggregationMethod or str
        Combination method.

    Returns
    -------
    int
        Combined value in [0, 255].
    """
    return _SCALAR[AggregationMethod.parse(method)](values)


# ---------------------------------------------------------------------------
# Row-block kernels
# ---------------------------------------------------------------------------


def average_rows(blocks: Sequence[np.ndarray]) -> np.ndarray:
    """
    Rounded mean of a row block across frames.

    Accumulates frame by frame into a single integer sum, so memory does not
    grow with the number of frames.

    Parameters
    ----------
    blocks : sequence of np.ndarray
        One uint8 array of shape (rows, width, 4) per frame.

    Returns
    -------
    np.ndarray
        uint8 array of shape (rows, width, 4).
    """
    n = len(blocks)
    if n == 0:
        raise EmptyFrameSet()
    total = np.zeros(blocks[0].shape, dtype=np.uint64)
    for block in blocks:
        total += block
    return ((2 * total + n) // (2 * n)).astype(np.uint8)


def maximum_rows(blocks: Sequence[np.ndarray]) -> np.ndarray:
    """Per-channel maximum of a row block across frames (running maximum)."""
    if len(blocks) == 0:
        raise EmptyFrameSet()
    result = blocks[0].copy()
    for block in blocks[1:]:
        np.maximum(result, block, out=result)
    return result


def median_rows(blocks: Sequence[np.ndarray], scratch: np.ndarray | None = None) -> np.ndarray:
    """
    Per-channel median of a row block across frames.

    Parameters
    ----------
    blocks : sequence of np.ndarray
        One uint8 array of shape (rows, width, 4) per frame.
    scratch : np.ndarray, optional
        Reusable uint8 work array of shape (n, >=rows, width, 4). Filled and
        sorted in place along the frame axis. Allocated if not given.

    Returns
    -------
    np.ndarray
        uint8 array of shape (rows, width, 4).
    """
    n = len(blocks)
    if n == 0:
        raise EmptyFrameSet()
    rows = blocks[0].shape[0]

    if scratch is None:
        scratch = np.empty((n,) + blocks[0].shape, dtype=np.uint8)
    work = scratch[:, :rows]
    for i, block in enumerate(blocks):
        work[i] = block
    work.sort(axis=0)

    mid = n // 2
    if n % 2:
        return work[mid].copy()
    pair_sum = work[mid - 1].astype(np.uint16) + work[mid]
    return ((pair_sum + 1) // 2).astype(np.uint8)


def allocate_median_scratch(n_frames: int, rows: int, width: int) -> np.ndarray:
    """Allocate the work array reused by :func:`median_rows` across row blocks."""
    logger.debug(
        "Allocating median scratch: %d frames x %d rows x %d px (%.1f MB)",
        n_frames, rows, width, n_frames * rows * width * 4 / 1024**2,
    )
    return np.empty((n_frames, rows, width, 4), dtype=np.uint8)
