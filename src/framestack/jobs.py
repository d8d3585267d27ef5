"""
Background stacking jobs.

Runs a stacking call on a worker thread so a host application (capture loop,
UI event loop) stays responsive. Each job owns its cancellation token and
reports the latest progress fraction.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor

from .buffer import FrameSet, PixelBuffer
from .config import AggregationMethod
from .stack import CancellationToken, ProgressCallback, StackingEngine
from .errors import StackCancelled

logger = logging.getLogger(__name__)


class StackJob:
    """
    Handle on a stacking call running in the background.

    Not constructed directly; use :func:`submit_stack`.
    """

    def __init__(self, method: AggregationMethod, n_frames: int):
        self.method = method
        self.n_frames = n_frames
        self.token = CancellationToken()
        self._progress = 0.0
        self._lock = threading.Lock()
        self._future: Future | None = None

    def _report(self, fraction: float) -> None:
        with self._lock:
            self._progress = fraction

    @property
    def progress(self) -> float:
        """Fraction of rows completed, in [0, 1]."""
        with self._lock:
            return self._progress

    def cancel(self) -> None:
        """Request cancellation. The job stops at its next row checkpoint."""
        logger.debug("Cancelling %s stack job (%d frames)", self.method.value, self.n_frames)
        self.token.cancel()
        if self._future is not None:
            self._future.cancel()

    @property
    def cancelled(self) -> bool:
        """
        True if the job was stopped by a cancellation request.

        A request that arrives after the job already produced its composite
        does not count; while the job is still running, a pending request
        reports True.
        """
        if not self.token.cancelled:
            return False
        future = self._future
        if future is None or not future.done() or future.cancelled():
            return True
        return isinstance(future.exception(), StackCancelled)

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> PixelBuffer:
        """
        Wait for and return the composite.

        Parameters
        ----------
        timeout : float, optional
            Seconds to wait. On expiry ``TimeoutError`` is raised and the job
            keeps running; call :meth:`cancel` to stop it.

        Raises
        ------
        StackCancelled
            If the job was cancelled before completing.
        TimeoutError
            If the result is not available within ``timeout``.
        """
        try:
            return self._future.result(timeout)
        except CancelledError:
            raise StackCancelled() from None


def submit_stack(
    frames: FrameSet | Sequence[PixelBuffer],
    method: AggregationMethod | str = AggregationMethod.AVERAGE,
    *,
    executor: Executor | None = None,
    chunk_rows: int = 64,
    progress: ProgressCallback | None = None,
) -> StackJob:
    """
    Start stacking ``frames`` on a worker thread.

    Frames are validated before the job is submitted, so EmptyFrameSet and
    DimensionMismatch are raised here rather than from :meth:`StackJob.result`.

    Parameters
    ----------
    frames : FrameSet or sequence of PixelBuffer
        Frames to combine.
    method : AggregationMethod or str, default "average"
        Combination method.
    executor : concurrent.futures.Executor, optional
        Executor to run on. A single-thread executor is created if omitted.
    chunk_rows : int, default 64
        Rows per processing block (progress / cancellation granularity).
    progress : callable, optional
        Also called with the progress fraction, from the worker thread.

    Returns
    -------
    StackJob
    """
    frameset = FrameSet.build(frames)
    method = AggregationMethod.parse(method)
    engine = StackingEngine(chunk_rows=chunk_rows)
    job = StackJob(method, len(frameset))

    def _on_progress(fraction: float) -> None:
        job._report(fraction)
        if progress is not None:
            progress(fraction)

    def _run() -> PixelBuffer:
        return engine.stack(frameset, method, progress=_on_progress, cancel=job.token)

    if executor is None:
        owned = ThreadPoolExecutor(max_workers=1, thread_name_prefix="framestack")
        job._future = owned.submit(_run)
        owned.shutdown(wait=False)
    else:
        job._future = executor.submit(_run)

    logger.info("Submitted %s stack job for %d frames", method.value, len(frameset))
    return job
