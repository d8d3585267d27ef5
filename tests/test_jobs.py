"""
Tests for the jobs module (background stacking).
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from framestack.errors import DimensionMismatch, StackCancelled
from framestack.jobs import submit_stack
from framestack.stack import stack


class TestStackJob:
    """Tests for running stacking on a worker thread."""

    def test_result_matches_direct_call(self, random_frames):
        frames = random_frames(n=4)
        job = submit_stack(frames, "median", chunk_rows=3)

        assert job.result(timeout=10) == stack(frames, "median")
        assert job.done()
        assert job.progress == pytest.approx(1.0)

    def test_validation_is_synchronous(self, solid_frame):
        with pytest.raises(DimensionMismatch):
            submit_stack([solid_frame(2, 2), solid_frame(3, 3)])

    def test_cancel_while_running(self, random_frames):
        frames = random_frames(n=3, width=4, height=4)
        reached = threading.Event()
        release = threading.Event()

        def progress(fraction):
            reached.set()
            release.wait(5)

        job = submit_stack(frames, "average", chunk_rows=1, progress=progress)
        assert reached.wait(5)
        job.cancel()
        release.set()

        with pytest.raises(StackCancelled):
            job.result(timeout=5)
        assert job.cancelled
        assert job.progress == pytest.approx(0.25)

    def test_cancel_before_start(self, random_frames):
        frames = random_frames(n=2)
        gate = threading.Event()

        with ThreadPoolExecutor(max_workers=1) as executor:
            executor.submit(gate.wait, 5)
            job = submit_stack(frames, "maximum", executor=executor)
            job.cancel()
            gate.set()

            with pytest.raises(StackCancelled):
                job.result(timeout=5)

    def test_timeout(self, random_frames):
        frames = random_frames(n=2, width=2, height=2)
        release = threading.Event()

        job = submit_stack(frames, "average", chunk_rows=1, progress=lambda f: release.wait(5))
        with pytest.raises(TimeoutError):
            job.result(timeout=0.05)

        job.cancel()
        release.set()
        with pytest.raises(StackCancelled):
            job.result(timeout=5)

    def test_cancel_after_completion(self, random_frames):
        """A late cancel does not mark a finished job as cancelled."""
        frames = random_frames(n=2)
        job = submit_stack(frames, "average")
        expected = job.result(timeout=10)

        job.cancel()

        assert not job.cancelled
        assert job.result() == expected
