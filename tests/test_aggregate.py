"""
Tests for the aggregate module.

Tests cover:
- Scalar reference semantics (rounding, even-count median)
- Row-block kernels agreeing with the scalar functions
"""

import numpy as np
import pytest

from framestack.aggregate import (
    aggregate_values,
    average_of,
    average_rows,
    maximum_of,
    maximum_rows,
    median_of,
    median_rows,
)
from framestack.config import AggregationMethod
from framestack.errors import EmptyFrameSet


class TestScalarAggregation:
    """Tests for per-sample aggregation semantics."""

    def test_three_samples(self):
        values = [10, 200, 100]
        assert average_of(values) == 103  # round(310 / 3)
        assert median_of(values) == 100
        assert maximum_of(values) == 200

    def test_even_median_rounds_half_up(self):
        assert median_of([50, 51]) == 51
        assert median_of([0, 1, 254, 255]) == 128  # (1 + 254) / 2 = 127.5

    def test_average_rounds_half_up(self):
        assert average_of([0, 1]) == 1
        assert average_of([2, 3]) == 3
        assert average_of([1, 1, 2]) == 1  # 1.33

    def test_median_with_duplicates(self):
        assert median_of([7, 7, 7, 1]) == 7
        assert median_of([5, 5, 9]) == 5

    def test_extremes_stay_in_range(self):
        assert average_of([255] * 50) == 255
        assert median_of([255, 255]) == 255
        assert average_of([0] * 10) == 0

    def test_uniform_input(self):
        for k in (0, 17, 128, 255):
            assert average_of([k] * 7) == k
            assert median_of([k] * 6) == k

    @pytest.mark.parametrize("func", [average_of, median_of, maximum_of])
    def test_empty_raises(self, func):
        with pytest.raises(EmptyFrameSet):
            func([])

    def test_dispatch_by_name(self):
        assert aggregate_values([1, 2, 9], "median") == 2
        assert aggregate_values([1, 2, 9], AggregationMethod.MAXIMUM) == 9
        assert aggregate_values([1, 2, 9], "Average") == 4

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown aggregation method"):
            aggregate_values([1], "mode")


class TestRowKernels:
    """Vectorised kernels must match the scalar definitions."""

    @pytest.mark.parametrize("n", [2, 3, 4, 7])
    @pytest.mark.parametrize(
        "kernel,scalar",
        [(average_rows, average_of), (median_rows, median_of), (maximum_rows, maximum_of)],
    )
    def test_matches_scalar(self, n, kernel, scalar):
        rng = np.random.default_rng(n)
        blocks = [rng.integers(0, 256, (3, 5, 4), dtype=np.uint8) for _ in range(n)]

        result = kernel(blocks)
        cube = np.stack(blocks)

        assert result.dtype == np.uint8
        assert result.shape == (3, 5, 4)
        for y in range(3):
            for x in range(5):
                for c in range(4):
                    assert result[y, x, c] == scalar(cube[:, y, x, c].tolist())

    def test_median_reuses_larger_scratch(self):
        """Scratch may have more rows than the block (last block of an image)."""
        blocks = [np.full((2, 3, 4), v, dtype=np.uint8) for v in (9, 1, 5)]
        scratch = np.empty((3, 8, 3, 4), dtype=np.uint8)

        result = median_rows(blocks, scratch)

        assert result.shape == (2, 3, 4)
        assert np.all(result == 5)

    def test_median_does_not_modify_inputs(self):
        blocks = [np.full((1, 2, 4), v, dtype=np.uint8) for v in (3, 1, 2)]
        median_rows(blocks)
        assert [b[0, 0, 0] for b in blocks] == [3, 1, 2]

    def test_average_large_frame_count(self):
        """Sums beyond uint8/uint16 range do not overflow."""
        blocks = [np.full((1, 1, 4), 255, dtype=np.uint8) for _ in range(300)]
        assert np.all(average_rows(blocks) == 255)

    def test_empty_raises(self):
        with pytest.raises(EmptyFrameSet):
            average_rows([])
        with pytest.raises(EmptyFrameSet):
            median_rows([])
        with pytest.raises(EmptyFrameSet):
            maximum_rows([])
