"""
Exception hierarchy for framestack.

Every failure of the stacking engine and the tone processor is surfaced as a
typed exception. Validation errors also derive from ``ValueError`` so callers
that only care about "bad input" can catch that.
"""

from __future__ import annotations


class FrameStackError(Exception):
    """Base class for all framestack errors."""


class InvalidBuffer(FrameStackError, ValueError):
    """A pixel buffer could not be constructed from the supplied data."""


class StackingError(FrameStackError):
    """Base class for errors raised while building or stacking a frame set."""


class EmptyFrameSet(StackingError, ValueError):
    """Stacking was requested with no frames."""

    def __init__(self, message: str = "Empty frame list"):
        super().__init__(message)


class DimensionMismatch(StackingError, ValueError):
    """A frame does not have the dimensions of the first frame."""

    def __init__(self, index: int, expected: tuple[int, int], actual: tuple[int, int]):
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame {index} is {actual[0]}x{actual[1]}, "
            f"expected {expected[0]}x{expected[1]}"
        )


class StackCancelled(StackingError):
    """A stacking call was cancelled before it completed.

    Not a failure of the inputs: no composite is produced and the same call
    may be issued again.
    """

    def __init__(self, rows_done: int = 0, height: int = 0):
        self.rows_done = rows_done
        self.height = height
        super().__init__(f"Stacking cancelled after {rows_done}/{height} rows")


class ToneError(FrameStackError):
    """Base class for tone adjustment errors."""


class InvalidParameter(ToneError, ValueError):
    """A tone parameter is outside its documented domain."""

    def __init__(self, name: str, value: float, constraint: str = ""):
        self.name = name
        self.value = value
        detail = f" ({constraint})" if constraint else ""
        super().__init__(f"Invalid {name}: {value!r}{detail}")
