"""
framestack - Frame stacking and tone adjustment.

Combines N equally-sized RGBA frames into one composite by per-pixel,
per-channel aggregation (average, median or maximum), then applies a
brightness / contrast / saturation tone curve to the composite.

Example
-------
>>> from framestack import PixelBuffer, stack, adjust
>>> frames = [PixelBuffer.filled(4, 4, (v, v, v, 255)) for v in (10, 200, 100)]
>>> composite = stack(frames, "median")
>>> composite.pixel(0, 0)
(100, 100, 100, 255)
>>> preview = adjust(composite, brightness=1.2, contrast=1.1)

Example (background job)
------------------------
>>> job = submit_stack(frames, "average", chunk_rows=16)
>>> job.cancel()  # from the UI thread; job.result() then raises StackCancelled
"""

from .config import AggregationMethod, StackConfig, StackResult, ToneParameters
from .errors import (
    DimensionMismatch,
    EmptyFrameSet,
    FrameStackError,
    InvalidBuffer,
    InvalidParameter,
    StackCancelled,
    StackingError,
    ToneError,
)
from .utils import __version__

# Data model
from .buffer import FrameSet, PixelBuffer, build_frameset

# Aggregation
from .aggregate import aggregate_values, average_of, maximum_of, median_of

# Stacking
from .stack import CancellationToken, StackingEngine, stack

# Tone adjustment
from .tone import ToneProcessor, adjust

# Background jobs
from .jobs import StackJob, submit_stack

# I/O functions
from .io import list_frames, read_frame, write_frame

__all__ = [
    # Version
    "__version__",
    # Config
    "AggregationMethod",
    "StackConfig",
    "StackResult",
    "ToneParameters",
    # Errors
    "FrameStackError",
    "InvalidBuffer",
    "StackingError",
    "EmptyFrameSet",
    "DimensionMismatch",
    "StackCancelled",
    "ToneError",
    "InvalidParameter",
    # Data model
    "PixelBuffer",
    "FrameSet",
    "build_frameset",
    # Aggregation
    "aggregate_values",
    "average_of",
    "median_of",
    "maximum_of",
    # Stacking
    "CancellationToken",
    "StackingEngine",
    "stack",
    # Tone
    "ToneProcessor",
    "adjust",
    # Jobs
    "StackJob",
    "submit_stack",
    # I/O
    "list_frames",
    "read_frame",
    "write_frame",
]
