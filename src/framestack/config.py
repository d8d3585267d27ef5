"""
Configuration dataclasses for the framestack pipeline.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from enum import Enum

from .errors import InvalidParameter

# Upper bound for every tone factor. Larger values overflow float64 in the
# brightness/contrast/saturation chain and would turn channels into NaN.
MAX_TONE_FACTOR = 1e3


class AggregationMethod(Enum):
    """Per-pixel, per-channel combination method."""

    AVERAGE = "average"  # Rounded arithmetic mean
    MEDIAN = "median"  # Middle value, midpoint of the two middle values for even n
    MAXIMUM = "maximum"  # Brightest sample

    @classmethod
    def parse(cls, value: str | AggregationMethod) -> AggregationMethod:
        """
        Resolve a method from its name or return it unchanged.

        Raises
        ------
        ValueError
            If the name is not a known method.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown aggregation method {value!r} (choose from {choices})") from None


@dataclass(frozen=True)
class ToneParameters:
    """
    Multiplicative tone adjustment factors.

    All factors default to 1.0 (identity). Parameters are supplied per call
    and are never stored inside a pixel buffer.
    """

    brightness: float = 1.0
    """Channel gain, must be in (0, MAX_TONE_FACTOR]."""

    contrast: float = 1.0
    """Scale around mid-gray (128), must be in (0, MAX_TONE_FACTOR]."""

    saturation: float = 1.0
    """Blend factor away from luma gray, must be in [0, MAX_TONE_FACTOR] (0 = grayscale)."""

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate parameters, raising InvalidParameter on the first bad value."""
        for name in ("brightness", "contrast", "saturation"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameter(name, value, "must be a real number")
            if not math.isfinite(value):
                raise InvalidParameter(name, value, "must be finite")
            if value > MAX_TONE_FACTOR:
                raise InvalidParameter(name, value, f"must be <= {MAX_TONE_FACTOR:g}")
        if self.brightness <= 0:
            raise InvalidParameter("brightness", self.brightness, "must be > 0")
        if self.contrast <= 0:
            raise InvalidParameter("contrast", self.contrast, "must be > 0")
        if self.saturation < 0:
            raise InvalidParameter("saturation", self.saturation, "must be >= 0")

    @property
    def is_identity(self) -> bool:
        """True when applying these parameters leaves every pixel unchanged."""
        return self.brightness == 1.0 and self.contrast == 1.0 and self.saturation == 1.0


@dataclass
class StackConfig:
    """
    Configuration for a stacking run.

    All parameters are explicitly documented and have sensible defaults.
    """

    method: AggregationMethod = AggregationMethod.AVERAGE
    """Aggregation method applied to every pixel channel."""

    chunk_rows: int = 64
    """Rows processed between progress reports and cancellation checks."""

    def __post_init__(self) -> None:
        self.method = AggregationMethod.parse(self.method)

    def validate(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.chunk_rows, bool) or not isinstance(self.chunk_rows, int):
            raise ValueError(f"chunk_rows must be an integer, got {self.chunk_rows!r}")
        if self.chunk_rows < 1:
            raise ValueError(f"chunk_rows must be >= 1, got {self.chunk_rows}")


@dataclass
class StackResult:
    """
    Record of a command-line stacking run.

    Contains all information needed to understand and reproduce the result.
    """

    # --- Frame accounting ---
    inputs: list[str] = field(default_factory=list)
    """Frame files, in capture order."""

    width: int = 0
    height: int = 0

    # --- Processing ---
    config: StackConfig | None = None
    """Configuration used for this run."""

    tone: ToneParameters | None = None
    """Tone parameters applied to the exported variant (None if identity)."""

    # --- Outputs ---
    outputs: dict[str, str] = field(default_factory=dict)
    """Map of output type to path (e.g., 'composite' -> '/path/to/stack.png')."""

    # --- Statistics ---
    stats: dict[str, float] = field(default_factory=dict)
    """Timing and summary values (e.g., 'stack_time_s', 'mean_luma')."""

    # --- Metadata ---
    version: str = ""
    """Library version."""

    timestamp: str = ""
    """ISO format timestamp of run completion."""

    platform: str = ""
    """Platform information."""
