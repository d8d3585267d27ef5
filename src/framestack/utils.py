"""
Utility functions for framestack.

Includes:
- Version info
- Platform / timestamp helpers
- Output naming and duration formatting
"""

from __future__ import annotations

import platform
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

__version__ = "0.3.0"


def get_version() -> str:
    """Return the library version string."""
    return __version__


def get_platform_info() -> str:
    """Return platform information string."""
    return f"{platform.system()} {platform.release()} / Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"


def get_timestamp_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def default_output_name(method: str, timestamp_ms: int | None = None) -> str:
    """
    Build the default file name of a stacked composite.

    Parameters
    ----------
    method : str
        Aggregation method name (e.g. "median").
    timestamp_ms : int, optional
        Epoch milliseconds. Defaults to the current time.

    Returns
    -------
    str
        Name like ``astro-stacked-median-1760745600000.png``.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"astro-stacked-{method}-{timestamp_ms}.png"


def adjusted_path(path: Path) -> Path:
    """Return the sibling path used for the tone-adjusted variant of an output."""
    return path.with_name(f"{path.stem}-adjusted{path.suffix}")


def format_duration(seconds: float) -> str:
    """
    Format duration in human-readable form.

    Parameters
    ----------
    seconds : float
        Duration in seconds.

    Returns
    -------
    str
        Formatted string like "2h 15m 30s" or "45.2s".
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs:.0f}s"
