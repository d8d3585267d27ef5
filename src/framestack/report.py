"""
Report generation for framestack runs.

Produces a machine-readable ``<output>.json`` manifest next to the
composite, recording inputs, method, tone parameters, outputs and timing.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

import numpy as np

from .buffer import PixelBuffer
from .config import StackConfig, StackResult, ToneParameters
from .tone import LUMA_WEIGHTS
from .utils import get_platform_info, get_timestamp_iso, get_version

logger = logging.getLogger(__name__)


def _to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: _to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_native(v) for v in obj]
    return obj


def _serialize_config(config: StackConfig) -> dict[str, Any]:
    """Serialize StackConfig to JSON-compatible dict."""
    return {
        "method": config.method.value,
        "chunk_rows": config.chunk_rows,
    }


def _serialize_tone(tone: ToneParameters | None) -> dict[str, float] | None:
    return asdict(tone) if tone is not None else None


def buffer_statistics(buffer: PixelBuffer) -> dict[str, float]:
    """
    Summary statistics of a composite.

    Returns
    -------
    dict
        Per-channel means ('mean_r', 'mean_g', 'mean_b', 'mean_a') and the
        mean Rec.601 luma ('mean_luma').
    """
    data = buffer.array.astype(np.float64)
    means = data.reshape(-1, 4).mean(axis=0)
    luma = float((data[..., :3] @ LUMA_WEIGHTS).mean())
    return {
        "mean_r": float(means[0]),
        "mean_g": float(means[1]),
        "mean_b": float(means[2]),
        "mean_a": float(means[3]),
        "mean_luma": luma,
    }


def build_manifest(result: StackResult) -> dict[str, Any]:
    """Assemble the JSON-compatible manifest of a run."""
    return _to_native({
        "framestack_version": result.version or get_version(),
        "timestamp": result.timestamp or get_timestamp_iso(),
        "platform": result.platform or get_platform_info(),
        "config": _serialize_config(result.config) if result.config else {},
        "tone": _serialize_tone(result.tone),
        "frames": {
            "count": len(result.inputs),
            "width": result.width,
            "height": result.height,
        },
        "inputs": result.inputs,
        "outputs": result.outputs,
        "statistics": result.stats,
    })


def write_manifest(result: StackResult, path: Path) -> Path:
    """
    Write the run manifest as JSON.

    Parameters
    ----------
    result : StackResult
        Completed run.
    path : Path
        Destination JSON file.

    Returns
    -------
    Path
        Path to written manifest file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(build_manifest(result), f, indent=2)
    logger.info("Wrote manifest: %s", path)
    return path
