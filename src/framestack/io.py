"""
I/O operations for frame image files.

Handles:
- Frame discovery in a capture folder
- Decoding PNG/JPEG files into RGBA PixelBuffers
- Encoding PixelBuffers back to PNG

The stacking and tone code never touches files; this module is the host-side
bridge used by the command-line interface.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from .buffer import PixelBuffer
from .errors import InvalidBuffer

logger = logging.getLogger(__name__)

FRAME_PATTERNS = ("*.png", "*.jpg", "*.jpeg")


def list_frames(
    directory: str | Path,
    patterns: tuple[str, ...] = FRAME_PATTERNS,
    exclude_stacked: bool = True,
) -> list[Path]:
    """
    Discover frame images in a capture folder.

    Parameters
    ----------
    directory : str or Path
        Folder containing captured frames.
    patterns : tuple[str, ...]
        Glob patterns matched against file names, case-insensitively
        (e.g. "*.png", "light_*.png").
    exclude_stacked : bool, default True
        Skip files named 'astro-stacked-*' (previous composites).

    Returns
    -------
    list[Path]
        Frame paths sorted by name, which is capture order for
        timestamped file names.
    """
    folder = Path(directory)
    if not folder.is_dir():
        raise ValueError(f"Frame path is not a directory: {folder}")

    lowered = [p.lower() for p in patterns]
    candidates = sorted(
        p for p in folder.iterdir()
        if p.is_file() and any(fnmatch.fnmatchcase(p.name.lower(), pat) for pat in lowered)
    )

    frames = []
    for path in candidates:
        if exclude_stacked and path.name.startswith("astro-stacked-"):
            logger.debug("Excluding previous composite: %s", path.name)
            continue
        frames.append(path)

    logger.info(
        "Discovered %d frames in %s (excluded: %d)",
        len(frames), folder.name, len(candidates) - len(frames),
    )
    return frames


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Convert a decoded 8-bit image to an (H, W, 4) RGBA array.

    Grayscale is replicated to RGB, gray+alpha keeps its alpha, and RGB gets
    an opaque alpha channel.
    """
    if image.dtype != np.uint8:
        raise InvalidBuffer(f"Only 8-bit images are supported, got dtype {image.dtype}")

    if image.ndim == 2:
        image = image[:, :, np.newaxis]
    if image.ndim != 3:
        raise InvalidBuffer(f"Unsupported image shape {image.shape}")

    channels = image.shape[2]
    height, width = image.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)

    if channels == 1:
        rgba[..., :3] = image
        rgba[..., 3] = 255
    elif channels == 2:
        rgba[..., :3] = image[..., :1]
        rgba[..., 3] = image[..., 1]
    elif channels == 3:
        rgba[..., :3] = image
        rgba[..., 3] = 255
    elif channels == 4:
        rgba[...] = image
    else:
        raise InvalidBuffer(f"Unsupported channel count {channels}")
    return rgba


def read_frame(path: str | Path) -> PixelBuffer:
    """
    Decode an image file into an RGBA PixelBuffer.

    Parameters
    ----------
    path : str or Path
        PNG or JPEG file.

    Returns
    -------
    PixelBuffer
    """
    path = Path(path)
    image = iio.imread(path)
    # Animated / multi-page files decode with a leading frame axis
    if image.ndim == 4:
        image = image[0]
    buf = PixelBuffer.from_array(to_rgba(image))
    logger.debug("Read %s (%dx%d)", path.name, buf.width, buf.height)
    return buf


def read_frames(paths: list[Path]) -> list[PixelBuffer]:
    """Decode several frames, preserving order."""
    return [read_frame(p) for p in paths]


def write_frame(buffer: PixelBuffer, path: str | Path) -> Path:
    """
    Encode a PixelBuffer to an image file (format from the suffix).

    Parameters
    ----------
    buffer : PixelBuffer
        Image to write.
    path : str or Path
        Destination; parent directories are created.

    Returns
    -------
    Path
        Path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = buffer.array
    if path.suffix.lower() in (".jpg", ".jpeg"):
        # JPEG has no alpha channel
        data = data[..., :3]
    iio.imwrite(path, np.ascontiguousarray(data))
    logger.info("Wrote %s (%dx%d)", path, buffer.width, buffer.height)
    return path
