from __future__ import annotations

import os
from typing import Any, Mapping, Optional

import numpy as np
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from mandelsnap.errors import ImageWriteError, OutputDirectoryError
from mandelsnap.util.logging_setup import get_logger

def ensure_output_dir(path: str) -> str:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(f"Failed to create output directory {path!r}: {e}") from e
    return path

def format_coordinate(value: float) -> str:
    """Shortest round-trip digits, never in exponent notation (3.2e-05 -> "0.000032")."""
    return np.format_float_positional(float(value), trim="-")

def build_filename(
    output_dir: str,
    *,
    center_re: float,
    center_im: float,
    zoom: float,
    scheme_name: str,
    timestamp: int,
) -> str:
    name = (
        f"mandelbrot_{format_coordinate(center_re)}_{format_coordinate(center_im)}_"
        f"{format_coordinate(zoom)}_{scheme_name}_{int(timestamp)}.png"
    )
    return os.path.join(output_dir, name)

def save_png(buf: np.ndarray, path: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
    """Encode an (H, W, 3) uint8 buffer as PNG; metadata goes into tEXt chunks."""
    logger = get_logger()
    if buf.ndim != 3 or buf.shape[2] != 3 or buf.dtype != np.uint8:
        raise ImageWriteError(f"Expected an (H, W, 3) uint8 buffer, got shape={buf.shape} dtype={buf.dtype}")

    info = PngInfo()
    for key, value in (metadata or {}).items():
        info.add_text(str(key), str(value))

    try:
        img = Image.fromarray(np.ascontiguousarray(buf))
        img.save(path, format="PNG", pnginfo=info)
    except (OSError, ValueError) as e:
        raise ImageWriteError(f"Failed to save image {path!r}: {e}") from e

    logger.debug("PNG written: %s (%sx%s)", path, buf.shape[1], buf.shape[0])
    return path
