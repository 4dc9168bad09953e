from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from mandelsnap.color import ColorScheme, palette_lut
from mandelsnap.config import BAND_HEIGHT, HEIGHT, MAX_ITERATIONS, WIDTH
from mandelsnap.regions import Viewport
from mandelsnap.renderers.escape_time import escape_counts
from mandelsnap.util.logging_setup import configure_worker_logging, get_logger

_G = {}

def _init_worker(re_min, im_min, scale, width, height, max_iterations, log_queue, log_level):
    _G["re_min"] = re_min
    _G["im_min"] = im_min
    _G["scale"] = scale
    _G["width"] = width
    _G["height"] = height
    _G["max_iterations"] = max_iterations
    if log_queue is not None:
        configure_worker_logging(log_queue, level=log_level)

def _render_band(y0_y1: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    counts = escape_counts(
        _G["re_min"], _G["im_min"], _G["scale"],
        _G["width"], _G["height"], y0, y1, _G["max_iterations"],
    )
    get_logger().debug("Rendered rows %s..%s/%s", y0, y1, _G["height"])
    return y0, counts

def split_bands(height: int, band_height: int = BAND_HEIGHT) -> List[Tuple[int, int]]:
    if band_height <= 0:
        raise ValueError("band_height must be > 0")
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def render_counts(
    viewport: Viewport,
    *,
    width: int = WIDTH,
    height: int = HEIGHT,
    max_iterations: int = MAX_ITERATIONS,
    workers: Optional[int] = None,
    band_height: int = BAND_HEIGHT,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> np.ndarray:
    """Iteration counts for every pixel, shape (height, width). Bands never overlap."""
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")

    counts = np.zeros((height, width), dtype=np.int32)
    bands = split_bands(height, band_height)
    geometry = (viewport.re_min, viewport.im_min, viewport.scale, width, height, max_iterations)
    workers = workers or os.cpu_count() or 1
    bar = tqdm(total=len(bands), desc="bands", unit="band", disable=not progress)

    try:
        if workers == 1 or len(bands) == 1:
            # inline: keep the parent's logging untouched
            _init_worker(*geometry, None, log_level)
            for band in bands:
                y0, band_counts = _render_band(band)
                counts[y0:y0 + band_counts.shape[0]] = band_counts
                bar.update(1)
        else:
            with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                                     initargs=(*geometry, log_queue, log_level)) as pool:
                for y0, band_counts in pool.map(_render_band, bands):
                    counts[y0:y0 + band_counts.shape[0]] = band_counts
                    bar.update(1)
    finally:
        bar.close()

    return counts

def render_image(
    viewport: Viewport,
    scheme: ColorScheme,
    *,
    width: int = WIDTH,
    height: int = HEIGHT,
    max_iterations: int = MAX_ITERATIONS,
    workers: Optional[int] = None,
    band_height: int = BAND_HEIGHT,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> np.ndarray:
    """Render `viewport` under `scheme` into an RGB buffer of shape (height, width, 3)."""
    logger = get_logger()
    logger.debug(
        "CPU render start center=(%s, %s) zoom=%s size=%sx%s iter=%s scheme=%s",
        viewport.center_re, viewport.center_im, viewport.zoom, width, height, max_iterations, scheme.name,
    )
    counts = render_counts(
        viewport, width=width, height=height, max_iterations=max_iterations, workers=workers,
        band_height=band_height, log_queue=log_queue, log_level=log_level, progress=progress,
    )
    buf = palette_lut(scheme, max_iterations)[counts]
    logger.debug("CPU render done")
    return buf
