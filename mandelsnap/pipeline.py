from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

import numpy as np

from mandelsnap.color import ColorScheme, SchemeKind, random_color_scheme
from mandelsnap.config import BAND_HEIGHT, MAX_ATTEMPTS, MAX_ITERATIONS
from mandelsnap.image.png_writer import build_filename, ensure_output_dir, save_png
from mandelsnap.regions import Viewport, is_interesting_region, sample_region
from mandelsnap.renderers.cpu import render_image
from mandelsnap.util.logging_setup import get_logger

@dataclass(frozen=True)
class RunResult:
    viewport: Viewport
    scheme: ColorScheme
    attempts: int
    path: str
    timestamp: int

def select_region(
    rng: np.random.Generator,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    max_iterations: int = MAX_ITERATIONS,
) -> Tuple[Viewport, int]:
    """
    Sample candidate regions until one passes validation. Once `attempts` has
    reached `max_attempts` the next sample is taken as-is, so the loop always ends.
    """
    logger = get_logger()
    attempts = 0
    while True:
        re, im, zoom = sample_region(rng)
        if attempts >= max_attempts or is_interesting_region(re, im, zoom, max_iterations=max_iterations):
            return Viewport(re, im, zoom), attempts
        logger.debug("Rejected region (%s, %s) zoom=%s", re, im, zoom)
        attempts += 1

def _metadata(viewport: Viewport, scheme: ColorScheme, attempts: int, timestamp: int) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "center_re": repr(viewport.center_re),
        "center_im": repr(viewport.center_im),
        "zoom": repr(viewport.zoom),
        "scheme": scheme.name,
        "attempts": attempts,
        "timestamp": timestamp,
    }
    if scheme.kind is SchemeKind.MONOCHROME:
        meta["hue"] = repr(scheme.hue)
    return meta

def run(
    *,
    cfg: Dict[str, Any],
    rng: np.random.Generator,
    clock: Callable[[], float] = time.time,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> RunResult:
    logger = get_logger()
    output_dir = ensure_output_dir(cfg["output_dir"])

    viewport, attempts = select_region(
        rng, max_attempts=cfg["max_attempts"], max_iterations=cfg["max_iterations"]
    )
    logger.info(
        "(at attempt #%s): I am generating a mandelbrot image for coordinate (%r, %r), zoom %r",
        attempts, viewport.center_re, viewport.center_im, viewport.zoom,
    )

    # all randomness is drawn before the render starts
    scheme = random_color_scheme(rng)
    buf = render_image(
        viewport, scheme,
        width=cfg["width"], height=cfg["height"], max_iterations=cfg["max_iterations"],
        workers=cfg.get("workers"), band_height=cfg.get("band_height", BAND_HEIGHT),
        log_queue=log_queue, log_level=log_level, progress=progress,
    )

    timestamp = int(clock())
    path = build_filename(
        output_dir,
        center_re=viewport.center_re, center_im=viewport.center_im, zoom=viewport.zoom,
        scheme_name=scheme.name, timestamp=timestamp,
    )
    save_png(buf, path, _metadata(viewport, scheme, attempts, timestamp))

    logger.info("%r + %ri at zoom %.10e. (%s)", viewport.center_re, viewport.center_im, viewport.zoom, scheme.name)
    logger.info("I saved the image as: %s", path)
    return RunResult(viewport=viewport, scheme=scheme, attempts=attempts, path=path, timestamp=timestamp)
