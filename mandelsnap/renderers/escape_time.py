# escape_time.py

import numpy as np
from numba import njit

from mandelsnap.config import MAX_ITERATIONS

# ------------------------------------------------------------
# Escape-time iteration: z <- z*z + c from z = 0, stopping once |z|^2 > 4
# (escape radius 2) or max_iterations is reached. A return value equal to
# max_iterations means the point never escaped.
# ------------------------------------------------------------
@njit
def _iterate(c, max_iterations):
    z = 0j
    n = 0
    while n < max_iterations and (z.real * z.real + z.imag * z.imag) <= 4.0:
        z = z * z + c
        n += 1
    return n


@njit
def _escape_counts(re_min, im_min, scale, width, height, y0, y1, max_iterations):
    out = np.empty((y1 - y0, width), dtype=np.int32)
    for yi in range(y1 - y0):
        # row y maps straight onto the imaginary axis, no vertical flip
        im = im_min + ((y0 + yi) / height) * scale
        for x in range(width):
            re = re_min + (x / width) * scale
            out[yi, x] = _iterate(complex(re, im), max_iterations)
    return out


def iterate(c: complex, max_iterations: int = MAX_ITERATIONS) -> int:
    """Number of steps before `c` escapes, or `max_iterations` if it never does."""
    return int(_iterate(complex(c), int(max_iterations)))


def escape_counts(
    re_min: float,
    im_min: float,
    scale: float,
    width: int,
    height: int,
    y0: int,
    y1: int,
    max_iterations: int = MAX_ITERATIONS,
) -> np.ndarray:
    """
    Iteration counts for rows [y0, y1) of a width x height grid.

    Pixel (x, y) samples c = (re_min + x/width*scale, im_min + y/height*scale).
    The result has shape (y1 - y0, width) and dtype int32.
    """
    if not 0 <= y0 <= y1 <= height:
        raise ValueError(f"invalid row band [{y0}, {y1}) for height {height}")
    return _escape_counts(
        float(re_min), float(im_min), float(scale),
        int(width), int(height), int(y0), int(y1), int(max_iterations),
    )
