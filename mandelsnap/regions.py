"""Picking a region of the Mandelbrot set that is likely to render into something worth looking at."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from mandelsnap.config import MAX_ITERATIONS
from mandelsnap.renderers.escape_time import escape_counts

VALIDATION_GRID = 30
MIN_INSIDE_RATIO = 0.05
MAX_INSIDE_RATIO = 0.95
HISTOGRAM_BUCKETS = 5


@dataclass(frozen=True)
class Viewport:
    """A square window on the complex plane, 4/zoom wide, centred on (center_re, center_im)."""

    center_re: float
    center_im: float
    zoom: float

    def __post_init__(self):
        if not math.isfinite(self.zoom) or self.zoom <= 0:
            raise ValueError(f"zoom must be finite and > 0, got {self.zoom}")

    @property
    def scale(self) -> float:
        return 4.0 / self.zoom

    @property
    def re_min(self) -> float:
        return self.center_re - self.scale / 2.0

    @property
    def im_min(self) -> float:
        return self.center_im - self.scale / 2.0


@dataclass(frozen=True)
class InterestingRegion:
    center_re: float
    center_im: float
    radius: float
    weight: float
    label: str


INTERESTING_REGIONS: Tuple[InterestingRegion, ...] = (
    InterestingRegion(-0.75, 0.1, 0.1, 0.2, "main bulb boundary"),
    InterestingRegion(-0.16, 1.0, 0.05, 0.1, "satellite bulb"),
    InterestingRegion(-0.77, 0.08, 0.2, 0.15, "valley between large bulbs"),
    InterestingRegion(-1.25, 0.0, 0.2, 0.1, "filaments"),
    InterestingRegion(-1.75, 0.0, 0.05, 0.05, "period-3 bulb"),
    InterestingRegion(-0.9, 0.27, 0.13, 0.1, "spiral formation"),
    InterestingRegion(-0.12, 0.74, 0.02, 0.05, "mini spirals"),
    InterestingRegion(0.2, 0.56, 0.02, 0.1, "mini-Mandelbrot near boundary"),
    InterestingRegion(-1.4, 0.0, 0.1, 0.05, "detailed edges"),
    InterestingRegion(-0.5, 0.56, 0.05, 0.1, "dendrite formation"),
)

FALLBACK_CENTER = (-0.75, 0.1)
FALLBACK_ZOOM_RANGE = (1_000.0, 100_000.0)


def choose_region(
    rng: np.random.Generator,
    regions: Sequence[InterestingRegion] = INTERESTING_REGIONS,
) -> Optional[InterestingRegion]:
    """Weighted pick by walking the table and subtracting weights. None if float drift runs off the end."""
    total_weight = sum(r.weight for r in regions)
    choice = rng.random() * total_weight
    for region in regions:
        if choice <= region.weight:
            return region
        choice -= region.weight
    return None


def sample_region(
    rng: np.random.Generator,
    regions: Sequence[InterestingRegion] = INTERESTING_REGIONS,
) -> Tuple[float, float, float]:
    """
    Draw (re, im, zoom) near one of the hand-picked regions.

    The point is uniform in angle and in distance from the region centre, so it
    clusters towards the centre of the disc rather than covering it evenly.
    Smaller regions get the bigger zoom factor.
    """
    region = choose_region(rng, regions)
    if region is None:
        re, im = FALLBACK_CENTER
        return re, im, float(rng.uniform(*FALLBACK_ZOOM_RANGE))

    angle = rng.random() * 2.0 * math.pi
    distance = rng.random() * region.radius
    re = region.center_re + distance * math.cos(angle)
    im = region.center_im + distance * math.sin(angle)
    zoom_factor = 100_000.0 if region.radius < 0.05 else 10_000.0
    zoom = (zoom_factor / region.radius) * float(rng.uniform(0.1, 10.0))
    return float(re), float(im), zoom


def bucket_histogram(counts: np.ndarray, max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    """
    Bucket 0 holds points that never escaped; buckets 1-4 split the escaped
    counts into four equal-width bands.
    """
    counts = np.asarray(counts, dtype=np.int64).ravel()
    inside = counts == max_iterations
    buckets = np.where(inside, 0, 1 + (counts * 4) // max_iterations)
    return np.bincount(buckets, minlength=HISTOGRAM_BUCKETS)


def histogram_is_interesting(histogram: Sequence[int]) -> bool:
    total = int(sum(histogram))
    if total == 0:
        return False
    inside_ratio = histogram[0] / total
    if inside_ratio < MIN_INSIDE_RATIO or inside_ratio > MAX_INSIDE_RATIO:
        return False
    return any(count > 0 for count in histogram[1:])


def is_interesting_region(
    center_re: float,
    center_im: float,
    zoom: float,
    *,
    max_iterations: int = MAX_ITERATIONS,
    grid: int = VALIDATION_GRID,
) -> bool:
    """Coarse grid check that a viewport is neither (almost) solid black nor (almost) all background."""
    view = Viewport(center_re, center_im, zoom)
    counts = escape_counts(view.re_min, view.im_min, view.scale, grid, grid, 0, grid, max_iterations)
    return histogram_is_interesting(bucket_histogram(counts, max_iterations))
