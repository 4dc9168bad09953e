# color.py

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]
BLACK: RGB = (0, 0, 0)


class SchemeKind(Enum):
    BLUE = "blues"
    RED = "fire"
    RAINBOW = "rainbow"
    GREYSCALE = "greyscale"
    BLUEISH = "ocean"
    FOREST = "forest"
    ELECTRIC = "electric"
    PASTEL = "pastel"
    MONOCHROME = "monochrome"


@dataclass(frozen=True)
class ColorScheme:
    """A palette choice; `hue` (degrees, [0, 360)) only matters for MONOCHROME."""

    kind: SchemeKind
    hue: float = 0.0

    def __post_init__(self):
        if self.kind is SchemeKind.MONOCHROME and not 0.0 <= self.hue < 360.0:
            raise ValueError(f"monochrome hue must be in [0, 360), got {self.hue}")

    @property
    def name(self) -> str:
        return self.kind.value


def _to_byte(v: float) -> int:
    # truncate, then saturate like an unsigned 8-bit cast
    return max(0, min(255, int(v * 255.0)))


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """
    Sector-based HSV -> RGB. `h` is in degrees, `s` and `v` in [0, 1].
    Channels are truncated (not rounded) to [0, 255].
    """
    c = v * s
    h_prime = h / 60.0
    x = c * (1.0 - abs(math.fmod(h_prime, 2.0) - 1.0))
    m = v - c

    sector = int(h_prime) if h_prime >= 0.0 else 0
    if sector == 0:
        r1, g1, b1 = c, x, 0.0
    elif sector == 1:
        r1, g1, b1 = x, c, 0.0
    elif sector == 2:
        r1, g1, b1 = 0.0, c, x
    elif sector == 3:
        r1, g1, b1 = 0.0, x, c
    elif sector == 4:
        r1, g1, b1 = x, 0.0, c
    elif sector == 5:
        r1, g1, b1 = c, 0.0, x
    else:
        r1, g1, b1 = 0.0, 0.0, 0.0

    return _to_byte(r1 + m), _to_byte(g1 + m), _to_byte(b1 + m)


def color_for(iterations: int, max_iterations: int, scheme: ColorScheme) -> RGB:
    """
    Returns an (R, G, B) tuple for an iteration count under `scheme`.
    Points that never escaped (iterations == max_iterations) are always black.
    """
    if iterations == max_iterations:
        return BLACK

    speed = iterations / max_iterations
    kind = scheme.kind

    if kind is SchemeKind.BLUE:
        return hsv_to_rgb(240.0 - 60.0 * speed, 0.8 + 0.2 * speed, 0.7 + 0.3 * speed)
    if kind is SchemeKind.RED:
        return hsv_to_rgb(60.0 * speed, 1.0, 0.5 + 0.5 * speed)
    if kind is SchemeKind.RAINBOW:
        return hsv_to_rgb(360.0 * speed, 0.8, 0.9)
    if kind is SchemeKind.GREYSCALE:
        val = _to_byte(speed)
        return val, val, val
    if kind is SchemeKind.BLUEISH:
        return hsv_to_rgb(180.0 + 60.0 * speed, 0.7, 0.5 + 0.5 * speed)
    if kind is SchemeKind.FOREST:
        return hsv_to_rgb(120.0 - 40.0 * speed, 0.8 - 0.3 * speed, 0.4 + 0.6 * speed)
    if kind is SchemeKind.ELECTRIC:
        r = math.sin(math.pi * speed * 8.0) * 0.5 + 0.5
        g = math.sin(math.pi * speed * 4.0) * 0.5 + 0.5
        b = math.sin(math.pi * speed * 2.0) * 0.5 + 0.5
        return _to_byte(r), _to_byte(g), _to_byte(b)
    if kind is SchemeKind.PASTEL:
        return hsv_to_rgb(360.0 * speed, 0.4, 0.9)
    if kind is SchemeKind.MONOCHROME:
        return hsv_to_rgb(scheme.hue, 0.8, speed)
    raise ValueError(f"unknown color scheme: {scheme!r}")


def palette_lut(scheme: ColorScheme, max_iterations: int) -> np.ndarray:
    """Table of shape (max_iterations + 1, 3) holding color_for() for every count."""
    lut = np.zeros((max_iterations + 1, 3), dtype=np.uint8)
    for n in range(max_iterations + 1):
        lut[n] = color_for(n, max_iterations, scheme)
    return lut


_KINDS = list(SchemeKind)


def random_color_scheme(rng: np.random.Generator) -> ColorScheme:
    kind = _KINDS[int(rng.integers(0, len(_KINDS)))]
    if kind is SchemeKind.MONOCHROME:
        return ColorScheme(kind, hue=float(rng.random() * 360.0))
    return ColorScheme(kind)
