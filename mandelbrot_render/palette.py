"""
Palette definition and lookup for Mandelbrot coloring.

The palette is a short cyclic table of anchor colors. A continuous
(smooth) iteration value selects two neighbouring anchors and blends
between them, so the colors repeat every len(palette) iterations with
no visible banding.

The lookup helpers are Numba-compiled so the row kernels in compute.py
can call them per pixel; they are also callable from plain Python.
"""

import math

import numpy as np
from numba import jit


# 16 anchors: brown -> deep blue -> light blue -> white-ish -> yellow -> orange
DEFAULT_ANCHORS = (
    (66, 30, 15),
    (25, 7, 26),
    (9, 1, 47),
    (4, 4, 73),
    (0, 7, 100),
    (12, 44, 138),
    (24, 82, 177),
    (57, 125, 209),
    (134, 181, 229),
    (211, 236, 248),
    (241, 233, 191),
    (248, 201, 95),
    (255, 170, 0),
    (204, 128, 0),
    (153, 87, 0),
    (106, 52, 3),
)


def create_palette(anchors=DEFAULT_ANCHORS):
    """
    Build a palette array from a sequence of RGB triples.

    Returns:
        numpy array of shape (len(anchors), 3), dtype uint8
    """
    colors = np.zeros((len(anchors), 3), dtype=np.uint8)
    for i, (r, g, b) in enumerate(anchors):
        colors[i, 0] = r
        colors[i, 1] = g
        colors[i, 2] = b
    return colors


@jit(nopython=True, cache=True)
def lookup(palette, index):
    """Anchor color at index, wrapping around the end of the table."""
    n = index % palette.shape[0]
    return palette[n, 0], palette[n, 1], palette[n, 2]


@jit(nopython=True, cache=True)
def linear_interpolate(color1, color2, t):
    """Blend two RGB tuples channel by channel, truncating to integers."""
    r = int(color1[0] * (1.0 - t) + color2[0] * t)
    g = int(color1[1] * (1.0 - t) + color2[1] * t)
    b = int(color1[2] * (1.0 - t) + color2[2] * t)
    return r, g, b


@jit(nopython=True, cache=True)
def color_at(palette, value):
    """
    Color for a smooth iteration value.

    Negative and non-finite values are treated as 0. The value is reduced
    modulo the palette length first, which keeps both the anchor index and
    the blend weight unchanged while avoiding integer overflow on huge
    values.
    """
    if not math.isfinite(value) or value < 0.0:
        value = 0.0
    value = value % palette.shape[0]
    i = int(value)
    t = value - i
    return linear_interpolate(lookup(palette, i), lookup(palette, i + 1), t)
