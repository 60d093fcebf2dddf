import numpy as np
from numba import jit

from .charsets import EDGE_BASE, RAMP
from .filters import SOBEL_THRESHOLD, SOBEL_X, SOBEL_Y, edge_class, freeze, sobel_numba

# Edge glyphs only replace cells darker than this.
EDGE_LUMINANCE_LIMIT = 96


@jit(nopython=True)
def tonal_index(luminance, ramp_length):
    return (luminance * 100) // (25500 // (ramp_length - 1))


@jit(nopython=True)
def map_glyphs_numba(luminance, edges, ramp_length, kernel_x, kernel_y):
    height, width = luminance.shape
    out = np.empty((height, width), dtype=np.int64)
    for y in range(height):
        for x in range(width):
            lum = luminance[y, x]
            if y > 0 and y < height - 1 and x > 0 and x < width - 1:
                magnitude, theta = sobel_numba(edges, x, y, kernel_x, kernel_y)
                if magnitude > SOBEL_THRESHOLD and lum < EDGE_LUMINANCE_LIMIT:
                    out[y, x] = EDGE_BASE + edge_class(theta)
                    continue
            out[y, x] = tonal_index(lum, ramp_length)
    return out


def map_glyphs(luminance, edges):
    """Pick a ramp index or an edge glyph index for every cell."""
    if luminance.shape != edges.shape:
        raise ValueError(f"Luminance and edge grids differ in shape: {luminance.shape} vs {edges.shape}")
    luminance = np.ascontiguousarray(luminance, dtype=np.int64)
    edges = np.ascontiguousarray(edges, dtype=np.int64)
    return freeze(map_glyphs_numba(luminance, edges, len(RAMP), SOBEL_X, SOBEL_Y))
