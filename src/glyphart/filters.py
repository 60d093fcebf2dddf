"""
Image analysis stages: block-average luminance, binomial blur,
difference-of-Gaussians edge field and the Sobel operator.

Every stage returns a new read-only grid and never touches its input.
"""
import math
from collections import namedtuple

import numpy as np
from numba import jit

from .charsets import EDGE_BACKSLASH, EDGE_HORIZONTAL, EDGE_SLASH, EDGE_VERTICAL
from .errors import InvalidScalar

# size -> (weights, divisor)
BLUR_KERNELS = {
    3: (np.array([1, 2, 1], dtype=np.int64), 16),
    7: (np.array([1, 6, 15, 20, 15, 6, 1], dtype=np.int64), 4096),
}

EDGE_THRESHOLD = 9
SOBEL_THRESHOLD = 400
SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.int64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.int64)

Gradient = namedtuple('Gradient', ['magnitude', 'theta', 'present'])


def freeze(grid):
    grid.setflags(write=False)
    return grid


def check_scale(scale, width, height):
    if isinstance(scale, bool) or not isinstance(scale, (int, np.integer)):
        raise InvalidScalar(f"Downscale factor must be an integer, got {scale!r}")
    if scale <= 0 or scale > min(width, height):
        raise InvalidScalar(f"Downscale factor must be between 1 and {min(width, height)}, got {scale}")
    return int(scale)


def sample_luminance(pixels, scale):
    """
    Average S x S blocks of an RGBA buffer into a luminance grid.

    Each pixel contributes (R + G + B) // 3, and each block sum is divided
    by S * S, both with truncation. A partial trailing block is dropped.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected an RGBA buffer, got shape {pixels.shape}")
    height, width = pixels.shape[:2]
    scale = check_scale(scale, width, height)
    rows, cols = height // scale, width // scale
    block = pixels[:rows * scale, :cols * scale, :3].astype(np.int64)
    per_pixel = block.sum(axis=2) // 3
    sums = per_pixel.reshape(rows, scale, cols, scale).sum(axis=(1, 3))
    return freeze(sums // (scale * scale))


@jit(nopython=True)
def convolve_numba(grid, weights, divisor):
    height, width = grid.shape
    size = weights.shape[0]
    half = size // 2
    out = np.zeros((height, width), dtype=np.int64)
    for y in range(half, height - half):
        for x in range(half, width - half):
            total = 0
            for i in range(size):
                for j in range(size):
                    total += grid[y + i - half, x + j - half] * weights[i] * weights[j]
            out[y, x] = total // divisor
    return out


def gaussian_blur(grid, size):
    """
    Convolve with the fixed binomial kernel of the given size.

    Only cells whose whole window lies inside the grid are computed; the
    rest are zero, so the outermost ring is always zero.
    """
    if size not in BLUR_KERNELS:
        raise ValueError(f"No blur kernel of size {size}")
    weights, divisor = BLUR_KERNELS[size]
    grid = np.ascontiguousarray(grid, dtype=np.int64)
    return freeze(convolve_numba(grid, weights, divisor))


def edge_field(blur3, blur7):
    if blur3.shape != blur7.shape:
        raise ValueError(f"Blur grids differ in shape: {blur3.shape} vs {blur7.shape}")
    diff = blur3.astype(np.int64) - blur7.astype(np.int64)
    return freeze(np.where(diff > EDGE_THRESHOLD, 255, 0).astype(np.int64))


@jit(nopython=True)
def sobel_numba(grid, x, y, kernel_x, kernel_y):
    gx = 0.0
    gy = 0.0
    for i in range(3):
        for j in range(3):
            value = grid[y + i - 1, x + j - 1]
            gx += value * kernel_x[i, j]
            gy += value * kernel_y[i, j]
    gx += 0.0001
    magnitude = math.sqrt(gx * gx + gy * gy)
    theta = math.atan(gy / gx) / math.pi + 0.5
    return magnitude, theta


@jit(nopython=True)
def edge_class(theta):
    if theta < 0.1 or theta > 0.9:
        return EDGE_HORIZONTAL
    if theta < 0.4:
        return EDGE_BACKSLASH
    if theta < 0.6:
        return EDGE_VERTICAL
    return EDGE_SLASH


def sobel_at(grid, x, y):
    height, width = grid.shape
    if not (0 < x < width - 1 and 0 < y < height - 1):
        raise IndexError(f"Sobel needs an interior cell, got ({x}, {y}) in {width}x{height}")
    grid = np.ascontiguousarray(grid, dtype=np.int64)
    magnitude, theta = sobel_numba(grid, x, y, SOBEL_X, SOBEL_Y)
    if magnitude > SOBEL_THRESHOLD:
        return Gradient(magnitude, theta, True)
    return Gradient(magnitude, None, False)
