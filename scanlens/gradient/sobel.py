"""Sobel gradient estimation over the smoothed field."""

from __future__ import annotations

import numpy as np

from scanlens.smoothing.gaussian import SMOOTH_INSET
from scanlens.types import ScalarField

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = SOBEL_X.T.copy()

# Smoothing inset plus the 1-pixel Sobel ring
GRADIENT_INSET = SMOOTH_INSET + 1


def _correlate3x3(field: np.ndarray, kernel: np.ndarray, inset: int) -> np.ndarray:
    """Sum of products of kernel over every pixel at least `inset` from the border."""
    h, w = field.shape
    acc = np.zeros((h - 2 * inset, w - 2 * inset), dtype=np.float64)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            weight = kernel[dy + 1, dx + 1]
            if weight == 0:
                continue
            acc += weight * field[inset + dy:h - inset + dy, inset + dx:w - inset + dx]
    return acc


def compute_gradient(smoothed: ScalarField) -> tuple[ScalarField, ScalarField]:
    """
    Return (magnitude, direction) fields, same shape as the input.

    direction is atan2(gy, gx) in degrees, in (-180, 180]. Both fields are 0
    outside the GRADIENT_INSET interior. No thresholding happens here.
    """
    h, w = smoothed.shape
    magnitude = np.zeros((h, w), dtype=np.float64)
    direction = np.zeros((h, w), dtype=np.float64)

    r = GRADIENT_INSET
    if h > 2 * r and w > 2 * r:
        gx = _correlate3x3(smoothed, SOBEL_X, r)
        gy = _correlate3x3(smoothed, SOBEL_Y, r)
        theta = np.degrees(np.arctan2(gy, gx))
        # atan2 returns -180 for (-0.0, negative gx); fold onto +180
        theta[theta <= -180.0] = 180.0
        magnitude[r:h - r, r:w - r] = np.sqrt(gx * gx + gy * gy)
        direction[r:h - r, r:w - r] = theta

    magnitude.setflags(write=False)
    direction.setflags(write=False)
    return magnitude, direction
