"""
Gaussian-like smoothing with a fixed 5x5 binomial kernel.

The 2-D kernel is the outer product of [1, 4, 6, 4, 1] with itself (sum 256,
σ≈1.0) and is applied as a horizontal pass followed by a vertical pass.
Pixels within SMOOTH_INSET cells of any image edge are never computed and
stay 0; every later stage inherits that inset.
"""

from __future__ import annotations

import numpy as np

from scanlens.types import ScalarField

KERNEL = (1, 4, 6, 4, 1)
KERNEL_NORM = 16            # per pass; 256 for the full 5x5 kernel
SMOOTH_INSET = len(KERNEL) // 2


def _horizontal_pass(field: np.ndarray) -> np.ndarray:
    h, w = field.shape
    r = SMOOTH_INSET
    out = np.zeros((h, w), dtype=np.float64)
    acc = out[:, r:w - r]
    for k, weight in enumerate(KERNEL):
        acc += weight * field[:, k:w - 2 * r + k]
    acc /= KERNEL_NORM
    return out


def _vertical_pass(field: np.ndarray) -> np.ndarray:
    h, w = field.shape
    r = SMOOTH_INSET
    out = np.zeros((h, w), dtype=np.float64)
    acc = out[r:h - r, r:w - r]
    for k, weight in enumerate(KERNEL):
        acc += weight * field[k:h - 2 * r + k, r:w - r]
    acc /= KERNEL_NORM
    return out


def smooth(intensity: ScalarField) -> ScalarField:
    """Return a new smoothed field, same shape, zero on the 2-pixel border."""
    h, w = intensity.shape
    if h <= 2 * SMOOTH_INSET or w <= 2 * SMOOTH_INSET:
        blurred = np.zeros((h, w), dtype=np.float64)
    else:
        blurred = _vertical_pass(_horizontal_pass(intensity))
    blurred.setflags(write=False)
    return blurred
