"""
Non-maximum suppression along the quantized gradient direction.

Angles are folded into [0, 180) so a direction and its opposite share a band.
Bands are half-open:

    [0, 22.5) ∪ [157.5, 180)   horizontal   neighbors (x±1, y)
    [22.5, 67.5)               diagonal     (x+1, y+1), (x-1, y-1)
    [67.5, 112.5)              vertical     (x, y±1)
    [112.5, 157.5)             anti-diag    (x-1, y+1), (x+1, y-1)

Image y grows downward, so a 45° gradient points toward (x+1, y+1).
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

from scanlens.types import ScalarField


class Band(IntEnum):
    HORIZONTAL = 0
    DIAGONAL = 1
    VERTICAL = 2
    ANTI_DIAGONAL = 3


# (dy, dx) of the two neighbors compared for each band
BAND_OFFSETS: dict[Band, tuple[tuple[int, int], tuple[int, int]]] = {
    Band.HORIZONTAL: ((0, 1), (0, -1)),
    Band.DIAGONAL: ((1, 1), (-1, -1)),
    Band.VERTICAL: ((1, 0), (-1, 0)),
    Band.ANTI_DIAGONAL: ((1, -1), (-1, 1)),
}


def quantize_direction(direction: np.ndarray) -> np.ndarray:
    """Map angles in degrees to Band values (int8 array, same shape)."""
    angle = np.mod(direction, 180.0)
    # fmod rounding can land tiny negatives on exactly 180
    angle[angle >= 180.0] = 0.0

    bands = np.full(angle.shape, Band.HORIZONTAL, dtype=np.int8)
    bands[(angle >= 22.5) & (angle < 67.5)] = Band.DIAGONAL
    bands[(angle >= 67.5) & (angle < 112.5)] = Band.VERTICAL
    bands[(angle >= 112.5) & (angle < 157.5)] = Band.ANTI_DIAGONAL
    return bands


def suppress_non_maxima(magnitude: ScalarField, direction: ScalarField) -> ScalarField:
    """
    Keep a pixel's magnitude only if it is >= both neighbors along its
    gradient direction; otherwise 0. Neighbors outside the image read as 0.
    """
    if magnitude.shape != direction.shape:
        raise ValueError(f"Shape mismatch: {magnitude.shape} vs {direction.shape}")

    h, w = magnitude.shape
    padded = np.pad(magnitude, 1, mode="constant", constant_values=0.0)

    def neighbor(dy: int, dx: int) -> np.ndarray:
        return padded[1 + dy:h + 1 + dy, 1 + dx:w + 1 + dx]

    bands = quantize_direction(direction)
    ahead = np.zeros((h, w), dtype=np.float64)
    behind = np.zeros((h, w), dtype=np.float64)
    for band, (fwd, back) in BAND_OFFSETS.items():
        sel = bands == band
        ahead[sel] = neighbor(*fwd)[sel]
        behind[sel] = neighbor(*back)[sel]

    keep = (magnitude >= ahead) & (magnitude >= behind)
    suppressed = np.where(keep, magnitude, 0.0)
    suppressed.setflags(write=False)
    return suppressed
