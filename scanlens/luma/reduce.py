"""Luma reduction: RGBA bytes → intensity field (Rec. 601 weights)."""

from __future__ import annotations

import numpy as np

from scanlens.errors import InvalidInputError
from scanlens.types import RasterImage, ScalarField

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def validate_raster(raster: RasterImage) -> np.ndarray:
    """
    Check dimensions and buffer length, return the pixels as (H, W, 4) uint8.
    Runs before any stage so a malformed raster never reaches computation.
    """
    width, height = raster.width, raster.height
    if not isinstance(width, (int, np.integer)) or not isinstance(height, (int, np.integer)):
        raise InvalidInputError(f"Dimensions must be integers, got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Dimensions must be positive, got {width}x{height}")

    pixels = raster.pixels
    if isinstance(pixels, np.ndarray):
        if pixels.dtype != np.uint8:
            raise InvalidInputError(f"Pixel buffer must be uint8, got {pixels.dtype}")
        flat = pixels.reshape(-1)
    else:
        try:
            flat = np.frombuffer(pixels, dtype=np.uint8)
        except TypeError as e:
            raise InvalidInputError(f"Pixel buffer must be bytes-like, got {type(pixels).__name__}") from e

    if flat.size != raster.expected_length:
        raise InvalidInputError(
            f"Pixel buffer has {flat.size} bytes, expected 4*{width}*{height} = {raster.expected_length}"
        )
    return flat.reshape(height, width, 4)


def to_intensity(raster: RasterImage) -> ScalarField:
    """Return 0.299·R + 0.587·G + 0.114·B per pixel; alpha is ignored."""
    rgba = validate_raster(raster).astype(np.float64)
    wr, wg, wb = LUMA_WEIGHTS
    intensity = wr * rgba[:, :, 0] + wg * rgba[:, :, 1] + wb * rgba[:, :, 2]
    intensity.setflags(write=False)
    return intensity
