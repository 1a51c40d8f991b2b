"""Synthetic rasters shared across tests."""

from __future__ import annotations

import cv2
import numpy as np
import pytest

from scanlens.types import RasterImage

MIDGRAY = 128


def make_raster(gray: np.ndarray, alpha: int = 255) -> RasterImage:
    """Wrap a (H, W) uint8 array as an opaque RGBA RasterImage with R=G=B."""
    gray = np.asarray(gray, dtype=np.uint8)
    h, w = gray.shape
    rgba = np.empty((h, w, 4), dtype=np.uint8)
    rgba[:, :, :3] = gray[:, :, None]
    rgba[:, :, 3] = alpha
    return RasterImage(width=w, height=h, pixels=rgba.tobytes())


def step_image(width: int = 64, height: int = 64, column: int = 32, low: int = 0, high: int = 255) -> np.ndarray:
    """Dark left half, bright from `column` onward."""
    img = np.full((height, width), low, dtype=np.uint8)
    img[:, column:] = high
    return img


def line_image(size: int = 100, column: int = 50) -> np.ndarray:
    """Midgray field with a 1-pixel full-height bright line."""
    img = np.full((size, size), MIDGRAY, dtype=np.uint8)
    img[:, column] = 255
    return img


def write_png(path, gray: np.ndarray) -> str:
    cv2.imwrite(str(path), gray)
    return str(path)


@pytest.fixture
def black_raster() -> RasterImage:
    return make_raster(np.zeros((48, 64), dtype=np.uint8))


@pytest.fixture
def line_raster() -> RasterImage:
    return make_raster(line_image())


@pytest.fixture
def step_raster() -> RasterImage:
    return make_raster(step_image())


@pytest.fixture
def noisy_raster() -> RasterImage:
    rng = np.random.default_rng(1234)
    img = rng.integers(0, 256, size=(40, 50), dtype=np.uint8)
    img[10:30, 15:35] = 220
    return make_raster(img)
