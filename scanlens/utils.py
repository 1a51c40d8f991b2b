"""Shared utilities — logging, config, image I/O, overlay rendering."""

from __future__ import annotations

import base64
import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

import cv2
import numpy as np
import yaml
from dotenv import load_dotenv

from scanlens.errors import InvalidInputError, PixelAccessError
from scanlens.types import EDGE, AnchorPoint, ColorTag, RasterImage

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_PATH = Path("configs/edges.yaml")

DEFAULT_CONFIG: dict[str, Any] = {
    "thresholds": {
        "policy": "fixed",      # fixed | relative
        "high": 40.0,           # unnormalized gradient scale
        "low": 15.0,
        "high_ratio": 0.15,     # relative: high = ratio * max gradient
        "low_ratio": 0.4,       # relative: low = ratio * high
    },
    "output_dir": "data/edges",
    "overlay": {
        "alpha": 0.6,
        "edge_color": [0, 255, 200],    # RGB
        "anchor_radius": 6,
    },
}

# RGB marker colors per anchor group
ANCHOR_COLORS: dict[ColorTag, tuple[int, int, int]] = {
    ColorTag.PRIMARY: (250, 204, 21),
    ColorTag.SECONDARY: (56, 189, 248),
    ColorTag.TERTIARY: (167, 139, 250),
}

IMAGE_EXTS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logger(name: str) -> logging.Logger:
    """Return a configured logger for a pipeline stage."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


logger = setup_logger("utils")

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """
    Load pipeline settings from YAML, layered over DEFAULT_CONFIG.

    Resolution order: explicit path, $SCANLENS_CONFIG (a .env file is
    honoured), configs/edges.yaml. A missing file yields the defaults.
    """
    load_dotenv()
    cfg_path = Path(path or os.getenv("SCANLENS_CONFIG") or DEFAULT_CONFIG_PATH)

    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config not found: {cfg_path}")
        return cfg

    with open(cfg_path) as f:
        user_cfg = yaml.safe_load(f) or {}
    if not isinstance(user_cfg, dict):
        raise ValueError(f"Config {cfg_path} must be a mapping, got {type(user_cfg).__name__}")

    for key, value in user_cfg.items():
        if isinstance(value, dict) and isinstance(cfg.get(key), dict):
            cfg[key].update(value)
        else:
            cfg[key] = value
    logger.debug(f"Loaded config from {cfg_path}")
    return cfg


# ---------------------------------------------------------------------------
# Image I/O
# ---------------------------------------------------------------------------


def raster_from_array(img: np.ndarray) -> RasterImage:
    """Wrap an RGB, RGBA or grayscale uint8 array as an RGBA RasterImage."""
    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise InvalidInputError(f"Unsupported pixel dtype: {img.dtype}")

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.ndim == 3 and img.shape[2] == 3:
        rgba = cv2.cvtColor(img, cv2.COLOR_RGB2RGBA)
    elif img.ndim == 3 and img.shape[2] == 4:
        rgba = img
    else:
        raise InvalidInputError(f"Unsupported image shape: {img.shape}")

    h, w = rgba.shape[:2]
    return RasterImage(width=w, height=h, pixels=np.ascontiguousarray(rgba).tobytes())


def _bgr_to_rgb_order(img: np.ndarray) -> np.ndarray:
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    if img.ndim == 3 and img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return img


def load_raster(path: str | Path) -> RasterImage:
    """
    Load an image file as an RGBA RasterImage.

    Raises FileNotFoundError if the file is missing and PixelAccessError if it
    exists but its pixels cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Could not load image: {path}")
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise PixelAccessError(f"Pixel data not readable: {path}")
    return raster_from_array(_bgr_to_rgb_order(img))


def decode_raster(data: bytes) -> RasterImage:
    """Decode an encoded image (PNG, JPEG, ...) held in memory."""
    buf = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED) if buf.size else None
    if img is None:
        raise PixelAccessError("Uploaded data could not be decoded as an image")
    return raster_from_array(_bgr_to_rgb_order(img))


def raster_to_rgb(raster: RasterImage) -> np.ndarray:
    """Return the raster as an (H, W, 3) RGB uint8 array, alpha dropped."""
    rgba = np.frombuffer(bytes(raster.pixels), dtype=np.uint8)
    return rgba.reshape(raster.height, raster.width, 4)[:, :, :3].copy()


def save_image(img: np.ndarray, path: str) -> None:
    """Save an RGB or single-channel numpy array to disk as PNG/JPG."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    out = cv2.cvtColor(img, cv2.COLOR_RGB2BGR) if img.ndim == 3 else img
    cv2.imwrite(path, out)


def encode_png_base64(img: np.ndarray) -> str:
    """Encode an RGB or single-channel array as a base64 PNG string."""
    out = cv2.cvtColor(img, cv2.COLOR_RGB2BGR) if img.ndim == 3 else img
    ok, buf = cv2.imencode(".png", out)
    if not ok:
        raise RuntimeError("PNG encoding failed")
    return base64.b64encode(buf.tobytes()).decode("utf-8")


def list_images(folder: str | Path) -> list[Path]:
    """Sorted image files directly inside folder."""
    folder = Path(folder)
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTS)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def save_json(data: dict, path: str) -> None:
    """Write dict to JSON file, creating parent dirs as needed."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


def get_image_id(image_path: str) -> str:
    """Return stem of image filename, e.g. 'scan_001' from 'data/scans/scan_001.png'."""
    return Path(image_path).stem


# ---------------------------------------------------------------------------
# Visualization helpers
# ---------------------------------------------------------------------------


def render_overlay(
    img: np.ndarray,
    mask: np.ndarray,
    anchors: Iterable[AnchorPoint] = (),
    edge_color: tuple[int, int, int] = (0, 255, 200),
    alpha: float = 0.6,
    anchor_radius: int = 6,
) -> np.ndarray:
    """
    Blend the edge mask onto an RGB image copy and draw anchor markers.
    Mask and image share the same pixel coordinate space (top-left origin).
    """
    out = img.copy()
    edge_px = mask == EDGE
    if edge_px.any():
        tint = np.array(edge_color, dtype=np.float32)
        out[edge_px] = ((1.0 - alpha) * out[edge_px] + alpha * tint).astype(np.uint8)

    for anchor in anchors:
        color = ANCHOR_COLORS.get(anchor.color_tag, (255, 255, 255))
        center = (int(round(anchor.x)), int(round(anchor.y)))
        cv2.circle(out, center, anchor_radius, color, -1, cv2.LINE_AA)
        cv2.circle(out, center, anchor_radius, (255, 255, 255), 1, cv2.LINE_AA)
        cv2.putText(
            out, anchor.label, (center[0] + anchor_radius + 3, max(center[1] - 4, 12)),
            cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1, cv2.LINE_AA,
        )
    return out
