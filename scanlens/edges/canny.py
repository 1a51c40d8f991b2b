"""Canny edge detection over an RGBA raster. Saves mask, overlay and JSON."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import numpy as np

from scanlens.anchors.summarize import AnchorStrategy, summarize_region
from scanlens.errors import ComputationError
from scanlens.gradient.sobel import compute_gradient
from scanlens.hysteresis.link import FixedThresholds, ThresholdPolicy, classify, link_edges
from scanlens.luma.reduce import to_intensity, validate_raster
from scanlens.smoothing.gaussian import smooth
from scanlens.suppression.nms import suppress_non_maxima
from scanlens.types import EdgeDetectionResult, RasterImage
from scanlens.utils import (
    get_image_id,
    load_raster,
    raster_to_rgb,
    render_overlay,
    save_image,
    save_json,
    setup_logger,
)

logger = setup_logger("edges")


def _check_finite(stage: str, *fields: np.ndarray) -> None:
    for field in fields:
        if not np.isfinite(field).all():
            raise ComputationError(f"{stage} produced non-finite values")


def detect_edges(
    raster: RasterImage,
    thresholds: ThresholdPolicy | None = None,
    strategy: AnchorStrategy | None = None,
) -> EdgeDetectionResult:
    """
    Run the full pipeline on one raster.

    Stages: luma → smoothing → Sobel gradient → non-maximum suppression →
    hysteresis → bounding box and anchors. Every stage allocates its own
    buffers; nothing is kept between calls.

    Raises:
        InvalidInputError: malformed raster, before any stage runs.
        ComputationError: a stage produced NaN/inf. No mask is returned.
    """
    validate_raster(raster)
    thresholds = thresholds or FixedThresholds()
    t0 = time.perf_counter()
    tick = t0

    def lap(stage: str) -> None:
        nonlocal tick
        now = time.perf_counter()
        logger.debug(f"  {stage}: {now - tick:.4f}s")
        tick = now

    intensity = to_intensity(raster)
    lap("luma")
    smoothed = smooth(intensity)
    lap("smoothing")
    magnitude, direction = compute_gradient(smoothed)
    _check_finite("gradient", magnitude, direction)
    lap("gradient")
    suppressed = suppress_non_maxima(magnitude, direction)
    lap("suppression")

    low, high = thresholds.resolve(suppressed)
    classes = classify(suppressed, low, high)
    mask = link_edges(classes)
    mask.setflags(write=False)
    lap("hysteresis")

    box, anchors = summarize_region(mask, strategy)
    result = EdgeDetectionResult(mask=mask, bounding_box=box, anchors=anchors)
    lap("summary")

    logger.info(
        f"{raster.width}x{raster.height}: thresholds low={low:.2f} high={high:.2f}, "
        f"{result.edge_count} edge px, {len(anchors)} anchors in {time.perf_counter() - t0:.3f}s"
    )
    return result


def compute_canny_edges(
    image_path: str,
    output_dir: str,
    thresholds: ThresholdPolicy | None = None,
    overlay_cfg: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Run edge detection on an image file and save the outputs.

    Writes {output_dir}/{image_id}_edges.png (binary mask),
    {image_id}_overlay.png (mask tinted onto the source with anchor markers)
    and {image_id}_edges.json (bounding box, anchors, thresholds).

    Returns:
        The JSON payload, with output paths added.
    """
    image_id = get_image_id(image_path)
    thresholds = thresholds or FixedThresholds()
    overlay_cfg = overlay_cfg or {}
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    raster = load_raster(image_path)
    result = detect_edges(raster, thresholds=thresholds)

    mask_png = str(out_dir / f"{image_id}_edges.png")
    overlay_png = str(out_dir / f"{image_id}_overlay.png")
    json_path = str(out_dir / f"{image_id}_edges.json")

    save_image(result.mask.copy(), mask_png)
    overlay = render_overlay(
        raster_to_rgb(raster),
        result.mask,
        result.anchors,
        edge_color=tuple(overlay_cfg.get("edge_color", (0, 255, 200))),
        alpha=float(overlay_cfg.get("alpha", 0.6)),
        anchor_radius=int(overlay_cfg.get("anchor_radius", 6)),
    )
    save_image(overlay, overlay_png)

    payload = {
        "image_id": image_id,
        "image_path": image_path,
        "thresholds": thresholds.to_dict(),
        **result.to_dict(),
        "mask_path": mask_png,
        "overlay_path": overlay_png,
    }
    save_json(payload, json_path)
    logger.info(f"{image_id}: {result.edge_count} edge px, {len(result.anchors)} anchors → {out_dir}")
    return payload
