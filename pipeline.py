"""End-to-end scanlens run: image → intensity → edges → bounding box + anchors."""

from __future__ import annotations

import sys
from typing import Any

from scanlens.hysteresis.link import thresholds_from_config
from scanlens.utils import get_image_id, load_config, setup_logger

logger = setup_logger("pipeline")


def run_pipeline(
    image_path: str,
    output_dir: str | None = None,
    policy: str | None = None,
    config_path: str | None = None,
) -> dict[str, Any]:
    """
    Full edge-detection run for a single image.

    Settings come from the YAML config; `output_dir` and `policy` override
    their config counterparts. Outputs land in the output dir as
    {image_id}_edges.png, {image_id}_overlay.png and {image_id}_edges.json.

    Returns a results dict with a status entry per stage.
    """
    image_id = get_image_id(image_path)
    logger.info(f"=== Pipeline START: {image_id} ===")

    cfg = load_config(config_path)
    if policy:
        cfg["thresholds"]["policy"] = policy
    out_dir = output_dir or cfg["output_dir"]
    thresholds = thresholds_from_config(cfg)

    results: dict[str, Any] = {"image_id": image_id, "image_path": image_path, "stages": {}}

    logger.info(f"[1/1] Edge detection ({thresholds.name} thresholds)...")
    try:
        from scanlens.edges.canny import compute_canny_edges

        edges = compute_canny_edges(image_path, out_dir, thresholds=thresholds, overlay_cfg=cfg["overlay"])
        results["stages"]["edges"] = {
            "status": "ok",
            "edge_pixels": edges["edge_pixels"],
            "bounding_box": edges["bounding_box"],
            "n_anchors": len(edges["anchors"]),
            "mask_path": edges["mask_path"],
            "overlay_path": edges["overlay_path"],
        }
        results["anchors"] = edges["anchors"]
        logger.info(f"  → {edges['edge_pixels']} edge px, {len(edges['anchors'])} anchors.")
    except Exception as e:
        logger.error(f"Edge detection failed: {e}")
        results["stages"]["edges"] = {"status": "error", "error": str(e)}

    logger.info(f"=== Pipeline DONE: {image_id} ===")
    return results


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) < 2:
        print("Usage: python pipeline.py <image_path> [--out DIR] [--policy fixed|relative] [--config PATH]")
        return 1

    img = argv[1]
    out_dir = None
    policy = None
    config_path = None

    for i, arg in enumerate(argv[2:], 2):
        if arg == "--out" and i + 1 < len(argv):
            out_dir = argv[i + 1]
        if arg == "--policy" and i + 1 < len(argv):
            policy = argv[i + 1]
        if arg == "--config" and i + 1 < len(argv):
            config_path = argv[i + 1]

    out = run_pipeline(img, output_dir=out_dir, policy=policy, config_path=config_path)
    print("\n=== Pipeline Summary ===")
    for stage, info in out.get("stages", {}).items():
        print(f"  {stage}: {info.get('status', '?')}")
    for anchor in out.get("anchors", []):
        print(f"  [{anchor['colorTag']}] {anchor['label']} @ ({anchor['x']:.1f}, {anchor['y']:.1f})")
    return 0 if out["stages"]["edges"]["status"] == "ok" else 2


if __name__ == "__main__":
    sys.exit(main())
