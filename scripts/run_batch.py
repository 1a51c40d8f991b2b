"""Batch-process a directory of images through the scanlens edge pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tqdm import tqdm

from scanlens.edges.canny import compute_canny_edges
from scanlens.errors import EdgeDetectionError
from scanlens.hysteresis.link import thresholds_from_config
from scanlens.utils import list_images, load_config

IMAGES_DIR = "data/scans"


def already_processed(image_id: str, output_dir: str) -> bool:
    """Check if this image already has an edge summary on disk."""
    return (Path(output_dir) / f"{image_id}_edges.json").exists()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Batch-run edge detection on all images in a directory")
    parser.add_argument("--image-dir", default=IMAGES_DIR, help="Directory of input images")
    parser.add_argument("--output-dir", default=None, help="Output directory (default: config output_dir)")
    parser.add_argument("--policy", default=None, choices=["fixed", "relative"],
                        help="Threshold policy (default: from config)")
    parser.add_argument("--config", default=None, help="Path to edges YAML config")
    parser.add_argument("--force", action="store_true", help="Reprocess even if output already exists")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    if args.policy:
        cfg["thresholds"]["policy"] = args.policy
    thresholds = thresholds_from_config(cfg)
    output_dir = args.output_dir or cfg["output_dir"]

    if not Path(args.image_dir).is_dir():
        print(f"Not a directory: {args.image_dir}")
        return 1
    image_paths = list_images(args.image_dir)
    if not image_paths:
        print(f"No images found in {args.image_dir}")
        return 1

    print(f"Found {len(image_paths)} images in {args.image_dir}")

    success, skipped, failed = 0, 0, 0
    for img_path in tqdm(image_paths, desc="Detecting edges"):
        image_id = img_path.stem

        if not args.force and already_processed(image_id, output_dir):
            tqdm.write(f"  SKIP {image_id} (already processed)")
            skipped += 1
            continue

        try:
            compute_canny_edges(str(img_path), output_dir, thresholds=thresholds, overlay_cfg=cfg["overlay"])
            success += 1
        except (EdgeDetectionError, OSError) as e:
            tqdm.write(f"  FAIL {image_id}: {e}")
            failed += 1

    print(f"\nBatch complete: {success} ok | {skipped} skipped | {failed} failed")
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
