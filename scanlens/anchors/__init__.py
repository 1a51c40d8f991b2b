"""Region summary stage — bounding box and anchor points."""

from scanlens.anchors.summarize import (
    ANCHOR_LAYOUT,
    AnchorStrategy,
    FractionalAnchorStrategy,
    bounding_box,
    summarize_region,
)

__all__ = [
    "ANCHOR_LAYOUT",
    "AnchorStrategy",
    "FractionalAnchorStrategy",
    "bounding_box",
    "summarize_region",
]
