"""Bounding box of the edge mask and positional anchor placement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import numpy as np

from scanlens.types import EDGE, AnchorPoint, BoundingBox, ColorTag


class AnchorSlot(NamedTuple):
    id: str
    fx: float               # fraction of box width from min_x
    fy: float               # fraction of box height from min_y
    color_tag: ColorTag
    label: str
    description: str


# Fixed output contract consumed by the viewer's markers. Order matters.
ANCHOR_LAYOUT: tuple[AnchorSlot, ...] = (
    AnchorSlot("roi-upper", 0.5, 0.2, ColorTag.PRIMARY,
               "Contrast Area", "Region with high detected edge density."),
    AnchorSlot("roi-central", 0.5, 0.5, ColorTag.PRIMARY,
               "Central Axis", "Midpoint of the detected structure along its central axis."),
    AnchorSlot("roi-left", 0.2, 0.55, ColorTag.SECONDARY,
               "Left Lateral Field", "Left lateral field of the detected structure."),
    AnchorSlot("roi-right", 0.8, 0.55, ColorTag.SECONDARY,
               "Right Lateral Field", "Right lateral field of the detected structure."),
    AnchorSlot("roi-base", 0.5, 0.9, ColorTag.TERTIARY,
               "Base Region", "Lower band of the detected structure."),
)


class AnchorStrategy(ABC):
    """Places anchors for a non-empty edge region."""

    @abstractmethod
    def place(self, box: BoundingBox, mask: np.ndarray) -> tuple[AnchorPoint, ...]:
        ...


class FractionalAnchorStrategy(AnchorStrategy):
    """Anchors at fixed fractional offsets inside the bounding box."""

    def __init__(self, layout: tuple[AnchorSlot, ...] = ANCHOR_LAYOUT):
        self.layout = layout

    def place(self, box: BoundingBox, mask: np.ndarray) -> tuple[AnchorPoint, ...]:
        return tuple(
            AnchorPoint(
                id=slot.id,
                x=box.min_x + box.width * slot.fx,
                y=box.min_y + box.height * slot.fy,
                color_tag=slot.color_tag,
                label=slot.label,
                description=slot.description,
            )
            for slot in self.layout
        )


def bounding_box(mask: np.ndarray) -> Optional[BoundingBox]:
    """Smallest inclusive box around every EDGE pixel, or None if there are none."""
    ys, xs = np.nonzero(mask == EDGE)
    if xs.size == 0:
        return None
    return BoundingBox(
        min_x=int(xs.min()),
        min_y=int(ys.min()),
        max_x=int(xs.max()),
        max_y=int(ys.max()),
    )


def summarize_region(
    mask: np.ndarray,
    strategy: AnchorStrategy | None = None,
) -> tuple[Optional[BoundingBox], tuple[AnchorPoint, ...]]:
    """Return (bounding_box, anchors); anchors are empty iff the box is None."""
    box = bounding_box(mask)
    if box is None:
        return None, ()
    strategy = strategy or FractionalAnchorStrategy()
    return box, strategy.place(box, mask)
