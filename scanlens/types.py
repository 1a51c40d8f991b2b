"""Data model shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional, Tuple, Union

import numpy as np

# Dense (height, width) float64 array, row-major. Read-only once produced.
ScalarField = np.ndarray

PixelBuffer = Union[bytes, bytearray, memoryview, np.ndarray]

EDGE = 255
NOT_EDGE = 0


class EdgeClass(IntEnum):
    """Tri-state classification used between thresholding and linking."""

    NONE = 0
    WEAK = 1
    STRONG = 2


class ColorTag(str, Enum):
    """Semantic group of an anchor: central axis, lateral field, base."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


@dataclass(frozen=True)
class RasterImage:
    """Row-major RGBA buffer, 8 bits per channel. Owned by the caller."""

    width: int
    height: int
    pixels: PixelBuffer = field(repr=False)

    @property
    def expected_length(self) -> int:
        return 4 * self.width * self.height


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive pixel bounds of all edge pixels."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def to_dict(self) -> dict[str, int]:
        return {"minX": self.min_x, "minY": self.min_y, "maxX": self.max_x, "maxY": self.max_y}


@dataclass(frozen=True)
class AnchorPoint:
    """A labeled region-of-interest marker positioned inside the bounding box."""

    id: str
    x: float
    y: float
    color_tag: ColorTag
    label: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "colorTag": self.color_tag.value,
            "label": self.label,
            "description": self.description,
        }


@dataclass(frozen=True, eq=False)
class EdgeDetectionResult:
    """
    Aggregate returned by the pipeline.

    mask is uint8 (height, width): 0 = not-edge, 255 = edge.
    bounding_box is None iff the mask holds no edge pixel, in which case
    anchors is empty.
    """

    mask: np.ndarray = field(repr=False)
    bounding_box: Optional[BoundingBox]
    anchors: Tuple[AnchorPoint, ...] = ()

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(self.mask == EDGE))

    def mask_bytes(self) -> bytes:
        """Flat row-major mask, width*height bytes."""
        return self.mask.tobytes()

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "edge_pixels": self.edge_count,
            "bounding_box": self.bounding_box.to_dict() if self.bounding_box else None,
            "anchors": [a.to_dict() for a in self.anchors],
        }
