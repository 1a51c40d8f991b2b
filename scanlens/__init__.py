"""scanlens — deterministic Canny edge detection with positional anchors."""

from scanlens.edges.canny import compute_canny_edges, detect_edges
from scanlens.errors import ComputationError, EdgeDetectionError, InvalidInputError, PixelAccessError
from scanlens.hysteresis.link import FixedThresholds, RelativeThresholds
from scanlens.types import AnchorPoint, BoundingBox, ColorTag, EdgeDetectionResult, RasterImage

__version__ = "0.1.0"

__all__ = [
    "AnchorPoint",
    "BoundingBox",
    "ColorTag",
    "ComputationError",
    "EdgeDetectionError",
    "EdgeDetectionResult",
    "FixedThresholds",
    "InvalidInputError",
    "PixelAccessError",
    "RasterImage",
    "RelativeThresholds",
    "compute_canny_edges",
    "detect_edges",
]
