"""Error taxonomy for the edge-detection pipeline."""

from __future__ import annotations


class EdgeDetectionError(Exception):
    """Base class for every failure the pipeline reports to its caller."""


class InvalidInputError(EdgeDetectionError, ValueError):
    """Malformed RasterImage: bad dimensions or buffer length mismatch."""


class PixelAccessError(EdgeDetectionError, PermissionError):
    """Pixel data could not be read from the image source.

    Raised by the loaders before the pipeline is called; ``detect_edges``
    itself requires readable pixel data.
    """


class ComputationError(EdgeDetectionError, ArithmeticError):
    """A stage produced non-finite values. No mask is emitted."""
