"""Non-maximum suppression stage."""

from scanlens.suppression.nms import BAND_OFFSETS, Band, quantize_direction, suppress_non_maxima

__all__ = ["BAND_OFFSETS", "Band", "quantize_direction", "suppress_non_maxima"]
