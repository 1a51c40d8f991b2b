"""Luma reduction stage."""

from scanlens.luma.reduce import to_intensity, validate_raster

__all__ = ["to_intensity", "validate_raster"]
