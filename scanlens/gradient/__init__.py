"""Gradient stage: Sobel magnitude and direction."""

from scanlens.gradient.sobel import GRADIENT_INSET, SOBEL_X, SOBEL_Y, compute_gradient

__all__ = ["GRADIENT_INSET", "SOBEL_X", "SOBEL_Y", "compute_gradient"]
