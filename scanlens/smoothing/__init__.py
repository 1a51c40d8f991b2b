"""Smoothing stage: fixed 5-tap binomial blur, separable."""

from scanlens.smoothing.gaussian import KERNEL, KERNEL_NORM, SMOOTH_INSET, smooth

__all__ = ["KERNEL", "KERNEL_NORM", "SMOOTH_INSET", "smooth"]
