"""
Double thresholding and hysteresis linking.

Pixels >= high are STRONG, >= low are WEAK, the rest NONE. STRONG pixels seed
an explicit worklist; each popped pixel promotes its WEAK 8-neighbors to
STRONG and pushes them. WEAK pixels never reached are dropped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import numpy as np

from scanlens.types import EDGE, NOT_EDGE, EdgeClass, ScalarField

NEIGHBORS_8 = tuple((dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0))

# Floor for the relative policy's peak so a flat field classifies nothing
MIN_PEAK = 1e-9


# ---------------------------------------------------------------------------
# Threshold policies
# ---------------------------------------------------------------------------


class ThresholdPolicy(ABC):
    """Decides the (low, high) pair for one suppressed field."""

    name = "abstract"

    @abstractmethod
    def resolve(self, suppressed: ScalarField) -> tuple[float, float]:
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class FixedThresholds(ThresholdPolicy):
    """Absolute thresholds on the unnormalized Sobel scale. Default contract."""

    high: float = 40.0
    low: float = 15.0
    name = "fixed"

    def __post_init__(self) -> None:
        if not 0 <= self.low < self.high:
            raise ValueError(f"Need 0 <= low < high, got low={self.low}, high={self.high}")

    def resolve(self, suppressed: ScalarField) -> tuple[float, float]:
        return self.low, self.high

    def to_dict(self) -> dict[str, Any]:
        return {"policy": self.name, "low": self.low, "high": self.high}


@dataclass(frozen=True)
class RelativeThresholds(ThresholdPolicy):
    """high = high_ratio * max gradient, low = low_ratio * high."""

    high_ratio: float = 0.15
    low_ratio: float = 0.4
    name = "relative"

    def __post_init__(self) -> None:
        if not 0 < self.high_ratio <= 1:
            raise ValueError(f"high_ratio must be in (0, 1], got {self.high_ratio}")
        if not 0 < self.low_ratio < 1:
            raise ValueError(f"low_ratio must be in (0, 1), got {self.low_ratio}")

    def resolve(self, suppressed: ScalarField) -> tuple[float, float]:
        # The global maximum always survives suppression, so this is max gradient
        peak = max(float(suppressed.max()) if suppressed.size else 0.0, MIN_PEAK)
        high = self.high_ratio * peak
        return self.low_ratio * high, high

    def to_dict(self) -> dict[str, Any]:
        return {"policy": self.name, "high_ratio": self.high_ratio, "low_ratio": self.low_ratio}


def thresholds_from_config(cfg: dict[str, Any]) -> ThresholdPolicy:
    """Build a policy from the `thresholds` section of the pipeline config."""
    section = cfg.get("thresholds", cfg)
    policy = str(section.get("policy", "fixed")).lower()
    if policy == "fixed":
        return FixedThresholds(high=float(section.get("high", 40.0)), low=float(section.get("low", 15.0)))
    if policy == "relative":
        return RelativeThresholds(
            high_ratio=float(section.get("high_ratio", 0.15)),
            low_ratio=float(section.get("low_ratio", 0.4)),
        )
    raise ValueError(f"Unknown threshold policy: {policy}. Use 'fixed' or 'relative'.")


# ---------------------------------------------------------------------------
# Classification and linking
# ---------------------------------------------------------------------------


def classify(suppressed: ScalarField, low: float, high: float) -> np.ndarray:
    """Return an int8 array of EdgeClass values."""
    if not low < high:
        raise ValueError(f"low threshold must be below high, got low={low}, high={high}")
    classes = np.full(suppressed.shape, EdgeClass.NONE, dtype=np.int8)
    classes[suppressed >= low] = EdgeClass.WEAK
    classes[suppressed >= high] = EdgeClass.STRONG
    return classes


def link_edges(classes: np.ndarray) -> np.ndarray:
    """
    Propagate STRONG through 8-connected WEAK pixels with a LIFO worklist.

    Returns a new uint8 mask, EDGE (255) for linked pixels, NOT_EDGE (0)
    otherwise. The input array is left untouched.
    """
    h, w = classes.shape
    flat = classes.reshape(-1).copy()

    if np.any(flat == EdgeClass.WEAK):
        worklist = np.flatnonzero(flat == EdgeClass.STRONG).tolist()
        while worklist:
            cy, cx = divmod(worklist.pop(), w)
            for dy, dx in NEIGHBORS_8:
                ny, nx = cy + dy, cx + dx
                if 0 <= ny < h and 0 <= nx < w:
                    n = ny * w + nx
                    if flat[n] == EdgeClass.WEAK:
                        flat[n] = EdgeClass.STRONG
                        worklist.append(n)

    mask = np.where(flat == EdgeClass.STRONG, EDGE, NOT_EDGE).astype(np.uint8)
    return mask.reshape(h, w)


def hysteresis(suppressed: ScalarField, policy: ThresholdPolicy | None = None) -> np.ndarray:
    """Classify with the policy's thresholds, then link. Returns the edge mask."""
    policy = policy or FixedThresholds()
    low, high = policy.resolve(suppressed)
    return link_edges(classify(suppressed, low, high))
