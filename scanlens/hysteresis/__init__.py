"""Hysteresis thresholding and 8-connected edge linking."""

from scanlens.hysteresis.link import (
    FixedThresholds,
    RelativeThresholds,
    ThresholdPolicy,
    classify,
    hysteresis,
    link_edges,
    thresholds_from_config,
)

__all__ = [
    "FixedThresholds",
    "RelativeThresholds",
    "ThresholdPolicy",
    "classify",
    "hysteresis",
    "link_edges",
    "thresholds_from_config",
]
