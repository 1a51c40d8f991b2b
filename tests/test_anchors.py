import numpy as np
import pytest

from scanlens.anchors.summarize import (
    ANCHOR_LAYOUT,
    AnchorStrategy,
    bounding_box,
    summarize_region,
)
from scanlens.types import EDGE, AnchorPoint, BoundingBox, ColorTag


def _mask(shape, points):
    mask = np.zeros(shape, dtype=np.uint8)
    for x, y in points:
        mask[y, x] = EDGE
    return mask


def test_empty_mask_has_no_box_and_no_anchors():
    box, anchors = summarize_region(np.zeros((10, 10), dtype=np.uint8))
    assert box is None
    assert anchors == ()


def test_bounding_box_is_minimal_and_inclusive():
    points = [(3, 7), (12, 2), (8, 15)]
    mask = _mask((20, 20), points)
    box = bounding_box(mask)

    assert box == BoundingBox(min_x=3, min_y=2, max_x=12, max_y=15)
    ys, xs = np.nonzero(mask)
    assert all(box.contains(x, y) for x, y in zip(xs, ys))
    # shrinking any side would drop an edge pixel
    assert (xs == box.min_x).any() and (xs == box.max_x).any()
    assert (ys == box.min_y).any() and (ys == box.max_y).any()


def test_single_pixel_box():
    box, anchors = summarize_region(_mask((5, 5), [(2, 3)]))
    assert box == BoundingBox(2, 3, 2, 3)
    assert all((a.x, a.y) == (2.0, 3.0) for a in anchors)


def test_fixed_anchor_layout():
    mask = _mask((120, 120), [(10, 20), (110, 100)])
    box, anchors = summarize_region(mask)

    assert [a.id for a in anchors] == ["roi-upper", "roi-central", "roi-left", "roi-right", "roi-base"]
    positions = [(a.x, a.y) for a in anchors]
    assert positions == [
        pytest.approx((60.0, 36.0)),
        pytest.approx((60.0, 60.0)),
        pytest.approx((30.0, 64.0)),
        pytest.approx((90.0, 64.0)),
        pytest.approx((60.0, 92.0)),
    ]
    assert [a.color_tag for a in anchors] == [
        ColorTag.PRIMARY, ColorTag.PRIMARY, ColorTag.SECONDARY, ColorTag.SECONDARY, ColorTag.TERTIARY,
    ]
    assert anchors[0].label == "Contrast Area"
    assert all(box.contains(a.x, a.y) for a in anchors)
    assert len(anchors) == len(ANCHOR_LAYOUT)


def test_anchor_serialization():
    _, anchors = summarize_region(_mask((4, 4), [(1, 1)]))
    d = anchors[0].to_dict()
    assert d["colorTag"] == "primary"
    assert set(d) == {"id", "x", "y", "colorTag", "label", "description"}


def test_strategy_is_replaceable():
    class CenterOnly(AnchorStrategy):
        def place(self, box, mask):
            return (AnchorPoint("c", box.min_x + box.width / 2, box.min_y + box.height / 2,
                                ColorTag.TERTIARY, "Center", "Box center."),)

    _, anchors = summarize_region(_mask((10, 10), [(0, 0), (8, 4)]), strategy=CenterOnly())
    assert [(a.x, a.y) for a in anchors] == [(4.0, 2.0)]
