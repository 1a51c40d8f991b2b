import numpy as np
import pytest

from scanlens.suppression.nms import Band, quantize_direction, suppress_non_maxima


@pytest.mark.parametrize(
    "angle, band",
    [
        (0.0, Band.HORIZONTAL),
        (22.4999, Band.HORIZONTAL),
        (22.5, Band.DIAGONAL),
        (45.0, Band.DIAGONAL),
        (67.4999, Band.DIAGONAL),
        (67.5, Band.VERTICAL),
        (90.0, Band.VERTICAL),
        (112.4999, Band.VERTICAL),
        (112.5, Band.ANTI_DIAGONAL),
        (157.4999, Band.ANTI_DIAGONAL),
        (157.5, Band.HORIZONTAL),
        (179.9999, Band.HORIZONTAL),
        (180.0, Band.HORIZONTAL),
        (-45.0, Band.ANTI_DIAGONAL),
        (-90.0, Band.VERTICAL),
        (-135.0, Band.DIAGONAL),
        (-1e-15, Band.HORIZONTAL),
    ],
)
def test_band_boundaries_are_half_open(angle, band):
    assert quantize_direction(np.array([angle]))[0] == band


def test_opposite_directions_share_a_band():
    angles = np.linspace(-179.0, 180.0, 720)
    opposite = np.where(angles > 0, angles - 180.0, angles + 180.0)
    np.testing.assert_array_equal(quantize_direction(angles), quantize_direction(opposite))


def test_horizontal_ridge_keeps_only_peak():
    magnitude = np.zeros((3, 7))
    magnitude[1, 1:6] = [1.0, 3.0, 7.0, 4.0, 2.0]
    out = suppress_non_maxima(magnitude, np.zeros_like(magnitude))

    expected = np.zeros((3, 7))
    expected[1, 3] = 7.0
    np.testing.assert_array_equal(out, expected)


def test_plateau_keeps_equal_neighbors():
    magnitude = np.zeros((3, 6))
    magnitude[1, 2:4] = 5.0
    out = suppress_non_maxima(magnitude, np.zeros_like(magnitude))
    assert out[1, 2] == 5.0 and out[1, 3] == 5.0


def test_vertical_band_compares_rows():
    magnitude = np.zeros((5, 3))
    magnitude[1:4, 1] = [2.0, 6.0, 9.0]
    out = suppress_non_maxima(magnitude, np.full_like(magnitude, 90.0))
    assert out[2, 1] == 0.0
    assert out[3, 1] == 9.0


def test_diagonal_band_follows_gradient():
    direction = np.full((3, 3), 45.0)

    along = np.zeros((3, 3))
    along[1, 1], along[2, 2] = 5.0, 6.0
    assert suppress_non_maxima(along, direction)[1, 1] == 0.0

    across = np.zeros((3, 3))
    across[1, 1], across[2, 0] = 5.0, 6.0
    assert suppress_non_maxima(across, direction)[1, 1] == 5.0


def test_anti_diagonal_band_follows_gradient():
    direction = np.full((3, 3), 135.0)

    along = np.zeros((3, 3))
    along[1, 1], along[0, 2] = 5.0, 6.0
    assert suppress_non_maxima(along, direction)[1, 1] == 0.0

    across = np.zeros((3, 3))
    across[1, 1], across[0, 0] = 5.0, 6.0
    assert suppress_non_maxima(across, direction)[1, 1] == 5.0


def test_border_neighbors_read_as_zero():
    magnitude = np.array([[4.0, 1.0]])
    out = suppress_non_maxima(magnitude, np.zeros_like(magnitude))
    np.testing.assert_array_equal(out, [[4.0, 0.0]])


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError):
        suppress_non_maxima(np.zeros((3, 3)), np.zeros((3, 4)))
