import numpy as np
import pytest

from backend.utils.thumbnails import FLAT_GRAY, fit_size, normalize_to_uint8, render_thumbnail


def test_normalize_stretches_range():
    gray = normalize_to_uint8(np.array([[0.0, 1.0], [2.0, 4.0]]))
    assert gray.dtype == np.uint8
    assert gray.min() == 0
    assert gray.max() == 255


def test_normalize_flat_is_mid_gray():
    gray = normalize_to_uint8(np.full((3, 3), 7.0))
    assert np.all(gray == FLAT_GRAY)


def test_normalize_all_nan_is_mid_gray():
    gray = normalize_to_uint8(np.full((2, 2), np.nan))
    assert np.all(gray == FLAT_GRAY)


@pytest.mark.parametrize(
    "shape, box, expected",
    [
        ((100, 200), (50, 50), (50, 25)),
        ((200, 100), (50, 50), (25, 50)),
        ((10, 10), (40, 40), (40, 40)),
    ],
)
def test_fit_size_keeps_aspect(shape, box, expected):
    assert fit_size(shape, *box) == expected


def test_render_thumbnail_fits_box():
    data = np.random.default_rng(0).normal(size=(120, 60))
    thumb = render_thumbnail(data, 40, 40)
    assert thumb.shape == (40, 20)
    assert thumb.dtype == np.uint8


def test_render_thumbnail_same_size_skips_resize():
    data = np.arange(16, dtype=np.float64).reshape(4, 4)
    thumb = render_thumbnail(data, 4, 4)
    assert thumb[0, 0] == 0
    assert thumb[3, 3] == 255


def test_render_thumbnail_rejects_empty_box():
    with pytest.raises(ValueError):
        render_thumbnail(np.zeros((4, 4)), 0, 10)
