import numpy as np
import pytest

from backend.utils.fields import ImageField
from backend.utils.leveling import fit_plane, level_plane, plane_level


def _plane(rows, cols, a, bx, by):
    r, c = np.indices((rows, cols), dtype=np.float64)
    return a + bx * c + by * r


def test_fit_plane_recovers_coefficients():
    a, bx, by = fit_plane(_plane(20, 30, 1.5, 0.25, -0.75))
    assert a == pytest.approx(1.5)
    assert bx == pytest.approx(0.25)
    assert by == pytest.approx(-0.75)


def test_level_plane_flattens_tilted_field():
    field = ImageField(_plane(16, 24, 4.0, 0.3, 0.1), x_real=24.0, y_real=16.0)
    level_plane(field)
    assert np.allclose(field.data, 0.0, atol=1e-9)


def test_level_plane_is_idempotent(field_factory):
    field = field_factory(32, 32, 1.0, 1.0)
    level_plane(field)
    once = field.data.copy()
    level_plane(field)
    assert np.allclose(field.data, once, atol=1e-9)


def test_level_plane_bumps_revision(field_factory):
    field = field_factory(8, 8, 1.0, 1.0)
    before = field.revision
    level_plane(field)
    assert field.revision == before + 1


def test_fit_plane_ignores_nan():
    data = _plane(10, 10, 2.0, 1.0, 0.0)
    data[3, 4] = np.nan
    a, bx, by = fit_plane(data)
    assert (a, bx, by) == pytest.approx((2.0, 1.0, 0.0))


def test_fit_plane_tiny_input_is_constant():
    assert fit_plane(np.array([[5.0, np.nan]])) == (5.0, 0.0, 0.0)


def test_plane_level_in_place():
    data = _plane(4, 4, 1.0, 0.0, 0.0)
    plane_level(data, 1.0, 0.0, 0.0)
    assert np.count_nonzero(data) == 0
