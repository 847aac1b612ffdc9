"""Mean plane subtraction for scan height data."""
from __future__ import annotations

from typing import Tuple

import numpy as np

from backend.utils.fields import ImageField


def fit_plane(data: np.ndarray) -> Tuple[float, float, float]:
    """Least-squares plane ``z = a + bx * col + by * row`` over finite pixels.

    Returns:
        Tuple ``(a, bx, by)``. Fields with fewer than three finite pixels fit a
        constant plane.
    """
    rows, cols = np.indices(data.shape, dtype=np.float64)
    mask = np.isfinite(data)
    z = data[mask]
    if z.size < 3:
        return (float(z.mean()) if z.size else 0.0), 0.0, 0.0

    design = np.column_stack((np.ones(z.size), cols[mask], rows[mask]))
    coeffs, *_ = np.linalg.lstsq(design, z, rcond=None)
    a, bx, by = (float(c) for c in coeffs)
    return a, bx, by


def plane_level(data: np.ndarray, a: float, bx: float, by: float) -> None:
    """Subtract the plane from ``data`` in place."""
    rows, cols = np.indices(data.shape, dtype=np.float64)
    data -= a + bx * cols + by * rows


def level_plane(image: ImageField) -> Tuple[float, float, float]:
    """Fit and subtract the mean plane of ``image`` in place. Idempotent."""
    a, bx, by = fit_plane(image.data)
    plane_level(image.data, a, bx, by)
    image.data_changed()
    return a, bx, by
