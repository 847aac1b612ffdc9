"""Grayscale thumbnail rendering for scan fields."""
from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

FLAT_GRAY = 128


def normalize_to_uint8(data: np.ndarray) -> np.ndarray:
    """Stretch finite values to 0..255; flat or all-NaN data renders mid gray."""
    finite = np.isfinite(data)
    if not finite.any():
        return np.full(data.shape, FLAT_GRAY, dtype=np.uint8)
    lo = float(data[finite].min())
    hi = float(data[finite].max())
    if hi - lo <= 0:
        return np.full(data.shape, FLAT_GRAY, dtype=np.uint8)
    scaled = (np.where(finite, data, lo) - lo) * (255.0 / (hi - lo))
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


def fit_size(shape: Tuple[int, int], width: int, height: int) -> Tuple[int, int]:
    """Largest (w, h) inside ``width x height`` keeping the aspect ratio of ``shape`` (rows, cols)."""
    rows, cols = shape
    scale = min(width / cols, height / rows)
    return max(1, int(round(cols * scale))), max(1, int(round(rows * scale)))


def render_thumbnail(data: np.ndarray, width: int, height: int) -> np.ndarray:
    """Render ``data`` as a uint8 grayscale image fitting inside ``width x height``."""
    if width <= 0 or height <= 0:
        raise ValueError("Thumbnail size must be positive")
    gray = normalize_to_uint8(data)
    target_w, target_h = fit_size(gray.shape, width, height)
    if (target_h, target_w) == gray.shape:
        return gray
    shrinking = target_w < gray.shape[1]
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_NEAREST
    return cv2.resize(gray, (target_w, target_h), interpolation=interpolation)
