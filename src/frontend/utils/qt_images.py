"""numpy -> Qt image conversion for thumbnails and previews."""
from __future__ import annotations

import numpy as np
from PyQt6.QtGui import QIcon, QImage, QPixmap

from backend.utils.thumbnails import normalize_to_uint8


def gray_to_qimage(gray: np.ndarray) -> QImage:
    """Wrap a uint8 grayscale array; the result owns a copy of the pixels."""
    gray = np.ascontiguousarray(gray, dtype=np.uint8)
    height, width = gray.shape
    image = QImage(gray.data, width, height, gray.strides[0], QImage.Format.Format_Grayscale8)
    return image.copy()


def gray_to_pixmap(gray: np.ndarray) -> QPixmap:
    return QPixmap.fromImage(gray_to_qimage(gray))


def field_to_pixmap(data: np.ndarray) -> QPixmap:
    """Full-resolution pixmap of height data (auto-ranged)."""
    return gray_to_pixmap(normalize_to_uint8(data))


def thumbnail_icon(gray: np.ndarray) -> QIcon:
    return QIcon(gray_to_pixmap(gray))
