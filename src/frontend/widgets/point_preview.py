"""Zoomable scan view that reports clicked points and draws the current pick."""
from __future__ import annotations

from typing import List, Optional, Tuple

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QLabel, QScrollArea

from frontend.widgets import style


class PointPreviewView(QScrollArea):
    """Scrollable label with Ctrl+wheel zoom, middle-button panning and point picking.

    Points travel in normalized image coordinates (0..1 along each axis) so the
    caller can map them to the physical extent of whatever field is shown.
    """

    pointPlaced = pyqtSignal(float, float)  # normalized x, y

    def __init__(self, parent=None, *, picking: bool = True, size: int = 512):
        super().__init__(parent)
        self.setWidgetResizable(False)
        self.setFrameShape(QScrollArea.Shape.NoFrame)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumSize(size, size)

        self._label = QLabel("No image")
        self._label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._label.setStyleSheet("background: #f0f0f0; border: 1px solid gray;")
        self.setWidget(self._label)

        self._picking = picking
        self._scale = 1.0
        self._min_scale = 0.1
        self._max_scale = 16.0
        self._base_pixmap: Optional[QPixmap] = None
        self._markers: List[Tuple[float, float]] = []
        self._pan_origin: Optional[QPointF] = None

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def set_pixmap(self, pixmap: Optional[QPixmap], *, keep_scale: bool = False) -> None:
        self._base_pixmap = pixmap
        if pixmap is None or pixmap.isNull():
            self._label.setText("Image error")
            self._label.setPixmap(QPixmap())
            return
        self._label.setText("")
        if keep_scale:
            self._apply_scale()
        else:
            self.fit_to_view()

    def set_markers(self, points: List[Tuple[float, float]]) -> None:
        """Normalized positions to mark (the current image's picks)."""
        self._markers = list(points)
        self._apply_scale()

    def set_picking(self, enabled: bool) -> None:
        self._picking = enabled

    def fit_to_view(self) -> None:
        if not self._base_pixmap or self._base_pixmap.isNull():
            return
        viewport = self.viewport().size()
        if viewport.width() <= 0 or viewport.height() <= 0:
            self._scale = 1.0
        else:
            fit_x = viewport.width() / self._base_pixmap.width()
            fit_y = viewport.height() / self._base_pixmap.height()
            self._scale = max(self._min_scale, min(self._max_scale, min(fit_x, fit_y)))
        self._apply_scale()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def wheelEvent(self, event):  # noqa: N802 (Qt API name)
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta().y()
            if delta != 0:
                self._set_scale(self._scale * (1.15 if delta > 0 else 0.85))
            event.accept()
            return
        super().wheelEvent(event)

    def mousePressEvent(self, event):  # noqa: N802
        if event.button() == Qt.MouseButton.MiddleButton:
            self._pan_origin = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):  # noqa: N802
        if self._pan_origin is not None:
            delta = event.position() - self._pan_origin
            self._pan_origin = event.position()
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - int(delta.x()))
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - int(delta.y()))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):  # noqa: N802
        if event.button() == Qt.MouseButton.MiddleButton and self._pan_origin is not None:
            self._pan_origin = None
            self.unsetCursor()
            event.accept()
            return
        if self._picking and event.button() == Qt.MouseButton.LeftButton:
            pos = self._image_pos(event)
            if pos is not None:
                self.pointPlaced.emit(pos.x(), pos.y())
            event.accept()
            return
        super().mouseReleaseEvent(event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _image_pos(self, event) -> Optional[QPointF]:
        pix = self._label.pixmap()
        if pix is None or pix.isNull():
            return None
        label_pos = self._label.mapFrom(self.viewport(), event.position().toPoint())
        if not (0 <= label_pos.x() <= pix.width() and 0 <= label_pos.y() <= pix.height()):
            return None
        return QPointF(label_pos.x() / pix.width(), label_pos.y() / pix.height())

    def _set_scale(self, scale: float) -> None:
        if not self._base_pixmap or self._base_pixmap.isNull():
            return
        scale = max(self._min_scale, min(self._max_scale, scale))
        if abs(scale - self._scale) < 1e-3:
            return
        self._scale = scale
        self._apply_scale()

    def _apply_scale(self) -> None:
        if not self._base_pixmap or self._base_pixmap.isNull():
            self._label.setPixmap(QPixmap())
            return
        width = max(1, int(self._base_pixmap.width() * self._scale))
        height = max(1, int(self._base_pixmap.height() * self._scale))
        scaled = self._base_pixmap.scaled(
            width,
            height,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.FastTransformation,
        )
        if self._markers:
            self._paint_markers(scaled)
        self._label.setPixmap(scaled)
        self._label.resize(scaled.size())

    def _paint_markers(self, pixmap: QPixmap) -> None:
        painter = QPainter(pixmap)
        pen = QPen(QColor(style.POINT_MARKER_COLOR))
        pen.setWidth(2)
        painter.setPen(pen)
        radius = style.POINT_MARKER_RADIUS
        for x_norm, y_norm in self._markers:
            cx = int(x_norm * pixmap.width())
            cy = int(y_norm * pixmap.height())
            painter.drawEllipse(cx - radius, cy - radius, 2 * radius, 2 * radius)
            painter.drawLine(cx - 2 * radius, cy, cx + 2 * radius, cy)
            painter.drawLine(cx, cy - 2 * radius, cx, cy + 2 * radius)
        painter.end()
