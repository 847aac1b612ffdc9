"""Preview window of a drift-correction session: pick a point, step, run."""
from __future__ import annotations

from typing import List, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from backend.services.offset_extractor import DriftOffset
from backend.services.preview_controller import PreviewController
from common.log_utils import log_debug
from frontend.utils.qt_images import field_to_pixmap
from frontend.utils.ui_guards import guarded
from frontend.utils.ui_messages import (DRIFT_WINDOW_TITLE, PREVIEW_HINT,
                                        format_point_status,
                                        format_preview_position)
from frontend.widgets import style
from frontend.widgets.point_preview import PointPreviewView


class DriftWindow(QWidget):
    """Shows ``selected[cursor]`` with ``<``, ``Ok`` and ``>`` controls."""

    offsetsComputed = pyqtSignal(list)

    def __init__(self, controller: PreviewController, parent=None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.setWindowTitle(DRIFT_WINDOW_TITLE)
        self._fitted = False
        self._build_ui()

        controller.previewChanged.connect(self._on_preview_changed)
        controller.pointChanged.connect(self._on_point_changed)
        controller.surface.overlayChanged.connect(self._refresh_markers)
        self._refresh_all()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        self.label_position = QLabel(self)
        self.label_position.setStyleSheet(style.heading_style())
        layout.addWidget(self.label_position)

        self.view = PointPreviewView(self, size=self.controller.surface.size)
        self.view.pointPlaced.connect(self._on_point_placed)
        layout.addWidget(self.view, 1)

        self.label_point = QLabel(PREVIEW_HINT, self)
        self.label_point.setWordWrap(True)
        layout.addWidget(self.label_point)

        row = QHBoxLayout()
        self.btn_prev = QPushButton("<", self)
        self.btn_prev.setToolTip("Previous image")
        self.btn_prev.clicked.connect(self._handle_prev)
        self.btn_ok = QPushButton("Ok", self)
        self.btn_ok.setToolTip("Compute offsets for all images")
        self.btn_ok.clicked.connect(self._handle_run)
        self.btn_next = QPushButton(">", self)
        self.btn_next.setToolTip("Next image")
        self.btn_next.clicked.connect(self._handle_next)
        row.addWidget(self.btn_prev)
        row.addStretch(1)
        row.addWidget(self.btn_ok)
        row.addStretch(1)
        row.addWidget(self.btn_next)
        layout.addLayout(row)

    # ------------------------------------------------------------------
    # Button handlers
    # ------------------------------------------------------------------
    def _handle_prev(self) -> None:
        guarded(self, DRIFT_WINDOW_TITLE, self.controller.previous)

    def _handle_next(self) -> None:
        guarded(self, DRIFT_WINDOW_TITLE, self.controller.next)

    def _handle_run(self) -> None:
        offsets: Optional[List[DriftOffset]] = guarded(self, DRIFT_WINDOW_TITLE, self.controller.run)
        if offsets is not None:
            self.offsetsComputed.emit(offsets)

    def _on_point_placed(self, x_norm: float, y_norm: float) -> None:
        field = self.controller.surface.backing_field
        x = x_norm * field.x_real
        y = y_norm * field.y_real
        log_debug(f"Click at ({x_norm:.3f}, {y_norm:.3f}) -> ({x:.6g}, {y:.6g})", "PREVIEW")
        guarded(self, DRIFT_WINDOW_TITLE, lambda: self.controller.place_point(x, y))

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def _on_preview_changed(self, _cursor: int, _total: int) -> None:
        self._refresh_all()

    def _on_point_changed(self, _cursor: int) -> None:
        self._refresh_markers()

    def _refresh_all(self) -> None:
        controller = self.controller
        self.label_position.setText(
            format_preview_position(controller.cursor, len(controller.session), controller.title)
        )
        self.view.set_pixmap(field_to_pixmap(controller.surface.buffer), keep_scale=self._fitted)
        self._fitted = True
        self.btn_prev.setEnabled(controller.can_go_previous())
        self.btn_next.setEnabled(controller.can_go_next())
        self._refresh_markers()

    def _refresh_markers(self) -> None:
        field = self.controller.surface.backing_field
        points = self.controller.visible_points()
        self.view.set_markers([(x / field.x_real, y / field.y_real) for x, y in points])
        if points:
            x, y = points[-1]
            self.label_point.setText(format_point_status(x, y, field.si_unit_xy))
        else:
            self.label_point.setText(PREVIEW_HINT)

    def closeEvent(self, event):  # noqa: N802
        session = self.controller.session
        if not session.is_closed:
            session.close()
        super().closeEvent(event)
