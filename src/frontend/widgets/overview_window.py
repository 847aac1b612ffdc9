"""Icon overview windows for one collection or for a whole folder of scans."""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from PyQt6.QtWidgets import (QApplication, QLabel, QScrollArea, QVBoxLayout,
                             QWidget)

from backend.models import ImageRef
from backend.services.overview_model import ThumbnailEntry
from config import get_config
from frontend.widgets import style
from frontend.widgets.thumbnail_grid import ThumbnailGrid

Section = Tuple[Optional[str], Sequence[ThumbnailEntry]]


def present_if_exists(title: str) -> bool:
    """Raise an already open top-level window with this title."""
    app = QApplication.instance()
    if app is None:
        return False
    for widget in app.topLevelWidgets():
        if widget.isVisible() and widget.windowTitle() == title:
            widget.raise_()
            widget.activateWindow()
            return True
    return False


class OverviewWindow(QWidget):
    """One grid per section; a single untitled section is a container overview."""

    def __init__(
        self,
        title: str,
        sections: Sequence[Section],
        on_activate: Callable[[ImageRef], None],
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        width, height = get_config().overview_window_size
        self.resize(width, height)
        self._on_activate = on_activate
        self.grids: List[ThumbnailGrid] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        if len(sections) == 1 and sections[0][0] is None:
            layout.addWidget(self._make_grid(sections[0][1], self), 1)
            return

        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        body = QWidget(scroll)
        body_layout = QVBoxLayout(body)
        body_layout.setSpacing(10)
        for heading, entries in sections:
            if heading:
                label = QLabel(heading, body)
                label.setStyleSheet(style.heading_style())
                body_layout.addWidget(label)
            grid = self._make_grid(entries, body)
            grid.fit_height()
            body_layout.addWidget(grid)
        body_layout.addStretch(1)
        scroll.setWidget(body)
        layout.addWidget(scroll, 1)

    def _make_grid(self, entries: Sequence[ThumbnailEntry], parent: QWidget) -> ThumbnailGrid:
        grid = ThumbnailGrid(entries, parent)
        grid.refActivated.connect(self._on_activate)
        self.grids.append(grid)
        return grid

    def resizeEvent(self, event):  # noqa: N802
        super().resizeEvent(event)
        if len(self.grids) > 1:
            for grid in self.grids:
                grid.fit_height()
