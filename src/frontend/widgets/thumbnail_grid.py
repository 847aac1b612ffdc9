"""Icon grid of titled scan thumbnails."""
from __future__ import annotations

from typing import List, Optional, Sequence

from PyQt6.QtCore import QSize, Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractItemView, QListView, QListWidget, QListWidgetItem

from backend.models import ImageRef
from backend.services.overview_model import ThumbnailEntry
from config import get_config
from frontend.utils.qt_images import thumbnail_icon
from frontend.widgets import style

REF_ROLE = Qt.ItemDataRole.UserRole


class ThumbnailGrid(QListWidget):
    refActivated = pyqtSignal(object)  # ImageRef

    def __init__(self, entries: Sequence[ThumbnailEntry] = (), parent=None, *, multi_select: bool = False) -> None:
        super().__init__(parent)
        size = get_config().thumbnail_size
        self.setViewMode(QListView.ViewMode.IconMode)
        self.setResizeMode(QListView.ResizeMode.Adjust)
        self.setMovement(QListView.Movement.Static)
        self.setIconSize(QSize(size, size))
        self.setGridSize(QSize(size + 24, size + 40))
        self.setWordWrap(True)
        self.setSpacing(6)
        self.setStyleSheet(style.icon_view_style())
        mode = (
            QAbstractItemView.SelectionMode.ExtendedSelection
            if multi_select
            else QAbstractItemView.SelectionMode.SingleSelection
        )
        self.setSelectionMode(mode)
        self.itemActivated.connect(self._on_item_activated)
        self.set_entries(entries)

    def set_entries(self, entries: Sequence[ThumbnailEntry]) -> None:
        self.clear()
        for entry in entries:
            item = QListWidgetItem(thumbnail_icon(entry.thumbnail), entry.title)
            item.setData(REF_ROLE, (entry.ref.collection_id, entry.ref.image_id))
            item.setToolTip(f"{entry.title} ({entry.ref})")
            self.addItem(item)

    def ref_at(self, row: int) -> Optional[ImageRef]:
        item = self.item(row)
        if item is None:
            return None
        collection_id, image_id = item.data(REF_ROLE)
        return ImageRef(collection_id, image_id)

    def selected_rows(self) -> List[int]:
        return sorted(self.row(item) for item in self.selectedItems())

    def fit_height(self) -> None:
        """Size the grid to its content so several grids can stack in one scroll area."""
        columns = max(1, self.viewport().width() // max(1, self.gridSize().width()))
        rows = max(1, -(-self.count() // columns))
        self.setMinimumHeight(rows * self.gridSize().height() + 12)

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        ref = self.ref_at(self.row(item))
        if ref is not None:
            self.refActivated.emit(ref)
