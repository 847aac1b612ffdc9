"""Stand-alone data window for one image of the repository."""
from __future__ import annotations

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget

from backend.models import ImageRef
from backend.services.image_repository import ImageRepository
from config import get_config
from frontend.utils.qt_images import field_to_pixmap
from frontend.widgets.point_preview import PointPreviewView


class ImageWindow(QWidget):
    closed = pyqtSignal(object)  # ImageRef

    def __init__(self, repository: ImageRepository, ref: ImageRef, parent=None) -> None:
        super().__init__(parent)
        self.repository = repository
        self.ref = ref
        self.setWindowTitle(repository.get_title(ref))

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        self.view = PointPreviewView(self, picking=False, size=get_config().preview_size)
        layout.addWidget(self.view, 1)
        self.label_info = QLabel(self)
        layout.addWidget(self.label_info)

        repository.dataChanged.connect(self._on_data_changed)
        self._listening = True
        self.refresh(keep_scale=False)

    def refresh(self, keep_scale: bool = True) -> None:
        if not self.repository.resolves(self.ref):
            self.close()
            return
        field = self.repository.get_field(self.ref)
        self.view.set_pixmap(field_to_pixmap(field.data), keep_scale=keep_scale)
        self.label_info.setText(field.describe(self.repository.get_title(self.ref)))

    def _on_data_changed(self, collection_id: int, image_id: int) -> None:
        if (collection_id, image_id) == (self.ref.collection_id, self.ref.image_id):
            self.refresh()

    def closeEvent(self, event):  # noqa: N802
        if self._listening:
            self.repository.dataChanged.disconnect(self._on_data_changed)
            self._listening = False
        self.closed.emit(self.ref)
        super().closeEvent(event)
