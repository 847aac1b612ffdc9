"""Multi-select prompt choosing which open images enter a drift session."""
from __future__ import annotations

from typing import List, Optional

from PyQt6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QVBoxLayout

from backend.models import PendingSelection
from backend.services.selection_set import SelectionSet
from config import get_config
from frontend.utils.ui_messages import PROMPT_HINT, PROMPT_TITLE
from frontend.widgets.thumbnail_grid import ThumbnailGrid


class SubsetPromptDialog(QDialog):
    def __init__(self, selection: SelectionSet, parent=None) -> None:
        super().__init__(parent)
        self.selection = selection
        self.setWindowTitle(PROMPT_TITLE)
        width, height = get_config().overview_window_size
        self.resize(width, height)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.addWidget(QLabel(PROMPT_HINT, self))

        self.grid = ThumbnailGrid(selection.entries, self, multi_select=True)
        self.grid.itemSelectionChanged.connect(self._sync_selection)
        layout.addWidget(self.grid, 1)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Cancel | QDialogButtonBox.StandardButton.Ok,
            parent=self,
        )
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

        ok_button = self.buttons.button(QDialogButtonBox.StandardButton.Ok)
        ok_button.setDefault(True)
        ok_button.setEnabled(selection.can_confirm)
        selection.confirmAllowedChanged.connect(ok_button.setEnabled)

    def _sync_selection(self) -> None:
        self.selection.replace_selection(self.grid.selected_rows())

    def accept(self) -> None:  # noqa: D401 (Qt override)
        # OK is disabled while nothing is selected; keyboard Enter still lands here
        if not self.selection.can_confirm:
            return
        super().accept()

    @classmethod
    def ask(cls, selection: SelectionSet, parent=None) -> Optional[List[PendingSelection]]:
        """Run the prompt modally. Returns the ordered subset, or None if cancelled."""
        dialog = cls(selection, parent)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            return selection.confirm()
        selection.cancel()
        return None
