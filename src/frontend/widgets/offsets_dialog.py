"""Result dialog listing the per-image offsets of a drift run."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from PyQt6.QtWidgets import (QDialog, QDialogButtonBox, QFileDialog,
                             QHeaderView, QLabel, QMessageBox, QPushButton,
                             QTableWidget, QTableWidgetItem, QVBoxLayout)

from backend.services.offset_extractor import DriftOffset, save_offsets
from backend.utils.table_writer import UNSET_CELL, format_offsets_table
from config import get_config
from frontend.utils.ui_messages import OFFSETS_DIALOG_TITLE, format_offsets_summary
from frontend.widgets import style


class OffsetsDialog(QDialog):
    def __init__(self, offsets: Sequence[DriftOffset], parent=None, default_dir: Optional[Path] = None) -> None:
        super().__init__(parent)
        self.offsets: List[DriftOffset] = list(offsets)
        self.default_dir = default_dir or Path.cwd()
        self.setWindowTitle(OFFSETS_DIALOG_TITLE)
        self.setMinimumWidth(720)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)

        done = sum(1 for o in self.offsets if o.is_set)
        summary = QLabel(format_offsets_summary(done, len(self.offsets)), self)
        summary.setStyleSheet(style.heading_style())
        layout.addWidget(summary)

        rows, headers = format_offsets_table(self.offsets)
        table = QTableWidget(len(rows), len(headers), self)
        table.setHorizontalHeaderLabels(headers)
        table.setAlternatingRowColors(True)
        table.setStyleSheet(style.table_widget_style())
        table.verticalHeader().setVisible(False)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        table.horizontalHeader().setStretchLastSection(True)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                item = QTableWidgetItem(str(value))
                if value == UNSET_CELL:
                    item.setForeground(self.palette().placeholderText())
                table.setItem(r, c, item)
        layout.addWidget(table, 1)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close, parent=self)
        save_btn = QPushButton("Save…", self)
        save_btn.clicked.connect(self._handle_save)
        buttons.addButton(save_btn, QDialogButtonBox.ButtonRole.ActionRole)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _handle_save(self) -> None:
        suggested = str(self.default_dir / get_config().offsets_filename)
        path, _ = QFileDialog.getSaveFileName(self, "Save offsets", suggested, "YAML (*.yaml *.yml)")
        if not path:
            return
        if not save_offsets(path, self.offsets):
            QMessageBox.warning(self, OFFSETS_DIALOG_TITLE, f"Could not write {path}")
