"""Main window: repository browser, File menu and the Process command menu."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (QFileDialog, QLabel, QMainWindow, QMenu,
                             QTreeWidget, QTreeWidgetItem, QVBoxLayout,
                             QWidget)

from backend.models import ImageRef
from backend.services.collection_actions import collection_title
from backend.services.command_registry import CommandContext, CommandRegistry, CommandSpec
from backend.services.folder_loader import load_files
from backend.services.image_repository import ImageRepository
from common.log_utils import log_debug, log_info
from config import get_config
from frontend.commands import register_commands
from frontend.utils.ui_guards import guarded, require_collection
from frontend.utils.ui_messages import APP_TITLE, SCAN_FILE_FILTER, format_loaded
from frontend.widgets import style
from frontend.widgets.image_window import ImageWindow

REF_ROLE = Qt.ItemDataRole.UserRole


class MainWindow(QMainWindow):
    def __init__(self, repository: Optional[ImageRepository] = None) -> None:
        super().__init__()
        self.repository = repository or ImageRepository(self)
        self.registry = CommandRegistry()
        self.active_collection_id: Optional[int] = None
        self._image_windows: Dict[ImageRef, ImageWindow] = {}
        self._windows: List[QWidget] = []

        self.setWindowTitle(APP_TITLE)
        width, height = get_config().main_window_size
        self.resize(width, height)

        self._init_ui()
        self._init_menus()
        self._connect_repository()
        self.statusBar().showMessage("Open scan files with File → Open scans…")

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _init_ui(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        self.label_active = QLabel("No file active", central)
        self.label_active.setStyleSheet(style.heading_style())
        self.label_active.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.label_active)

        self.tree = QTreeWidget(central)
        self.tree.setHeaderLabels(["Data", "Visible"])
        self.tree.setColumnWidth(0, max(200, int(self.width() * 0.7)))
        self.tree.currentItemChanged.connect(self._on_current_item_changed)
        self.tree.itemActivated.connect(self._on_item_activated)
        layout.addWidget(self.tree, 1)
        self.setCentralWidget(central)

    def _init_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("Open scans…", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.select_files)
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        self.commands = register_commands(self.registry, self)
        self.process_menu = self.menuBar().addMenu(get_config().process_menu_title)
        for spec in self.registry.specs():
            self._add_command_action(self.process_menu, spec)

    def _add_command_action(self, menu: QMenu, spec: CommandSpec) -> QAction:
        label = spec.menu_path.rstrip("/").rsplit("/", 1)[-1]
        action = QAction(label, self)
        action.setToolTip(spec.tooltip)
        action.setStatusTip(spec.tooltip)
        if spec.shortcut:
            action.setShortcut(QKeySequence(spec.shortcut))
            action.setShortcutContext(Qt.ShortcutContext.ApplicationShortcut)
        action.triggered.connect(lambda _checked=False, cid=spec.id: self.run_command(cid))
        menu.addAction(action)
        return action

    def _connect_repository(self) -> None:
        repo = self.repository
        repo.collectionAdded.connect(lambda _cid: self.refresh_tree())
        repo.collectionRemoved.connect(self._on_collection_removed)
        repo.imageAdded.connect(lambda _cid, _iid: self.refresh_tree())
        repo.visibilityChanged.connect(self._on_visibility_changed)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def run_command(self, command_id: str) -> None:
        spec = self.registry.get(command_id)
        if spec.needs_collection and not require_collection(self, self.active_collection_id, spec.menu_path):
            return
        guarded(self, command_id, lambda: self.registry.run(command_id, CommandContext(self.active_collection_id)))

    def keep_window(self, widget: QWidget) -> None:
        """Hold a reference to a top-level window until it is destroyed."""
        widget.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
        self._windows.append(widget)
        widget.destroyed.connect(lambda _obj=None, w=widget: self._forget_window(w))

    def _forget_window(self, widget: QWidget) -> None:
        if widget in self._windows:
            self._windows.remove(widget)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def select_files(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(self, "Open scans", str(Path.cwd()), SCAN_FILE_FILTER)
        if paths:
            self.open_files(paths)

    def open_files(self, paths: Sequence[str]) -> List[int]:
        loaded = load_files(self.repository, paths, keep_invisible=False)
        if loaded:
            self.set_active_collection(loaded[-1])
            for image_id in self.repository.image_ids(loaded[-1]):
                self.repository.set_visible(ImageRef(loaded[-1], image_id), True)
        folder = str(Path(paths[0]).parent) if paths else ""
        self.statusBar().showMessage(format_loaded(len(loaded), folder), 5000)
        return loaded

    # ------------------------------------------------------------------
    # Active collection
    # ------------------------------------------------------------------
    def set_active_collection(self, collection_id: Optional[int]) -> None:
        if collection_id == self.active_collection_id:
            return
        self.active_collection_id = collection_id
        if collection_id is None:
            self.label_active.setText("No file active")
        else:
            self.label_active.setText(collection_title(self.repository, collection_id))
        log_debug(f"Active collection -> {collection_id}", "UI")

    def _on_current_item_changed(self, current: Optional[QTreeWidgetItem], _previous) -> None:
        if current is None:
            return
        collection_id, _image_id = current.data(0, REF_ROLE)
        self.set_active_collection(collection_id)

    def _on_item_activated(self, item: QTreeWidgetItem, _column: int) -> None:
        collection_id, image_id = item.data(0, REF_ROLE)
        if image_id is None:
            return
        ref = ImageRef(collection_id, image_id)
        if not self.present_image(ref):
            self.repository.set_visible(ref, True)

    def _on_collection_removed(self, collection_id: int) -> None:
        for ref in [r for r in self._image_windows if r.collection_id == collection_id]:
            self._image_windows[ref].close()
        if self.active_collection_id == collection_id:
            self.set_active_collection(None)
        self.refresh_tree()

    # ------------------------------------------------------------------
    # Image windows
    # ------------------------------------------------------------------
    def show_image(self, ref: ImageRef) -> ImageWindow:
        window = self._image_windows.get(ref)
        if window is None:
            window = ImageWindow(self.repository, ref)
            window.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
            window.closed.connect(self._on_image_window_closed)
            self._image_windows[ref] = window
        window.show()
        window.raise_()
        return window

    def present_image(self, ref: ImageRef) -> bool:
        window = self._image_windows.get(ref)
        if window is None:
            return False
        window.showNormal()
        window.raise_()
        window.activateWindow()
        return True

    def _on_image_window_closed(self, ref: ImageRef) -> None:
        self._image_windows.pop(ref, None)
        if self.repository.resolves(ref) and self.repository.is_visible(ref):
            self.repository.set_visible(ref, False)

    def _on_visibility_changed(self, collection_id: int, image_id: int, visible: bool) -> None:
        ref = ImageRef(collection_id, image_id)
        if visible:
            self.show_image(ref)
        elif ref in self._image_windows:
            self._image_windows[ref].close()
        self.refresh_tree()

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------
    def refresh_tree(self) -> None:
        repo = self.repository
        self.tree.blockSignals(True)
        self.tree.clear()
        for collection_id in repo.collection_ids():
            top = QTreeWidgetItem([collection_title(repo, collection_id), ""])
            top.setData(0, REF_ROLE, (collection_id, None))
            for image_id in repo.image_ids(collection_id):
                ref = ImageRef(collection_id, image_id)
                child = QTreeWidgetItem([repo.get_title(ref), "yes" if repo.is_visible(ref) else ""])
                child.setData(0, REF_ROLE, (collection_id, image_id))
                top.addChild(child)
            self.tree.addTopLevelItem(top)
            top.setExpanded(collection_id == self.active_collection_id)
            if collection_id == self.active_collection_id:
                self.tree.setCurrentItem(top)
        self.tree.blockSignals(False)

    def closeEvent(self, event):  # noqa: N802
        for window in list(self._image_windows.values()) + list(self._windows):
            window.close()
        log_info("Main window closed", "UI")
        super().closeEvent(event)
