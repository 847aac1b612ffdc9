"""Process-menu commands acting on the active collection.

Each callback receives a :class:`CommandContext` carrying the collection that was
active when the menu entry fired and returns nothing; results are windows.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication

from backend.models import ImageRef
from backend.services.collection_actions import (collection_folder,
                                                 collection_title, level_all)
from backend.services.command_registry import (CommandContext, CommandRegistry,
                                               CommandSpec, RunMode)
from backend.services.drift_session import DriftSession
from backend.services.folder_loader import load_folder
from backend.services.offset_extractor import DriftOffset
from backend.services.overview_model import (ActivationResult, activate_entry,
                                             collection_entries)
from backend.services.preview_controller import PreviewController
from backend.services.selection_set import SelectionSet
from backend.utils.table_writer import format_offsets_table, render_table, write_table_to_log
from common.log_utils import log_info, log_warning
from config import get_config
from frontend.utils.ui_guards import guarded, require_images
from frontend.utils.ui_messages import (DRIFT_WINDOW_TITLE, FOLDER_OVERVIEW_TITLE,
                                        OVERVIEW_BUSY)
from frontend.widgets.drift_window import DriftWindow
from frontend.widgets.offsets_dialog import OffsetsDialog
from frontend.widgets.overview_window import OverviewWindow, present_if_exists
from frontend.widgets.subset_prompt_dialog import SubsetPromptDialog

if TYPE_CHECKING:
    from frontend.main_window import MainWindow


class ProcessCommands:
    """Binds the command callbacks to the main window that hosts their windows."""

    def __init__(self, window: "MainWindow") -> None:
        self.window = window

    @property
    def repository(self):
        return self.window.repository

    # ------------------------------------------------------------------
    # level_all
    # ------------------------------------------------------------------
    def level_all(self, context: CommandContext) -> None:
        count = level_all(self.repository, context.collection_id)
        self.window.statusBar().showMessage(f"Leveled {count} images", 4000)

    # ------------------------------------------------------------------
    # container_overview
    # ------------------------------------------------------------------
    def container_overview(self, context: CommandContext) -> None:
        title = collection_title(self.repository, context.collection_id)
        if present_if_exists(title):
            return
        with _busy_cursor():
            self.window.statusBar().showMessage(OVERVIEW_BUSY)
            entries = collection_entries(self.repository, context.collection_id, progress=True)
            self.window.statusBar().clearMessage()
        overview = OverviewWindow(title, [(None, entries)], self.activate_image)
        self.window.keep_window(overview)
        overview.show()

    def activate_image(self, ref: ImageRef) -> None:
        result = guarded(self.window, "Overview", lambda: activate_entry(self.repository, ref))
        # SHOWN opens the window through the repository's visibilityChanged signal
        if result is ActivationResult.PRESENT_WINDOW and not self.window.present_image(ref):
            self.window.show_image(ref)

    # ------------------------------------------------------------------
    # focus_main_window
    # ------------------------------------------------------------------
    def focus_main_window(self, _context: CommandContext) -> None:
        self.window.showNormal()
        self.window.raise_()
        self.window.activateWindow()

    # ------------------------------------------------------------------
    # folder_overview
    # ------------------------------------------------------------------
    def folder_overview(self, context: CommandContext) -> None:
        folder = collection_folder(self.repository, context.collection_id)
        if folder is None:
            log_warning("Active collection has no file; nothing to scan", "COMMANDS")
            self.window.statusBar().showMessage("The active collection was not loaded from a file", 4000)
            return
        with _busy_cursor():
            loaded = load_folder(self.repository, folder)
            sections = [
                (collection_title(self.repository, cid), collection_entries(self.repository, cid, progress=True))
                for cid in loaded
            ]
        if not sections:
            self.window.statusBar().showMessage(f"No scan files in {folder}", 4000)
            return
        overview = OverviewWindow(f"{FOLDER_OVERVIEW_TITLE}: {folder}", sections, self.activate_image)
        self.window.keep_window(overview)
        overview.show()

    # ------------------------------------------------------------------
    # drift_correction
    # ------------------------------------------------------------------
    def drift_correction(self, _context: CommandContext) -> None:
        if not require_images(self.window, self.repository, DRIFT_WINDOW_TITLE):
            return
        session = DriftSession.start(self.repository)
        with _busy_cursor():
            selection = SelectionSet.from_snapshot(self.repository, session.all_images)
        pending = SubsetPromptDialog.ask(selection, self.window)
        if pending is None:
            log_info("Drift correction cancelled at the subset prompt", "COMMANDS")
            session.close()
            return
        if guarded(self.window, DRIFT_WINDOW_TITLE, lambda: session.materialize(pending)) is None:
            session.close()
            return

        controller = PreviewController(session)
        drift_window = DriftWindow(controller)
        drift_window.offsetsComputed.connect(self.show_offsets)
        self.window.keep_window(drift_window)
        drift_window.show()

    def show_offsets(self, offsets: List[DriftOffset]) -> None:
        rows, headers = format_offsets_table(offsets)
        log_info("Drift offsets:\n" + render_table(rows, headers), "OFFSETS")
        write_table_to_log(rows, headers, get_config().offsets_table_log_name)
        dialog = OffsetsDialog(offsets, self.window, default_dir=self._offsets_dir(offsets))
        dialog.exec()

    def _offsets_dir(self, offsets: List[DriftOffset]) -> Optional[Path]:
        for offset in offsets:
            if self.repository.has_collection(offset.original.collection_id):
                folder = collection_folder(self.repository, offset.original.collection_id)
                if folder:
                    return Path(folder)
        return None


@contextmanager
def _busy_cursor() -> Iterator[None]:
    QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
    try:
        yield
    finally:
        QApplication.restoreOverrideCursor()


def register_commands(registry: CommandRegistry, window: "MainWindow") -> ProcessCommands:
    """Register the five process commands in menu order."""
    commands = ProcessCommands(window)
    menu = get_config().process_menu_title.replace("&", "")
    registry.register(CommandSpec(
        "level_all", f"/{menu}/Level All Images", "Plane-level every image of the active file",
        RunMode.IMMEDIATE, commands.level_all,
    ))
    registry.register(CommandSpec(
        "container_overview", f"/{menu}/Overview", "Show thumbnails of every image in the active file",
        RunMode.INTERACTIVE, commands.container_overview,
    ))
    registry.register(CommandSpec(
        "focus_main_window", f"/{menu}/Focus Main Window", "Bring the main window to front",
        RunMode.IMMEDIATE, commands.focus_main_window,
        shortcut=get_config().focus_main_window_shortcut, needs_collection=False,
    ))
    registry.register(CommandSpec(
        "folder_overview", f"/{menu}/Folder Overview", "Load and show every scan file in the active file's folder",
        RunMode.INTERACTIVE, commands.folder_overview,
    ))
    registry.register(CommandSpec(
        "drift_correction", f"/{menu}/Drift Correction…", "Pick one feature per image and extract drift offsets",
        RunMode.INTERACTIVE, commands.drift_correction,
    ))
    return commands
