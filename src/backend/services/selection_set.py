"""Subset prompt model: which snapshot images the operator ticked."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from PyQt6.QtCore import QObject, pyqtSignal

from backend.models import ImageRef, PendingSelection
from backend.services.overview_model import ThumbnailEntry, build_thumbnail_entries
from common.errors import EmptySelectionError, SessionStateError
from common.log_utils import log_debug, log_info

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository


class SelectionSet(QObject):
    """Multi-select over a fixed list of thumbnail entries.

    Selection is tracked by entry index, so :meth:`confirm` returns the subset in
    the order the entries were listed (repository order), never in click order.
    """

    selectionChanged = pyqtSignal(int)  # number of selected entries
    confirmAllowedChanged = pyqtSignal(bool)

    def __init__(self, entries: Iterable[ThumbnailEntry], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.entries: List[ThumbnailEntry] = list(entries)
        self._selected: Set[int] = set()
        self.cancelled = False
        self.confirmed = False

    @classmethod
    def from_snapshot(
        cls,
        repository: "ImageRepository",
        snapshot: Iterable[ImageRef],
        thumbnail_size: Optional[int] = None,
    ) -> "SelectionSet":
        """Render every snapshot image as a titled thumbnail (leveling it on the way)."""
        entries = build_thumbnail_entries(repository, snapshot, thumbnail_size, progress=True)
        return cls(entries)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selected_indices(self) -> List[int]:
        return sorted(self._selected)

    @property
    def can_confirm(self) -> bool:
        return bool(self._selected) and not self.cancelled

    def set_selected(self, index: int, selected: bool) -> None:
        if not 0 <= index < len(self.entries):
            raise IndexError(f"Entry {index} out of range (0..{len(self.entries) - 1})")
        before = self.can_confirm
        if selected:
            self._selected.add(index)
        else:
            self._selected.discard(index)
        self.selectionChanged.emit(len(self._selected))
        if before != self.can_confirm:
            self.confirmAllowedChanged.emit(self.can_confirm)

    def toggle(self, index: int) -> None:
        self.set_selected(index, index not in self._selected)

    def replace_selection(self, indices: Iterable[int]) -> None:
        """Set the selection to exactly ``indices`` (what a view reports after a change)."""
        wanted = set(indices)
        for index in sorted(self._selected - wanted):
            self.set_selected(index, False)
        for index in sorted(wanted - self._selected):
            self.set_selected(index, True)

    def clear(self) -> None:
        self.replace_selection(())

    # ------------------------------------------------------------------
    # Outcome
    # ------------------------------------------------------------------
    def confirm(self) -> List[PendingSelection]:
        if self.cancelled:
            raise SessionStateError("Selection prompt was cancelled")
        if not self._selected:
            raise EmptySelectionError("Select at least one image")
        self.confirmed = True
        subset = [PendingSelection(self.entries[index].ref) for index in sorted(self._selected)]
        log_info(f"Confirmed {len(subset)} of {len(self.entries)} images", "SELECT")
        for pending in subset:
            log_debug(f"Selected image {pending.original}", "SELECT")
        return subset

    def cancel(self) -> None:
        self.cancelled = True
        self._selected.clear()
        self.entries.clear()
        log_info("Selection prompt cancelled", "SELECT")

    def __len__(self) -> int:
        return len(self.entries)
