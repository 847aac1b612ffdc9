"""Drift-correction session: working copies, cursor and per-image picks.

The session is driven by a closed set of operator events handed to
:meth:`DriftSession.handle` one at a time by the Qt event loop:

* :class:`PreviousImage` / :class:`NextImage` move the cursor (clamped, no wrap)
* :class:`PointSelected` stores the finished pick on the active image
* :class:`RunExtraction` converts every pick to pixel offsets
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from PyQt6.QtCore import QObject, pyqtSignal

from backend.models import ImageRef, MaterializedSelection, PendingSelection
from backend.services.offset_extractor import DriftOffset, extract_offsets
from common.errors import EmptySelectionError, SessionStateError
from common.log_utils import is_debug_enabled, log_debug, log_info

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository


WORKING_COLLECTION_NAME = "Drift correction"


@dataclass(frozen=True)
class PreviousImage:
    pass


@dataclass(frozen=True)
class NextImage:
    pass


@dataclass(frozen=True)
class PointSelected:
    x: float
    y: float


@dataclass(frozen=True)
class RunExtraction:
    pass


DriftEvent = Union[PreviousImage, NextImage, PointSelected, RunExtraction]


@dataclass
class EventOutcome:
    cursor: int
    cursor_changed: bool = False
    offsets: Optional[List[DriftOffset]] = field(default=None)


class DriftSession(QObject):
    cursorChanged = pyqtSignal(int)
    pointRecorded = pyqtSignal(int, float, float)  # cursor, x, y
    offsetsReady = pyqtSignal(list)
    closed = pyqtSignal()

    def __init__(
        self,
        repository: "ImageRepository",
        all_images: Sequence[ImageRef],
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.repository = repository
        self.all_images: List[ImageRef] = list(all_images)
        self.selected: List[MaterializedSelection] = []
        self.working_collection_id: Optional[int] = None
        self.preview_reference: Optional[ImageRef] = None
        self._cursor = 0
        self._closed = False

    @classmethod
    def start(cls, repository: "ImageRepository", parent: Optional[QObject] = None) -> "DriftSession":
        """Open a session over a snapshot of every currently open image."""
        session = cls(repository, repository.all_images(), parent)
        log_info(f"Drift correction started over {len(session.all_images)} open images", "SESSION")
        return session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_materialized(self) -> bool:
        return self.working_collection_id is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def active_index(self) -> int:
        return self._cursor

    @property
    def active(self) -> MaterializedSelection:
        self._require_materialized()
        return self.selected[self._cursor]

    def __len__(self) -> int:
        return len(self.selected)

    def working_images(self) -> List[ImageRef]:
        return [item.working for item in self.selected]

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------
    def materialize(self, pending: Sequence[PendingSelection]) -> List[MaterializedSelection]:
        """Duplicate the chosen images into a new private working collection.

        Every chosen image is copied exactly once; the first copy doubles as the
        preview reference the shared preview surface is created over.
        """
        if self._closed:
            raise SessionStateError("Session is closed")
        if self.is_materialized:
            raise SessionStateError("Session already materialized")
        if not pending:
            raise EmptySelectionError("Cannot start drift correction without images")

        repo = self.repository
        working_id = repo.create_collection(name=WORKING_COLLECTION_NAME)
        repo.set_keep_invisible(working_id, True)

        selected: List[MaterializedSelection] = []
        for item in pending:
            working = repo.duplicate_image(item.original, working_id)
            selected.append(MaterializedSelection(original=item.original, working=working))

        self.working_collection_id = working_id
        self.selected = selected
        self.preview_reference = selected[0].working
        self._cursor = 0
        log_info(
            f"Materialized {len(selected)} images into working collection {working_id} "
            f"(preview {self.preview_reference})",
            "SESSION",
        )
        if is_debug_enabled("session"):
            for item in selected:
                log_debug(f"{item.original} -> {item.working}", "SESSION")
        return selected

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def handle(self, event: DriftEvent) -> EventOutcome:
        self._require_materialized()
        if isinstance(event, PreviousImage):
            return self._move_to(max(0, self._cursor - 1))
        if isinstance(event, NextImage):
            return self._move_to(min(len(self.selected) - 1, self._cursor + 1))
        if isinstance(event, PointSelected):
            point = self.active.record_point(event.x, event.y)
            log_debug(f"Point ({point.x:.6g}, {point.y:.6g}) on image {self._cursor}", "SESSION")
            self.pointRecorded.emit(self._cursor, point.x, point.y)
            return EventOutcome(self._cursor)
        if isinstance(event, RunExtraction):
            offsets = extract_offsets(self.repository, self.selected)
            self.offsetsReady.emit(offsets)
            return EventOutcome(self._cursor, offsets=offsets)
        raise TypeError(f"Unsupported drift event: {event!r}")

    def previous(self) -> EventOutcome:
        return self.handle(PreviousImage())

    def next(self) -> EventOutcome:
        return self.handle(NextImage())

    def select_point(self, x: float, y: float) -> EventOutcome:
        return self.handle(PointSelected(x, y))

    def run(self) -> List[DriftOffset]:
        return self.handle(RunExtraction()).offsets or []

    def _move_to(self, target: int) -> EventOutcome:
        if target == self._cursor:
            return EventOutcome(self._cursor)
        log_debug(f"cursor {self._cursor} -> {target}", "SESSION")
        self._cursor = target
        self.cursorChanged.emit(target)
        return EventOutcome(target, cursor_changed=True)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def close(self, remove_working_collection: bool = False) -> None:
        """Stop accepting events and release the snapshot; optionally drop the working collection."""
        if self._closed:
            return
        self._closed = True
        self.all_images.clear()
        working_id = self.working_collection_id
        if remove_working_collection and working_id is not None and self.repository.has_collection(working_id):
            self.repository.remove_collection(working_id)
        log_info("Drift correction session closed", "SESSION")
        self.closed.emit()

    def _require_materialized(self) -> None:
        if self._closed:
            raise SessionStateError("Session is closed")
        if not self.is_materialized or not self.selected:
            raise SessionStateError("No images materialized yet")
