"""Drives the drift preview: which image is shown and where picks go."""
from __future__ import annotations

from typing import List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from backend.models import ImageRef, selection_key
from backend.services.drift_session import (DriftSession, EventOutcome,
                                            NextImage, PointSelected,
                                            PreviousImage, RunExtraction)
from backend.services.offset_extractor import DriftOffset
from backend.services.preview_surface import (PointOverlay, PreviewSurface,
                                              create_preview_surface)
from common.errors import SessionStateError
from common.log_utils import log_debug, log_info
from config import get_config


class PreviewController(QObject):
    """Navigation (prev/next) over a materialized session with overlay rebinding."""

    previewChanged = pyqtSignal(int, int)  # cursor, total
    pointChanged = pyqtSignal(int)  # cursor whose pick changed
    extractionFinished = pyqtSignal(list)

    def __init__(
        self,
        session: DriftSession,
        surface: Optional[PreviewSurface] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """Bind the controller to a materialized session.

        Args:
            session: Session whose working collection is already populated
            surface: Shared preview surface; created over the session's preview
                reference image when omitted
            parent: Optional parent QObject
        """
        super().__init__(parent)
        self.session = session
        if surface is None:
            if session.preview_reference is None or session.working_collection_id is None:
                raise SessionStateError("Session is not materialized")
            surface = create_preview_surface(
                session.repository,
                session.working_collection_id,
                session.preview_reference,
                get_config().preview_size,
            )
        self.surface = surface
        self.sync()

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------
    def previous(self) -> bool:
        return self._dispatch_navigation(self.session.handle(PreviousImage()))

    def next(self) -> bool:
        return self._dispatch_navigation(self.session.handle(NextImage()))

    def place_point(self, x: float, y: float) -> None:
        """Overlay entry point: the operator placed a point on the shown image."""
        overlay = self.surface.overlay
        if overlay is None:
            overlay = self._bind_overlay()
        overlay.finish(x, y)

    def run(self) -> List[DriftOffset]:
        offsets = self.session.handle(RunExtraction()).offsets or []
        log_info(f"Run finished with {len(offsets)} entries", "PREVIEW")
        self.extractionFinished.emit(offsets)
        return offsets

    # ------------------------------------------------------------------
    # Rebinding
    # ------------------------------------------------------------------
    def sync(self) -> None:
        """Show ``selected[cursor]`` and key the overlay to it.

        Data and overlay are rebound together so a pick can never be attributed
        to the previously shown image.
        """
        active = self.session.active
        self.surface.rebind(active.working)
        overlay = self._bind_overlay()
        log_debug(
            f"Preview at {self.session.cursor + 1}/{len(self.session)} -> {active.working} "
            f"key={overlay.selection_key}",
            "PREVIEW",
        )
        self.previewChanged.emit(self.session.cursor, len(self.session))

    def _bind_overlay(self) -> PointOverlay:
        """Key the (possibly new) overlay to the active image and cap it."""
        overlay = self.surface.ensure_overlay()
        overlay.set_selection_key(selection_key(self.session.active.working.image_id))
        overlay.set_max_objects(get_config().overlay_max_points)
        overlay.connect_finished(self._on_selection_finished)
        self.surface.overlayChanged.emit()
        return overlay

    def _dispatch_navigation(self, outcome: EventOutcome) -> bool:
        if outcome.cursor_changed:
            self.sync()
        return outcome.cursor_changed

    def _on_selection_finished(self, x: float, y: float) -> None:
        self.session.handle(PointSelected(x, y))
        self.pointChanged.emit(self.session.cursor)

    # ------------------------------------------------------------------
    # Queries for the view
    # ------------------------------------------------------------------
    @property
    def cursor(self) -> int:
        return self.session.cursor

    @property
    def shown_ref(self) -> Optional[ImageRef]:
        return self.surface.bound_ref

    @property
    def title(self) -> str:
        return self.session.repository.get_title(self.session.active.working)

    def visible_points(self) -> List[Tuple[float, float]]:
        overlay = self.surface.overlay
        return overlay.points() if overlay is not None else []

    def can_go_previous(self) -> bool:
        return self.session.cursor > 0

    def can_go_next(self) -> bool:
        return self.session.cursor < len(self.session) - 1
