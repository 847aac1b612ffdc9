"""Shared preview surface and its point-selection overlay.

One surface exists per drift session. Navigation never recreates it: the pixels
of the image under the cursor are copied into the surface's private buffer and
the overlay is re-keyed to that image. Working images are only read.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

import numpy as np
from PyQt6.QtCore import QObject, pyqtSignal

from backend.models import ImageRef
from backend.utils.fields import ImageField
from common.errors import SessionStateError
from common.log_utils import is_debug_enabled, log_debug
from config import get_config

if TYPE_CHECKING:
    from backend.services.image_repository import ImageCollection, ImageRepository

SelectionCallback = Callable[[float, float], None]
Point = Tuple[float, float]


class PointOverlay:
    """Point picker bound to one selection key of the working collection's store."""

    def __init__(self, store: "ImageCollection", max_objects: Optional[int] = None) -> None:
        self._store = store
        self.selection_key: Optional[str] = None
        self.max_objects = max_objects or get_config().overlay_max_points
        self._finished: List[SelectionCallback] = []

    def set_selection_key(self, key: str) -> None:
        self.selection_key = key

    def set_max_objects(self, count: int) -> None:
        if count < 1:
            raise ValueError("Overlay must accept at least one point")
        self.max_objects = count
        if self.selection_key is not None:
            points = self.points()
            if len(points) > count:
                self._store.set_selection(self.selection_key, points[-count:])

    def connect_finished(self, callback: SelectionCallback) -> None:
        if callback not in self._finished:
            self._finished.append(callback)

    def disconnect_finished(self, callback: SelectionCallback) -> None:
        if callback in self._finished:
            self._finished.remove(callback)

    def points(self) -> List[Point]:
        if self.selection_key is None:
            return []
        return self._store.selection(self.selection_key)

    def finish(self, x: float, y: float) -> None:
        """Operator finished placing a point at physical ``(x, y)``."""
        if self.selection_key is None:
            raise SessionStateError("Overlay has no selection key")
        points = (self.points() + [(float(x), float(y))])[-self.max_objects:]
        self._store.set_selection(self.selection_key, points)
        for callback in list(self._finished):
            callback(float(x), float(y))

    def clear(self) -> None:
        if self.selection_key is not None:
            self._store.set_selection(self.selection_key, [])


class PreviewSurface(QObject):
    """Single data view reused for every image of the session."""

    dataRebound = pyqtSignal(int, int)  # collection id, image id now shown
    overlayChanged = pyqtSignal()

    def __init__(
        self,
        repository: "ImageRepository",
        backing_ref: ImageRef,
        size: int,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.repository = repository
        self.backing_ref = backing_ref
        self.size = size
        self.bound_ref: Optional[ImageRef] = None
        self.overlay: Optional[PointOverlay] = None
        self._buffer_field: ImageField = repository.get_field(backing_ref).duplicate()

    @property
    def buffer(self) -> np.ndarray:
        return self._buffer_field.data

    @property
    def backing_field(self) -> ImageField:
        """The field currently shown: a copy of the bound image's data and geometry."""
        return self._buffer_field

    def rebind(self, ref: ImageRef) -> None:
        """Replace the buffer contents with the data and geometry of ``ref``."""
        self._buffer_field.assign(self.repository.get_field(ref))
        self.bound_ref = ref
        if is_debug_enabled("preview"):
            log_debug(f"Preview rebound to {ref}", "PREVIEW")
        self.dataRebound.emit(ref.collection_id, ref.image_id)

    def ensure_overlay(self) -> PointOverlay:
        """Return the point overlay, creating one if the surface has none."""
        if self.overlay is None:
            store = self.repository.collection(self.backing_ref.collection_id)
            self.overlay = PointOverlay(store)
            log_debug("Created point overlay for preview", "PREVIEW")
        return self.overlay

    def drop_overlay(self) -> None:
        self.overlay = None

    def set_selection_key(self, key: str) -> None:
        self.ensure_overlay().set_selection_key(key)
        self.overlayChanged.emit()

    def cap_selection_count(self, count: int = 1) -> None:
        self.ensure_overlay().set_max_objects(count)

    def on_selection_finished(self, callback: SelectionCallback) -> None:
        self.ensure_overlay().connect_finished(callback)


def create_preview_surface(
    repository: "ImageRepository",
    collection_id: int,
    backing_ref: ImageRef,
    size: Optional[int] = None,
) -> PreviewSurface:
    if backing_ref.collection_id != collection_id:
        raise SessionStateError(
            f"Preview image {backing_ref} is not part of collection {collection_id}"
        )
    surface = PreviewSurface(repository, backing_ref, size or get_config().preview_size)
    surface.bound_ref = backing_ref
    return surface
