"""In-memory data browser: open collections of scan images and their bookkeeping.

Every image lives in a collection (one per loaded file, plus private working
collections created by drift-correction sessions). Ids are assigned here and
never reused within a repository.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np
from PyQt6.QtCore import QObject, pyqtSignal

from backend.models import ImageRef
from backend.services.thumbnail_cache import ThumbnailCache
from backend.utils.fields import ImageField
from backend.utils.thumbnails import render_thumbnail
from common.errors import RepositoryLookupError
from common.log_utils import is_debug_enabled, log_debug, log_info
from config import get_config


class ImageCollection:
    """Container of related images, e.g. all channels of one scan file."""

    def __init__(self, filename: Optional[Path] = None, name: Optional[str] = None) -> None:
        self.collection_id: int = -1  # assigned by the repository
        self.filename = Path(filename) if filename is not None else None
        self.name = name or (self.filename.name if self.filename else "Untitled")
        self.keep_invisible = False
        self._fields: Dict[int, ImageField] = {}
        self._titles: Dict[int, str] = {}
        self._visible: Dict[int, bool] = {}
        self._selections: Dict[str, List[Tuple[float, float]]] = {}
        self._next_id = 0

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def add_field(self, image: ImageField, title: str, visible: bool = False) -> int:
        image_id = self._next_id
        self._next_id += 1
        self._fields[image_id] = image
        self._titles[image_id] = title
        self._visible[image_id] = visible
        return image_id

    def remove_field(self, image_id: int) -> None:
        self._fields.pop(image_id, None)
        self._titles.pop(image_id, None)
        self._visible.pop(image_id, None)

    def image_ids(self) -> List[int]:
        return sorted(self._fields)

    def has_image(self, image_id: int) -> bool:
        return image_id in self._fields

    def field(self, image_id: int) -> ImageField:
        try:
            return self._fields[image_id]
        except KeyError:
            raise RepositoryLookupError(self.collection_id, image_id) from None

    def title(self, image_id: int) -> str:
        self.field(image_id)
        return self._titles.get(image_id) or f"Image {image_id}"

    def set_title(self, image_id: int, title: str) -> None:
        self.field(image_id)
        self._titles[image_id] = title

    def is_visible(self, image_id: int) -> bool:
        return self._visible.get(image_id, False)

    def set_visible(self, image_id: int, visible: bool) -> None:
        self.field(image_id)
        self._visible[image_id] = visible

    # ------------------------------------------------------------------
    # Selection store (overlay points keyed like "/3/select/dc/point")
    # ------------------------------------------------------------------
    def selection(self, key: str) -> List[Tuple[float, float]]:
        return list(self._selections.get(key, []))

    def set_selection(self, key: str, points: List[Tuple[float, float]]) -> None:
        self._selections[key] = [(float(x), float(y)) for x, y in points]

    def selection_keys(self) -> List[str]:
        return sorted(self._selections)

    def __len__(self) -> int:
        return len(self._fields)


class ImageRepository(QObject):
    """Enumerates open collections and hands out image data by :class:`ImageRef`."""

    collectionAdded = pyqtSignal(int)
    collectionRemoved = pyqtSignal(int)
    imageAdded = pyqtSignal(int, int)
    dataChanged = pyqtSignal(int, int)
    visibilityChanged = pyqtSignal(int, int, bool)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._collections: Dict[int, ImageCollection] = {}
        self._next_collection_id = 0
        self._thumbnails = ThumbnailCache(get_config().thumbnail_cache_limit)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def create_collection(self, filename: Optional[Path] = None, name: Optional[str] = None) -> int:
        return self.add_collection(ImageCollection(filename, name))

    def add_collection(self, collection: ImageCollection) -> int:
        collection_id = self._next_collection_id
        self._next_collection_id += 1
        collection.collection_id = collection_id
        self._collections[collection_id] = collection
        log_debug(f"Collection {collection_id} added ({collection.name}, {len(collection)} images)", "REPO")
        self.collectionAdded.emit(collection_id)
        return collection_id

    def remove_collection(self, collection_id: int) -> None:
        if self._collections.pop(collection_id, None) is None:
            raise RepositoryLookupError(collection_id)
        self._thumbnails.invalidate((collection_id,))
        log_debug(f"Collection {collection_id} removed", "REPO")
        self.collectionRemoved.emit(collection_id)

    def collection(self, collection_id: int) -> ImageCollection:
        try:
            return self._collections[collection_id]
        except KeyError:
            raise RepositoryLookupError(collection_id) from None

    def has_collection(self, collection_id: int) -> bool:
        return collection_id in self._collections

    def collection_ids(self) -> List[int]:
        return list(self._collections)

    def image_ids(self, collection_id: int) -> List[int]:
        return self.collection(collection_id).image_ids()

    def set_keep_invisible(self, collection_id: int, keep: bool) -> None:
        self.collection(collection_id).keep_invisible = keep

    def foreach(self, callback: Callable[[ImageCollection], None]) -> None:
        for collection in list(self._collections.values()):
            callback(collection)

    def all_images(self) -> List[ImageRef]:
        """Snapshot of every open image: collections in open order, images by id."""
        refs: List[ImageRef] = []
        for collection_id, collection in self._collections.items():
            refs.extend(ImageRef(collection_id, image_id) for image_id in collection.image_ids())
        if is_debug_enabled("repository"):
            log_debug(f"Snapshot of {len(refs)} images across {len(self._collections)} collections", "REPO")
        return refs

    def __iter__(self) -> Iterator[ImageCollection]:
        return iter(list(self._collections.values()))

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def add_image(self, collection_id: int, image: ImageField, title: str, visible: bool = False) -> ImageRef:
        image_id = self.collection(collection_id).add_field(image, title, visible)
        self.imageAdded.emit(collection_id, image_id)
        return ImageRef(collection_id, image_id)

    def resolves(self, ref: ImageRef) -> bool:
        collection = self._collections.get(ref.collection_id)
        return collection is not None and collection.has_image(ref.image_id)

    def get_field(self, ref: ImageRef) -> ImageField:
        return self.collection(ref.collection_id).field(ref.image_id)

    def get_pixel_data(self, ref: ImageRef) -> np.ndarray:
        return self.get_field(ref).data

    def get_title(self, ref: ImageRef) -> str:
        return self.collection(ref.collection_id).title(ref.image_id)

    def render_thumbnail(self, ref: ImageRef, width: int, height: int) -> np.ndarray:
        image = self.get_field(ref)
        key = (ref.collection_id, ref.image_id, width, height)
        cached = self._thumbnails.get(key, image.revision)
        if cached is not None:
            return cached
        thumb = render_thumbnail(image.data, width, height)
        self._thumbnails.put(key, image.revision, thumb)
        return thumb

    def duplicate_image(self, ref: ImageRef, target_collection_id: int) -> ImageRef:
        """Copy the pixels and geometry of ``ref`` into ``target_collection_id``."""
        source = self.get_field(ref)
        title = self.get_title(ref)
        new_ref = self.add_image(target_collection_id, source.duplicate(), title)
        log_debug(f"Duplicated {ref} -> {new_ref}", "REPO")
        return new_ref

    def convert_physical_to_pixel(self, ref: ImageRef, x: float, y: float) -> Tuple[float, float]:
        """Physical ``(x, y)`` -> ``(row, col)`` using the image's own geometry."""
        image = self.get_field(ref)
        return image.rtoi(y), image.rtoj(x)

    def notify_data_changed(self, ref: ImageRef) -> None:
        self.get_field(ref).data_changed()
        self.dataChanged.emit(ref.collection_id, ref.image_id)

    # ------------------------------------------------------------------
    # Visibility (whether an image window is shown)
    # ------------------------------------------------------------------
    def is_visible(self, ref: ImageRef) -> bool:
        return self.collection(ref.collection_id).is_visible(ref.image_id)

    def set_visible(self, ref: ImageRef, visible: bool) -> None:
        collection = self.collection(ref.collection_id)
        if collection.is_visible(ref.image_id) == visible and collection.has_image(ref.image_id):
            return
        collection.set_visible(ref.image_id, visible)
        self.visibilityChanged.emit(ref.collection_id, ref.image_id, visible)

    def summary(self) -> str:
        images = sum(len(c) for c in self._collections.values())
        return f"{len(self._collections)} collections, {images} images"

    def log_summary(self) -> None:
        log_info(f"Repository: {self.summary()}", "REPO")
