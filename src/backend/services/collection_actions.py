"""Bulk operations on every image of a collection."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from backend.models import ImageRef
from backend.services.folder_loader import dirname_of
from backend.utils.leveling import level_plane
from common.log_utils import log_info

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository


def level_all(repository: "ImageRepository", collection_id: int) -> int:
    """Plane-level every image of the collection in place; returns how many."""
    count = 0
    for image_id in repository.image_ids(collection_id):
        ref = ImageRef(collection_id, image_id)
        image = repository.get_field(ref)
        level_plane(image)
        repository.notify_data_changed(ref)
        image.mark_leveled()
        count += 1
    log_info(f"Leveled {count} images in collection {collection_id}", "LEVEL")
    return count


def collection_title(repository: "ImageRepository", collection_id: int) -> str:
    """Window title for a collection: its file path when it has one, else its name."""
    collection = repository.collection(collection_id)
    if collection.filename is not None:
        return str(collection.filename)
    return collection.name


def collection_folder(repository: "ImageRepository", collection_id: int) -> Optional[str]:
    collection = repository.collection(collection_id)
    if collection.filename is None:
        return None
    return dirname_of(collection.filename)
