"""Thumbnail entries backing the overview grids and the subset prompt."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

import numpy as np
from tqdm import tqdm

from backend.models import ImageRef
from backend.utils.leveling import level_plane
from common.log_utils import log_debug
from config import get_config

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository


@dataclass
class ThumbnailEntry:
    ref: ImageRef
    title: str
    thumbnail: np.ndarray


class ActivationResult(Enum):
    PRESENT_WINDOW = "present"
    SHOWN = "shown"


def build_thumbnail_entries(
    repository: "ImageRepository",
    refs: Iterable[ImageRef],
    size: Optional[int] = None,
    *,
    level: bool = True,
    progress: bool = False,
) -> List[ThumbnailEntry]:
    """Level (in place) and render every ref, preserving the given order.

    An image is leveled only when its data changed since it was last leveled, so
    rendering it again in another overview or prompt is served from the
    repository's thumbnail cache.
    """
    size = size or get_config().thumbnail_size
    ref_list = list(refs)
    entries: List[ThumbnailEntry] = []
    iterator = tqdm(ref_list, desc="Thumbnails", leave=False, disable=not progress)
    for ref in iterator:
        if level:
            image = repository.get_field(ref)
            if not image.is_leveled:
                level_plane(image)
                repository.notify_data_changed(ref)
                image.mark_leveled()
        thumb = repository.render_thumbnail(ref, size, size)
        entries.append(ThumbnailEntry(ref, repository.get_title(ref), thumb))
    log_debug(f"Built {len(entries)} thumbnail entries", "UI")
    return entries


def collection_entries(repository: "ImageRepository", collection_id: int, **kwargs) -> List[ThumbnailEntry]:
    refs = [ImageRef(collection_id, image_id) for image_id in repository.image_ids(collection_id)]
    return build_thumbnail_entries(repository, refs, **kwargs)


def activate_entry(repository: "ImageRepository", ref: ImageRef) -> ActivationResult:
    """Double-click on an overview item: present a visible image, else show it."""
    if repository.is_visible(ref):
        return ActivationResult.PRESENT_WINDOW
    repository.set_visible(ref, True)
    return ActivationResult.SHOWN
