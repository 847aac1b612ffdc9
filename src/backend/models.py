"""Value types identifying images and the operator's picks on them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import get_config


@dataclass(frozen=True, order=True)
class ImageRef:
    """Repository identity of one image: owning collection plus id inside it."""

    collection_id: int
    image_id: int

    def __str__(self) -> str:
        return f"{self.collection_id}:{self.image_id}"


@dataclass(frozen=True)
class SelectionPoint:
    """Operator pick in physical (real-world) units."""

    x: float
    y: float


@dataclass(frozen=True)
class PendingSelection:
    """An image chosen in the subset prompt, still pointing at the operator's original."""

    original: ImageRef


@dataclass
class MaterializedSelection:
    """A selected image after duplication into the working collection.

    ``working`` always refers to the working-collection copy; ``original`` is kept
    only for reporting. ``point`` stays ``None`` until a pick is finished on the image.
    """

    original: ImageRef
    working: ImageRef
    point: Optional[SelectionPoint] = None

    @property
    def has_point(self) -> bool:
        return self.point is not None

    def record_point(self, x: float, y: float) -> SelectionPoint:
        self.point = SelectionPoint(float(x), float(y))
        return self.point


def selection_key(image_id: int) -> str:
    """Per-image overlay key, e.g. ``/3/select/dc/point``."""
    return get_config().selection_key_template.format(image_id=image_id)
