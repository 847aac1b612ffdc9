"""Convert recorded picks into per-image pixel offsets."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union

from backend.models import ImageRef, MaterializedSelection
from common.log_utils import log_info, log_warning
from common.yaml_utils import get_timestamp_fields, save_yaml

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository


class OffsetStatus(Enum):
    OK = "ok"
    UNSET = "unset"


@dataclass(frozen=True)
class DriftOffset:
    index: int
    ref: ImageRef
    original: ImageRef
    title: str
    status: OffsetStatus
    row: Optional[float] = None
    col: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.status is OffsetStatus.OK

    @property
    def pixel(self) -> Optional[Tuple[float, float]]:
        if not self.is_set:
            return None
        return self.row, self.col  # type: ignore[return-value]


def extract_offsets(
    repository: "ImageRepository",
    selections: Sequence[MaterializedSelection],
) -> List[DriftOffset]:
    """Map every pick to ``(row, col)`` through its own image geometry, in subset order.

    Images without a pick are reported with :attr:`OffsetStatus.UNSET` and no
    numeric offsets.
    """
    offsets: List[DriftOffset] = []
    for index, item in enumerate(selections):
        title = repository.get_title(item.working)
        if item.point is None:
            log_warning(f"No point placed on image {index} ({title})", "OFFSETS")
            offsets.append(DriftOffset(index, item.working, item.original, title, OffsetStatus.UNSET))
            continue
        row, col = repository.convert_physical_to_pixel(item.working, item.point.x, item.point.y)
        offsets.append(
            DriftOffset(
                index,
                item.working,
                item.original,
                title,
                OffsetStatus.OK,
                row=row,
                col=col,
                x=item.point.x,
                y=item.point.y,
            )
        )
    done = sum(1 for o in offsets if o.is_set)
    log_info(f"Extracted {done}/{len(offsets)} offsets", "OFFSETS")
    return offsets


def relative_offsets(offsets: Sequence[DriftOffset]) -> List[Optional[Tuple[float, float]]]:
    """Drift of every image relative to the first image that has a pick.

    Entries without a pick (and every entry when nothing was picked) are ``None``.
    """
    reference = next((o for o in offsets if o.is_set), None)
    if reference is None:
        return [None for _ in offsets]
    result: List[Optional[Tuple[float, float]]] = []
    for offset in offsets:
        if not offset.is_set:
            result.append(None)
            continue
        result.append((offset.row - reference.row, offset.col - reference.col))  # type: ignore[operator]
    return result


def offsets_to_dict(offsets: Sequence[DriftOffset]) -> Dict[str, Any]:
    relative = relative_offsets(offsets)
    images = []
    for offset, rel in zip(offsets, relative):
        entry: Dict[str, Any] = {
            "index": offset.index,
            "title": offset.title,
            "status": offset.status.value,
            "original": [offset.original.collection_id, offset.original.image_id],
        }
        if offset.is_set:
            entry.update(
                {
                    "x": offset.x,
                    "y": offset.y,
                    "row": offset.row,
                    "col": offset.col,
                    "d_row": rel[0] if rel else None,
                    "d_col": rel[1] if rel else None,
                }
            )
        images.append(entry)
    payload: Dict[str, Any] = {"images": images}
    payload.update(get_timestamp_fields())
    return payload


def save_offsets(path: Union[str, Path], offsets: Sequence[DriftOffset]) -> bool:
    ok = save_yaml(path, offsets_to_dict(offsets))
    if ok:
        log_info(f"Offsets saved to {path}", "OFFSETS")
    else:
        log_warning(f"Could not write offsets to {path}", "OFFSETS")
    return ok
