"""Load scan files from disk into repository collections.

Each file becomes one collection with one image per page. Physical geometry and
titles come from an optional YAML sidecar next to the file (``scan.tif`` ->
``scan.yaml``)::

    x_real: 5.0e-07
    y_real: 5.0e-07
    si_unit_xy: m
    si_unit_z: m
    titles: [Topography forward, Topography backward]
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union

import cv2
import numpy as np
from tqdm import tqdm

from backend.services.image_repository import ImageCollection
from backend.utils.fields import ImageField
from common.errors import ScanLoadError
from common.log_utils import log_debug, log_error, log_info, log_warning
from common.yaml_utils import load_yaml
from config import get_config

if TYPE_CHECKING:
    from backend.services.image_repository import ImageRepository

PathLike = Union[str, Path]


def dirname_of(path: PathLike) -> str:
    """Directory part of ``path``; accepts both ``/`` and ``\\`` separators."""
    text = str(path)
    if not text:
        return "."
    cut = max(text.rfind("/"), text.rfind("\\"))
    if cut < 0:
        return "."
    if cut == 0:
        return text[0]
    return text[:cut]


def scan_folder(directory: PathLike, suffixes: Optional[Sequence[str]] = None) -> List[Path]:
    """Sorted files in ``directory`` whose suffix matches (case insensitive)."""
    suffixes = tuple(s.lower() for s in (suffixes or get_config().scan_suffixes))
    root = Path(directory)
    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        log_error(f"Can't open {root}: {e}", "LOADER")
        return []
    return [p for p in entries if p.is_file() and p.name.lower().endswith(suffixes)]


def _read_pages(path: Path) -> List[np.ndarray]:
    flags = cv2.IMREAD_ANYDEPTH | cv2.IMREAD_GRAYSCALE
    try:
        ok, pages = cv2.imreadmulti(str(path), flags=flags)
        if ok and pages:
            return list(pages)
        single = cv2.imread(str(path), flags)
    except cv2.error as e:
        raise ScanLoadError(f"Unreadable scan file: {path} ({e})") from e
    if single is None:
        raise ScanLoadError(f"Unreadable scan file: {path}")
    return [single]


def _sidecar_path(path: Path) -> Path:
    return path.with_suffix(get_config().sidecar_suffix)


def load_scan_file(path: PathLike) -> ImageCollection:
    """Read every page of ``path`` into a new (not yet registered) collection."""
    path = Path(path)
    if not path.is_file():
        raise ScanLoadError(f"No such scan file: {path}")
    pages = _read_pages(path)
    meta = load_yaml(_sidecar_path(path))
    try:
        pixel_size = float(meta.get("pixel_size", get_config().default_pixel_size))
    except (TypeError, ValueError) as e:
        raise ScanLoadError(f"Invalid pixel_size in sidecar of {path}: {e}") from e
    titles = meta.get("titles") or []

    collection = ImageCollection(filename=path)
    for page_index, page in enumerate(pages):
        data = np.asarray(page, dtype=np.float64)
        rows, cols = data.shape[:2]
        try:
            image = ImageField(
                data,
                x_real=float(meta.get("x_real", cols * pixel_size)),
                y_real=float(meta.get("y_real", rows * pixel_size)),
                x_offset=float(meta.get("x_offset", 0.0)),
                y_offset=float(meta.get("y_offset", 0.0)),
                si_unit_xy=str(meta.get("si_unit_xy", "m")),
                si_unit_z=str(meta.get("si_unit_z", "m")),
            )
        except (TypeError, ValueError) as e:
            raise ScanLoadError(f"Invalid geometry for page {page_index} of {path}: {e}") from e
        if page_index < len(titles):
            title = str(titles[page_index])
        else:
            title = f"{path.stem} [{page_index}]" if len(pages) > 1 else path.stem
        collection.add_field(image, title)
    log_debug(f"Loaded {len(pages)} pages from {path.name}", "LOADER")
    return collection


def load_files(
    repository: "ImageRepository",
    paths: Iterable[PathLike],
    *,
    keep_invisible: bool = True,
) -> List[int]:
    """Load ``paths`` into ``repository``; failures are logged and skipped."""
    path_list = [Path(p) for p in paths]
    loaded: List[int] = []
    for path in tqdm(path_list, desc="Loading scans", leave=False, disable=len(path_list) < 2):
        try:
            collection = load_scan_file(path)
        except ScanLoadError as e:
            log_warning(str(e), "LOADER")
            continue
        collection.keep_invisible = keep_invisible
        loaded.append(repository.add_collection(collection))
    log_info(f"Loaded {len(loaded)}/{len(path_list)} scan files", "LOADER")
    return loaded


def load_folder(
    repository: "ImageRepository",
    directory: PathLike,
    suffixes: Optional[Sequence[str]] = None,
) -> List[int]:
    """Load every matching file of ``directory``; returns the new collection ids."""
    files = scan_folder(directory, suffixes)
    if not files:
        log_info(f"No scan files in {directory}", "LOADER")
        return []
    return load_files(repository, files)
