"""Plain-text tables (tabulate) for offset reports in the log and on disk."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from tabulate import tabulate

from common.log_utils import log_info, log_warning

if TYPE_CHECKING:
    from backend.services.offset_extractor import DriftOffset

OFFSET_HEADERS = ["#", "Image", "x", "y", "Row", "Column", "dRow", "dColumn"]
UNSET_CELL = "unset"


def _fmt(value: Optional[float], spec: str) -> str:
    return UNSET_CELL if value is None else format(value, spec)


def format_offsets_table(offsets: Sequence["DriftOffset"]) -> tuple[List[List[Any]], List[str]]:
    """Rows and headers for the offsets report; unset picks show ``unset``, never zeros."""
    from backend.services.offset_extractor import relative_offsets

    rows: List[List[Any]] = []
    for offset, rel in zip(offsets, relative_offsets(offsets)):
        rows.append(
            [
                offset.index,
                offset.title,
                _fmt(offset.x, ".4g"),
                _fmt(offset.y, ".4g"),
                _fmt(offset.row, ".2f"),
                _fmt(offset.col, ".2f"),
                _fmt(rel[0] if rel else None, "+.2f"),
                _fmt(rel[1] if rel else None, "+.2f"),
            ]
        )
    return rows, list(OFFSET_HEADERS)


def render_table(table_data: List[List[Any]], headers: List[str], tablefmt: str = "simple") -> str:
    return tabulate(table_data, headers=headers, tablefmt=tablefmt)


def write_table_to_log(
    table_data: List[List[Any]],
    headers: List[str],
    log_name: str,
    *,
    tablefmt: str = "grid",
    logs_dir: Optional[Path] = None,
    overwrite: bool = True,
) -> Optional[Path]:
    """Write a formatted table to ``<logs_dir>/<log_name>.txt``.

    Args:
        table_data: Rows of cell values
        headers: Column headers
        log_name: Base name of the file
        tablefmt: tabulate format
        logs_dir: Target directory (default: ``logs/`` in the working directory)
        overwrite: If False, a timestamp is appended to the file name

    Returns:
        Path of the written file, or None if writing failed
    """
    logs_dir = logs_dir or Path.cwd() / "logs"
    if overwrite:
        filename = f"{log_name}.txt"
    else:
        filename = f"{log_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.txt"
    log_path = logs_dir / filename

    header_lines = [
        "=" * 80,
        f"Table: {log_name}",
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"Rows: {len(table_data)}",
        "=" * 80,
        "",
    ]
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        with open(log_path, "w", encoding="utf-8") as f:
            f.write("\n".join(header_lines))
            f.write(render_table(table_data, headers, tablefmt))
            f.write("\n")
    except OSError as e:
        log_warning(f"Failed to write table to {log_path}: {e}", "TABLE_WRITER")
        return None

    log_info(f"Table saved to {log_path}", "TABLE_WRITER")
    return log_path
