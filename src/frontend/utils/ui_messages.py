"""Shared UI strings and formatting helpers."""
from __future__ import annotations

APP_TITLE = "driftpick"
PROMPT_TITLE = "Select Images"
PROMPT_HINT = "Select the images to align (Ctrl/Shift-click for several)."
DRIFT_WINDOW_TITLE = "Drift correction"
OVERVIEW_BUSY = "Creating Overview"
FOLDER_OVERVIEW_TITLE = "Folder Overview"
OFFSETS_DIALOG_TITLE = "Drift offsets"
STATUS_NO_COLLECTION = "Open a scan file first."
STATUS_NO_IMAGES = "No images are open."
SCAN_FILE_FILTER = "Scan images (*.tif *.tiff *.png *.jpg *.jpeg *.bmp);;All files (*)"
PREVIEW_HINT = "Click the feature to track. Use < and > to step through the images, Ok to compute offsets."


def format_preview_position(index: int, total: int, title: str) -> str:
    return f"{index + 1}/{total}  {title}"


def format_point_status(x: float, y: float, unit: str) -> str:
    return f"Point at x={x:.4g} {unit}, y={y:.4g} {unit}"


def format_offsets_summary(done: int, total: int) -> str:
    if done == total:
        return f"Offsets computed for all {total} images."
    return f"Offsets computed for {done} of {total} images; {total - done} without a point."


def format_loaded(count: int, folder: str) -> str:
    return f"Loaded {count} scan files from {folder}"
