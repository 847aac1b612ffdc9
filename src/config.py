"""Application-wide configuration constants.

Centralizes window sizes, thumbnail/preview geometry and scan loading defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    # Window geometry
    overview_window_size: Tuple[int, int] = (1350, 750)
    main_window_size: Tuple[int, int] = (900, 600)

    # Thumbnails (prompt and overview icon grids)
    thumbnail_size: int = 200
    thumbnail_cache_limit: int = 256

    # Drift correction preview
    preview_size: int = 512
    selection_key_template: str = "/{image_id}/select/dc/point"
    overlay_max_points: int = 1

    # Folder loading
    scan_suffixes: Tuple[str, ...] = (".tif", ".tiff", ".png", ".jpg", ".jpeg", ".bmp")
    default_pixel_size: float = 1e-9  # metres per pixel when no sidecar is present
    sidecar_suffix: str = ".yaml"

    # Shortcuts
    focus_main_window_shortcut: str = "Ctrl+Shift+M"

    # Offsets export
    offsets_filename: str = "drift_offsets.yaml"
    offsets_table_log_name: str = "drift_offsets"

    # Menu placement for registered commands
    process_menu_title: str = "&Process"


_CONFIG: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global application configuration.

    Returns:
        AppConfig instance (singleton)
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = AppConfig()
    return _CONFIG


def reset_config() -> None:
    """Reset configuration to default (mainly for testing)."""
    global _CONFIG
    _CONFIG = None
