"""Centralized logging helpers with tqdm-safe output and timestamps."""
from __future__ import annotations

import os
import sys
from datetime import datetime

from tqdm import tqdm

# ANSI color codes
COLOR_RESET = "\033[0m"
COLOR_RED = "\033[91m"
COLOR_YELLOW = "\033[93m"
COLOR_GRAY = "\033[90m"

LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

_LEVEL_NAMES = {
    "DEBUG": LOG_LEVEL_DEBUG,
    "INFO": LOG_LEVEL_INFO,
    "WARNING": LOG_LEVEL_WARNING,
    "ERROR": LOG_LEVEL_ERROR,
}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in {"1", "true", "on"}


def _level_from_env() -> int:
    raw = os.environ.get("DRIFTPICK_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO"
    return _LEVEL_NAMES.get(raw.upper(), LOG_LEVEL_INFO)


_LOG_LEVEL = _level_from_env()

# Per-category debug switches
DEBUG_SESSION = _env_flag("DEBUG_SESSION")
DEBUG_PREVIEW = _env_flag("DEBUG_PREVIEW")
DEBUG_REPOSITORY = _env_flag("DEBUG_REPOSITORY")


def set_log_level(level: int) -> None:
    """Override the active log level (used by the CLI entry point and tests)."""
    global _LOG_LEVEL
    _LOG_LEVEL = level


def get_timestamp() -> str:
    """Get current timestamp in [HH:MM:SS.mmm] format."""
    return datetime.now().strftime("[%H:%M:%S.%f]")[:-3] + "]"


def _format_message(message: str, prefix: str = "", level: str = "", color: str = "") -> str:
    parts = [get_timestamp()]
    if level:
        parts.append(f"[{level}]")
    if prefix:
        parts.append(f"[{prefix}]")
    parts.append(message)
    formatted = " ".join(parts)

    if color and sys.stderr.isatty():
        return f"{color}{formatted}{COLOR_RESET}"
    return formatted


def _write(message: str, file=None) -> None:
    """Write through tqdm so running progress bars are not broken."""
    tqdm.write(message, file=file if file is not None else sys.stdout)


def log_debug(message: str, prefix: str = "") -> None:
    """Log a debug message (only if DEBUG level enabled)."""
    if _LOG_LEVEL <= LOG_LEVEL_DEBUG:
        _write(_format_message(message, prefix, "DEBUG", COLOR_GRAY), sys.stderr)


def log_info(message: str, prefix: str = "") -> None:
    """Log an info message."""
    if _LOG_LEVEL <= LOG_LEVEL_INFO:
        _write(_format_message(message, prefix))


def log_warning(message: str, prefix: str = "") -> None:
    """Log a warning message."""
    if _LOG_LEVEL <= LOG_LEVEL_WARNING:
        _write(_format_message(message, prefix, "WARNING", COLOR_YELLOW), sys.stderr)


def log_error(message: str, prefix: str = "") -> None:
    """Log an error message."""
    if _LOG_LEVEL <= LOG_LEVEL_ERROR:
        _write(_format_message(message, prefix, "ERROR", COLOR_RED), sys.stderr)


def is_debug_enabled(category: str = "") -> bool:
    """Check if debug is enabled globally or for a specific category."""
    if _LOG_LEVEL <= LOG_LEVEL_DEBUG:
        return True

    if category == "session":
        return DEBUG_SESSION
    elif category == "preview":
        return DEBUG_PREVIEW
    elif category == "repository":
        return DEBUG_REPOSITORY

    return False
