"""Service layer aggregation for the repository, drift sessions and commands.

Provides convenience re-exports so callers can import the core services from a single namespace.
"""

from .image_repository import ImageCollection, ImageRepository
from .command_registry import CommandContext, CommandRegistry, CommandSpec, RunMode
from .drift_session import (
    DriftEvent,
    DriftSession,
    EventOutcome,
    NextImage,
    PointSelected,
    PreviousImage,
    RunExtraction,
)
from .offset_extractor import DriftOffset, OffsetStatus, extract_offsets, relative_offsets, save_offsets
from .preview_controller import PreviewController
from .preview_surface import PointOverlay, PreviewSurface, create_preview_surface
from .selection_set import SelectionSet

__all__ = [
    "CommandContext",
    "CommandRegistry",
    "CommandSpec",
    "DriftEvent",
    "DriftOffset",
    "DriftSession",
    "EventOutcome",
    "ImageCollection",
    "ImageRepository",
    "NextImage",
    "OffsetStatus",
    "PointOverlay",
    "PointSelected",
    "PreviewController",
    "PreviewSurface",
    "PreviousImage",
    "RunExtraction",
    "RunMode",
    "SelectionSet",
    "create_preview_surface",
    "extract_offsets",
    "relative_offsets",
    "save_offsets",
]
