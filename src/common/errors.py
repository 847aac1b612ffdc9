"""Exception types shared by backend services and the Qt frontend."""
from __future__ import annotations


class DriftPickError(Exception):
    """Base class for every error raised by driftpick services."""


class RepositoryLookupError(DriftPickError, KeyError):
    """A collection or image id no longer resolves in the repository."""

    def __init__(self, collection_id: int, image_id: int | None = None) -> None:
        self.collection_id = collection_id
        self.image_id = image_id
        if image_id is None:
            message = f"Collection {collection_id} is not open"
        else:
            message = f"Image {image_id} not found in collection {collection_id}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0])


class EmptySelectionError(DriftPickError, ValueError):
    """The subset prompt was confirmed with no image selected."""


class SessionStateError(DriftPickError, RuntimeError):
    """An operation was requested in the wrong drift-session phase."""


class ScanLoadError(DriftPickError, OSError):
    """A scan file could not be read."""


class CommandError(DriftPickError, LookupError):
    """Unknown or misconfigured menu command."""
