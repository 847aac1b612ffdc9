"""UI validation guards shared by command handlers.

Provides the common "open a scan first" checks so handlers do not repeat QMessageBox calls.
"""
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

from PyQt6.QtWidgets import QMessageBox, QWidget

from common.errors import DriftPickError
from common.log_utils import log_error
from frontend.utils.ui_messages import STATUS_NO_COLLECTION, STATUS_NO_IMAGES

if TYPE_CHECKING:  # pragma: no cover
    from backend.services.image_repository import ImageRepository

T = TypeVar("T")


def require_collection(parent: QWidget, collection_id: Optional[int], title: str = "Action") -> bool:
    """Check that a collection is active. Show a notice if not.

    Args:
        parent: Widget owning the message box
        collection_id: Active collection id, or None
        title: Dialog title for the notice

    Returns:
        True if a collection is active, False otherwise
    """
    if collection_id is None:
        QMessageBox.information(parent, title, STATUS_NO_COLLECTION)
        return False
    return True


def require_images(parent: QWidget, repository: "ImageRepository", title: str = "Action") -> bool:
    """Check that at least one image is open anywhere in the repository."""
    if not repository.all_images():
        QMessageBox.information(parent, title, STATUS_NO_IMAGES)
        return False
    return True


def guarded(parent: QWidget, title: str, action: Callable[[], T]) -> Optional[T]:
    """Run ``action``; service errors are logged and shown instead of propagating into Qt."""
    try:
        return action()
    except DriftPickError as e:
        log_error(f"{title}: {e}", "UI")
        QMessageBox.warning(parent, title, str(e))
        return None
