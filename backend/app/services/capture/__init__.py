"""
Capture: promote an observed booking-page confirmation into a cached booking record.

- page: PageAdapter protocol + SnapshotPageAdapter over posted page snapshots.
- watcher: ConfirmationWatcher (bounded poll loop on the app scheduler).
"""
from app.services.capture.page import (
    PageAdapter,
    SnapshotPageAdapter,
    extract_draft,
    is_confirm_control,
    page_shows_confirmation,
)
from app.services.capture.watcher import CaptureSession, ConfirmationWatcher

__all__ = [
    "CaptureSession",
    "ConfirmationWatcher",
    "PageAdapter",
    "SnapshotPageAdapter",
    "extract_draft",
    "is_confirm_control",
    "page_shows_confirmation",
]
