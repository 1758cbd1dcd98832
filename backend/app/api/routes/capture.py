"""
Booking-page events from the in-page script.

The script posts a page snapshot whenever the DOM changes (/capture/page) and a click
event for buttons (/capture/click). A "Confirm booking" click starts the confirmation
watcher, which polls the latest snapshot for a "Booking confirmed" heading.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import get_page, get_watcher
from app.services.capture.page import SnapshotPageAdapter
from app.services.capture.watcher import ConfirmationWatcher

router = APIRouter()
logger = logging.getLogger(__name__)


class PageInput(BaseModel):
    placeholder: str = ""
    value: str = ""


class SummaryRow(BaseModel):
    label: str = ""
    value: str = ""


class PageSnapshot(BaseModel):
    inputs: list[PageInput] = Field(default_factory=list, description="input/textarea elements with placeholder text")
    summary: list[SummaryRow] = Field(default_factory=list, description="Summary panel rows in order: sauna, date, time")
    title: str = ""
    headings: list[str] = Field(default_factory=list, description="Visible h1-h3 text")


class ClickEvent(BaseModel):
    label: str = Field("", max_length=256)
    snapshot: PageSnapshot | None = None


@router.post("/page")
def page_changed(
    body: PageSnapshot,
    page: SnapshotPageAdapter = Depends(get_page),
    watcher: ConfirmationWatcher = Depends(get_watcher),
) -> dict[str, Any]:
    """Replace the page snapshot the watcher reads."""
    page.update(body.model_dump())
    return {"ok": True, "state": watcher.status()["state"]}


@router.post("/click")
def control_clicked(
    body: ClickEvent,
    page: SnapshotPageAdapter = Depends(get_page),
    watcher: ConfirmationWatcher = Depends(get_watcher),
) -> dict[str, Any]:
    """A button was clicked; a confirm-booking click with guest details starts a capture."""
    if body.snapshot is not None:
        page.update(body.snapshot.model_dump())
    started = watcher.capture(body.label)
    return {"started": started, **watcher.status()}


@router.get("/status")
def capture_status(watcher: ConfirmationWatcher = Depends(get_watcher)) -> dict[str, Any]:
    return watcher.status()
