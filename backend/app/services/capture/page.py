"""
Page adapter: typed reads from the booking page the site does not control.

The in-page script posts JSON snapshots of the page (inputs with their placeholder
text, the summary panel rows in on-screen order, the title and visible headings).
Capture logic only talks to PageAdapter, so it can run without a DOM.
"""
import re
import threading
from typing import Any, Protocol

from app.services.bookings.types import STATUS_CONFIRMED

# Guest inputs are recognised by placeholder text (case-insensitive substring).
# Hints per field are tried in order; first non-empty value wins.
PLACEHOLDER_HINTS: dict[str, tuple[str, ...]] = {
    "guest_name": ("john doe",),
    "guest_email": ("john@example.com",),
    "guest_phone": ("(555)", "555"),
    "notes": ("special requests",),
}

# Summary panel rows by structural position: sauna, date, time.
SUMMARY_POSITIONS: dict[str, int] = {
    "sauna_name": 0,
    "date": 1,
    "time_slot": 2,
}

CONFIRM_CONTROL_PATTERN = re.compile(r"confirm booking", re.IGNORECASE)
CONFIRMATION_PATTERN = re.compile(r"booking confirmed", re.IGNORECASE)


class PageAdapter(Protocol):
    """What the capture watcher needs from the booking page."""

    def input_value(self, hint: str) -> str:
        """Trimmed value of the first input/textarea whose placeholder contains hint ("" if none)."""
        ...

    def summary_value(self, position: int) -> str:
        """Trimmed value text of the summary row at position ("" if missing)."""
        ...

    def title(self) -> str:
        ...

    def headings(self) -> list[str]:
        """Text of heading-like elements (h1-h3) currently on the page."""
        ...


def _s(value: Any) -> str:
    return str(value).strip() if value is not None else ""


class SnapshotPageAdapter:
    """PageAdapter over the latest posted page snapshot. update() swaps it atomically."""

    def __init__(self, snapshot: dict[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot: dict[str, Any] = snapshot or {}

    def update(self, snapshot: dict[str, Any] | None) -> None:
        with self._lock:
            self._snapshot = snapshot or {}

    def _get(self, key: str) -> Any:
        with self._lock:
            return self._snapshot.get(key)

    def input_value(self, hint: str) -> str:
        needle = hint.lower()
        for item in self._get("inputs") or []:
            if not isinstance(item, dict):
                continue
            if needle in _s(item.get("placeholder")).lower():
                return _s(item.get("value"))
        return ""

    def summary_value(self, position: int) -> str:
        rows = self._get("summary") or []
        if position < 0 or position >= len(rows):
            return ""
        row = rows[position]
        if isinstance(row, dict):
            return _s(row.get("value"))
        return _s(row)

    def title(self) -> str:
        return _s(self._get("title"))

    def headings(self) -> list[str]:
        return [_s(h) for h in (self._get("headings") or []) if h is not None]


def _first_input(page: PageAdapter, hints: tuple[str, ...]) -> str:
    for hint in hints:
        value = page.input_value(hint)
        if value:
            return value
    return ""


def extract_draft(page: PageAdapter) -> dict[str, Any]:
    """Draft booking from the page's guest inputs and summary panel (sauna falls back to the title)."""
    draft: dict[str, Any] = {field: _first_input(page, hints) for field, hints in PLACEHOLDER_HINTS.items()}
    for field, position in SUMMARY_POSITIONS.items():
        draft[field] = page.summary_value(position)
    if not draft["sauna_name"]:
        draft["sauna_name"] = page.title()
    draft["status"] = STATUS_CONFIRMED
    return draft


def is_confirm_control(label: str | None) -> bool:
    """True for the booking widget's final confirm button label."""
    return bool(CONFIRM_CONTROL_PATTERN.search((label or "").strip()))


def page_shows_confirmation(page: PageAdapter) -> bool:
    return any(CONFIRMATION_PATTERN.search(h) for h in page.headings())
