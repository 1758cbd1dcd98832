"""
Booking record shape shared by the store, merge engine and capture watcher.

Records are plain dicts with the remote API's snake_case keys so remote objects can be
absorbed without translation; unknown keys from the remote side are kept as-is.
"""
import random
import string
import time
from typing import Any, TypedDict

from app.core.constants import LOCAL_ID_PREFIX

STATUS_CONFIRMED = "confirmed"
STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"
BOOKING_STATUSES = (STATUS_CONFIRMED, STATUS_PENDING, STATUS_CANCELLED)

ORIGIN_LOCAL = "local"
ORIGIN_REMOTE = "remote"

# String fields every stored record carries (default "")
BOOKING_TEXT_FIELDS = (
    "guest_name",
    "guest_phone",
    "guest_email",
    "date",
    "time_slot",
    "notes",
    "sauna_name",
)


class BookingRecord(TypedDict, total=False):
    """One reservation. `origin` is provenance only (not shown in the console)."""
    id: str
    guest_name: str
    guest_phone: str
    guest_email: str
    date: str  # calendar date, e.g. "2024-01-01"
    time_slot: str  # free-text slot label, e.g. "10:00" or "2:00 PM"
    notes: str
    sauna_name: str
    status: str
    origin: str


def new_local_id() -> str:
    """local_<epoch ms>_<6 base36 chars>: not yet confirmed by the remote API."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}_{suffix}"


def is_local_id(booking_id: Any) -> bool:
    return str(booking_id or "").startswith(LOCAL_ID_PREFIX)


def text(value: Any) -> str:
    """Stored string form of a field value (None -> "")."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def merge_key(record: dict[str, Any]) -> tuple[str, str, str] | None:
    """(guest_email, date, time_slot) identity; None when there is no email to match on."""
    email = text(record.get("guest_email")).strip()
    if not email:
        return None
    return (email, text(record.get("date")), text(record.get("time_slot")))
