"""
Booking sync, capture watcher and analytics tunables. .env is the source of truth;
these defaults apply only when the env var is unset. All values read at import time.

Env vars: BOOKING_LIST_LIMIT, VISIT_LOG_LIMIT, CONFIRM_POLL_INTERVAL_SECONDS,
CONFIRM_MAX_POLLS, BOOKING_SYNC_INTERVAL_SECONDS (0 disables the periodic sync),
ANALYTICS_TIMEZONE.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load backend/.env so scripts/tests/workers that import this module see env vars too
_backend_dir = Path(__file__).resolve().parent.parent.parent
load_dotenv(_backend_dir / ".env", override=False)  # no-op if file missing

_log = logging.getLogger(__name__)


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


def _float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = float(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


# -----------------------------------------------------------------------------
# Remote list sizes
# -----------------------------------------------------------------------------
BOOKING_LIST_LIMIT = _int("BOOKING_LIST_LIMIT", 500, min_val=1, max_val=5000)
VISIT_LOG_LIMIT = _int("VISIT_LOG_LIMIT", 5000, min_val=1, max_val=50000)

# -----------------------------------------------------------------------------
# Confirmation watcher: 40 polls x 250ms = ~10s before a draft is abandoned
# -----------------------------------------------------------------------------
CONFIRM_POLL_INTERVAL_SECONDS = _float("CONFIRM_POLL_INTERVAL_SECONDS", 0.25, min_val=0.05, max_val=10.0)
CONFIRM_MAX_POLLS = _int("CONFIRM_MAX_POLLS", 40, min_val=1, max_val=1000)

# -----------------------------------------------------------------------------
# Periodic remote sync (keeps the local cache warm); 0 = off
# -----------------------------------------------------------------------------
BOOKING_SYNC_INTERVAL_SECONDS = _int("BOOKING_SYNC_INTERVAL_SECONDS", 300, min_val=0, max_val=86400)

ANALYTICS_TIMEZONE = os.environ.get("ANALYTICS_TIMEZONE", "UTC").strip() or "UTC"

_log.info(
    "Booking config (from env): list_limit=%s visit_log_limit=%s poll_interval=%ss max_polls=%s "
    "sync_interval=%ss analytics_tz=%s",
    BOOKING_LIST_LIMIT,
    VISIT_LOG_LIMIT,
    CONFIRM_POLL_INTERVAL_SECONDS,
    CONFIRM_MAX_POLLS,
    BOOKING_SYNC_INTERVAL_SECONDS,
    ANALYTICS_TIMEZONE,
)


@dataclass(frozen=True)
class BookingConfig:
    """Snapshot of booking config for passing around (e.g. tests)."""
    list_limit: int
    visit_log_limit: int
    poll_interval_seconds: float
    max_polls: int
    sync_interval_seconds: int
    analytics_timezone: str


def get_booking_config() -> BookingConfig:
    return BookingConfig(
        list_limit=BOOKING_LIST_LIMIT,
        visit_log_limit=VISIT_LOG_LIMIT,
        poll_interval_seconds=CONFIRM_POLL_INTERVAL_SECONDS,
        max_polls=CONFIRM_MAX_POLLS,
        sync_interval_seconds=BOOKING_SYNC_INTERVAL_SECONDS,
        analytics_timezone=ANALYTICS_TIMEZONE,
    )
