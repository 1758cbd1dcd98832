"""
Confirmation watcher: turn a clicked "Confirm booking" into a cached booking, but only
once the external page actually shows "Booking confirmed".

The booking page cannot be hooked synchronously, so confirmation is inferred by polling
the latest page snapshot on a bounded interval job:

    idle -> drafted -> watching -> committed | abandoned

One session per watcher; a capture while a draft is in flight is ignored. After
CONFIRM_MAX_POLLS polls without confirmation the draft is dropped and nothing is stored.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any

from apscheduler.jobstores.base import JobLookupError

from app.core.booking_config import CONFIRM_MAX_POLLS, CONFIRM_POLL_INTERVAL_SECONDS
from app.core.constants import CONFIRMATION_WATCH_JOB_ID
from app.services.bookings.store import LocalRecordStore
from app.services.bookings.types import ORIGIN_LOCAL
from app.services.capture.page import (
    PageAdapter,
    extract_draft,
    is_confirm_control,
    page_shows_confirmation,
)

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_DRAFTED = "drafted"
STATE_WATCHING = "watching"
STATE_COMMITTED = "committed"
STATE_ABANDONED = "abandoned"


@dataclass
class CaptureSession:
    state: str = STATE_IDLE
    draft: dict[str, Any] | None = None
    attempts: int = 0
    job_id: str | None = None
    committed_id: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.draft is not None


class ConfirmationWatcher:
    """Capture-session controller. scheduler is an APScheduler scheduler (add_job/remove_job)."""

    def __init__(
        self,
        store: LocalRecordStore,
        scheduler: Any,
        page: PageAdapter,
        *,
        interval_seconds: float = CONFIRM_POLL_INTERVAL_SECONDS,
        max_polls: int = CONFIRM_MAX_POLLS,
        job_id: str = CONFIRMATION_WATCH_JOB_ID,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._page = page
        self._interval = interval_seconds
        self._max_polls = max_polls
        self._job_id = job_id
        # capture() runs on request threads, poll() on scheduler threads
        self._lock = threading.Lock()
        self.session = CaptureSession()

    @property
    def page(self) -> PageAdapter:
        return self._page

    def capture(self, label: str | None) -> bool:
        """
        Handle a click on a control labelled `label`. Returns True when a draft was
        taken and the watch started; False for other controls, drafts with neither
        guest name nor email, or while another draft is still being watched.
        """
        if not is_confirm_control(label):
            return False
        with self._lock:
            if self.session.in_flight:
                logger.debug("Capture ignored: draft already being watched (attempt %s)", self.session.attempts)
                return False
            draft = extract_draft(self._page)
            if not draft.get("guest_email") and not draft.get("guest_name"):
                logger.debug("Capture ignored: no guest name or email on page")
                return False
            self.session = CaptureSession(state=STATE_DRAFTED, draft=draft)
            self._start_locked()
        logger.info("Booking draft captured for %s; watching for confirmation", draft.get("guest_email") or draft.get("guest_name"))
        return True

    def _start_locked(self) -> None:
        if self.session.job_id is not None:
            return
        self._scheduler.add_job(
            self.poll,
            "interval",
            seconds=self._interval,
            id=self._job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.session.job_id = self._job_id
        self.session.state = STATE_WATCHING

    def _stop_locked(self) -> None:
        if self.session.job_id is None:
            return
        try:
            self._scheduler.remove_job(self.session.job_id)
        except JobLookupError:
            pass
        self.session.job_id = None

    def poll(self) -> str:
        """One poll tick. Commits on confirmation, abandons once the poll budget is spent."""
        with self._lock:
            s = self.session
            if s.state != STATE_WATCHING or s.draft is None:
                return s.state
            s.attempts += 1
            if page_shows_confirmation(self._page):
                record = self._store.upsert(s.draft, origin=ORIGIN_LOCAL)
                s.committed_id = record["id"]
                s.state = STATE_COMMITTED
                s.draft = None
                self._stop_locked()
                logger.info("Booking confirmed after %s poll(s); cached as %s", s.attempts, record["id"])
            elif s.attempts >= self._max_polls:
                s.state = STATE_ABANDONED
                s.draft = None
                self._stop_locked()
                logger.info("No booking confirmation after %s polls; draft discarded", s.attempts)
            return s.state

    def stop(self) -> None:
        """Cancel the watch job; a draft still in flight is discarded (abandoned)."""
        with self._lock:
            if self.session.in_flight:
                self.session.state = STATE_ABANDONED
                self.session.draft = None
                logger.info("Confirmation watch stopped after %s poll(s); draft discarded", self.session.attempts)
            self._stop_locked()

    def status(self) -> dict[str, Any]:
        with self._lock:
            s = self.session
            return {
                "state": s.state,
                "attempts": s.attempts,
                "max_polls": self._max_polls,
                "watching": s.job_id is not None,
                "draft": dict(s.draft) if s.draft else None,
                "committed_id": s.committed_id,
            }
