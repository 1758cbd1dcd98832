"""
Tests for booking-page capture: draft extraction and the confirmation watcher
"""
import pytest

from app.core.booking_config import CONFIRM_MAX_POLLS, CONFIRM_POLL_INTERVAL_SECONDS
from app.core.constants import CONFIRMATION_WATCH_JOB_ID
from app.services.capture import (
    ConfirmationWatcher,
    SnapshotPageAdapter,
    extract_draft,
    is_confirm_control,
    page_shows_confirmation,
)
from app.services.capture.watcher import (
    STATE_ABANDONED,
    STATE_COMMITTED,
    STATE_IDLE,
    STATE_WATCHING,
)


@pytest.mark.unit
class TestPageAdapter:
    """Draft extraction from posted page snapshots"""

    def test_extract_draft(self, snapshot):
        draft = extract_draft(SnapshotPageAdapter(snapshot()))
        assert draft == {
            "guest_name": "Ada Lovelace",
            "guest_email": "ada@example.org",
            "guest_phone": "555-0100",
            "notes": "Extra towels",
            "sauna_name": "Cedar Room",
            "date": "2024-01-01",
            "time_slot": "10:00",
            "status": "confirmed",
        }

    def test_phone_falls_back_to_second_hint(self, snapshot):
        snap = snapshot()
        snap["inputs"][2]["placeholder"] = "Phone (e.g. 555-1234)"
        assert extract_draft(SnapshotPageAdapter(snap))["guest_phone"] == "555-0100"

    def test_sauna_falls_back_to_title(self, snapshot):
        snap = snapshot()
        snap["summary"][0]["value"] = "  "
        snap["title"] = "Spruce Suite"
        assert extract_draft(SnapshotPageAdapter(snap))["sauna_name"] == "Spruce Suite"

    def test_missing_fields_are_empty(self):
        draft = extract_draft(SnapshotPageAdapter())
        assert draft["guest_name"] == ""
        assert draft["date"] == ""
        assert draft["sauna_name"] == ""

    def test_values_are_trimmed(self, snapshot):
        snap = snapshot(name="  Ada  ")
        assert extract_draft(SnapshotPageAdapter(snap))["guest_name"] == "Ada"

    def test_confirm_control_labels(self):
        assert is_confirm_control("Confirm Booking")
        assert is_confirm_control("  confirm booking →")
        assert not is_confirm_control("Book now")
        assert not is_confirm_control(None)

    def test_confirmation_heading(self, snapshot):
        assert not page_shows_confirmation(SnapshotPageAdapter(snapshot()))
        assert page_shows_confirmation(SnapshotPageAdapter(snapshot(headings=("Booking Confirmed!",))))


@pytest.mark.unit
class TestConfirmationWatcher:
    """idle -> watching -> committed | abandoned"""

    def test_other_controls_are_ignored(self, watcher, page, scheduler, snapshot):
        page.update(snapshot())
        assert watcher.capture("Back") is False
        assert watcher.session.state == STATE_IDLE
        assert scheduler.jobs == {}

    def test_draft_without_name_or_email_is_noise(self, watcher, page, scheduler, snapshot):
        page.update(snapshot(name="", email=""))
        assert watcher.capture("Confirm Booking") is False
        assert watcher.session.state == STATE_IDLE
        assert scheduler.jobs == {}

    def test_capture_starts_watch_job(self, watcher, page, scheduler, snapshot):
        page.update(snapshot())
        assert watcher.capture("Confirm Booking") is True
        assert watcher.session.state == STATE_WATCHING
        _, trigger, kwargs = scheduler.jobs[CONFIRMATION_WATCH_JOB_ID]
        assert trigger == "interval"
        assert kwargs["seconds"] == 0.25
        assert kwargs["max_instances"] == 1

    def test_commit_on_confirmation(self, watcher, page, scheduler, store, snapshot):
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        scheduler.tick()
        assert watcher.session.state == STATE_WATCHING
        assert store.read_all() == []

        page.update(snapshot(headings=("Booking Confirmed!",)))
        scheduler.tick()

        assert watcher.session.state == STATE_COMMITTED
        assert scheduler.jobs == {}
        (record,) = store.read_all()
        assert record["id"] == watcher.session.committed_id
        assert record["id"].startswith("local_")
        assert record["origin"] == "local"
        assert record["guest_email"] == "ada@example.org"
        assert record["status"] == "confirmed"

    def test_abandon_after_poll_budget(self, store, scheduler, page, snapshot):
        watcher = ConfirmationWatcher(store, scheduler, page, interval_seconds=0.25, max_polls=3)
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        for _ in range(5):
            scheduler.tick()
        assert watcher.session.state == STATE_ABANDONED
        assert watcher.session.attempts == 3
        assert scheduler.jobs == {}
        assert store.read_all() == []

    def test_default_budget_is_forty_polls(self, store, scheduler, page, snapshot):
        watcher = ConfirmationWatcher(store, scheduler, page)
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        for _ in range(CONFIRM_MAX_POLLS - 1):
            scheduler.tick()
        assert CONFIRM_MAX_POLLS == 40
        assert watcher.session.state == STATE_WATCHING
        _, _, kwargs = scheduler.jobs[CONFIRMATION_WATCH_JOB_ID]
        assert kwargs["seconds"] == CONFIRM_POLL_INTERVAL_SECONDS == 0.25

        scheduler.tick()
        assert watcher.session.state == STATE_ABANDONED
        assert watcher.session.attempts == 40
        assert store.read_all() == []

    def test_capture_while_watching_is_ignored(self, watcher, page, scheduler, snapshot):
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        page.update(snapshot(name="Someone Else", email="else@example.org"))
        assert watcher.capture("Confirm Booking") is False
        assert watcher.session.draft["guest_email"] == "ada@example.org"
        assert scheduler.added == [CONFIRMATION_WATCH_JOB_ID]

    def test_new_capture_after_commit(self, watcher, page, scheduler, store, snapshot):
        page.update(snapshot(headings=("Booking confirmed",)))
        watcher.capture("Confirm Booking")
        watcher.poll()
        assert watcher.session.state == STATE_COMMITTED

        page.update(snapshot(email="second@example.org", time_slot="12:00"))
        assert watcher.capture("Confirm Booking") is True
        assert watcher.session.attempts == 0
        page.update(snapshot(email="second@example.org", time_slot="12:00", headings=("Booking confirmed",)))
        watcher.poll()
        assert len(store.read_all()) == 2

    def test_repeat_capture_of_same_booking_collapses(self, watcher, page, store, snapshot):
        for _ in range(2):
            page.update(snapshot(headings=("Booking confirmed",)))
            watcher.capture("Confirm Booking")
            watcher.poll()
        assert len(store.read_all()) == 1

    def test_stop_discards_draft(self, watcher, page, scheduler, store, snapshot):
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        watcher.stop()
        assert watcher.session.state == STATE_ABANDONED
        assert scheduler.jobs == {}
        page.update(snapshot(headings=("Booking confirmed",)))
        assert watcher.poll() == STATE_ABANDONED
        assert store.read_all() == []

    def test_stop_when_idle_is_noop(self, watcher):
        watcher.stop()
        assert watcher.session.state == STATE_IDLE

    def test_poll_when_idle_is_noop(self, watcher, store):
        assert watcher.poll() == STATE_IDLE
        assert store.read_all() == []

    def test_status(self, watcher, page, snapshot):
        page.update(snapshot())
        watcher.capture("Confirm Booking")
        watcher.poll()
        status = watcher.status()
        assert status["state"] == STATE_WATCHING
        assert status["attempts"] == 1
        assert status["max_polls"] == 40
        assert status["watching"] is True
        assert status["draft"]["guest_name"] == "Ada Lovelace"
        assert status["committed_id"] is None
