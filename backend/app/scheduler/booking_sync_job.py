"""Runs every BOOKING_SYNC_INTERVAL_SECONDS: pull the remote booking list into the local cache."""
import logging

from app.services.bookings import LocalRecordStore, merge_and_load
from app.services.remote.client import RemoteClient

logger = logging.getLogger(__name__)


def run_booking_sync_job(store: LocalRecordStore | None = None, client: RemoteClient | None = None) -> None:
    outcome = merge_and_load(store or LocalRecordStore(), client)
    if outcome.degraded:
        logger.warning("Booking sync job: remote unavailable (%s); %s cached booking(s) kept", outcome.error, len(outcome.records))
    else:
        logger.info("Booking sync job: %s booking(s) cached", len(outcome.records))
