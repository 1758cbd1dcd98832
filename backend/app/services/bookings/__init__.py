"""
Bookings: local cache of reservation records and reconciliation with the remote list.

- store: LocalRecordStore (record_cache row, JSON array, shallow-merge upsert).
- merge: merge_and_load (remote ∪ cache, degraded when the remote is down), edit/delete round-trips.
"""
from app.services.bookings.merge import (
    MutationOutcome,
    SyncOutcome,
    delete_booking,
    merge_and_load,
    merge_by_id,
    sort_bookings,
    update_booking,
)
from app.services.bookings.store import LocalRecordStore

__all__ = [
    "LocalRecordStore",
    "MutationOutcome",
    "SyncOutcome",
    "delete_booking",
    "merge_and_load",
    "merge_by_id",
    "sort_bookings",
    "update_booking",
]
