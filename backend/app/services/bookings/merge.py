"""
Merge engine: reconcile the remote booking list with the local cache.

The remote API is authoritative but unreliable. Every remote record is absorbed into
the cache (remote fields applied last, so they win); when the fetch fails the view
falls back to the cache alone and the outcome is flagged degraded.

Edit/delete round-trips live here too: remote ids go through the API first and the
cache follows only on success; local_ ids never leave the cache.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from app.core.booking_config import BOOKING_LIST_LIMIT
from app.core.constants import (
    DATA_MODE_LOCAL_ONLY,
    DATA_MODE_REMOTE_LOCAL,
    STATUS_DEGRADED,
    STATUS_FAILED,
    STATUS_OK,
)
from app.core.errors import (
    MSG_BOOKING_NOT_FOUND,
    MSG_DELETE_FAILED,
    MSG_RESERVATIONS_UNAVAILABLE,
    MSG_UPDATE_FAILED,
    RemoteRequestError,
)
from app.services import remote
from app.services.bookings.store import LocalRecordStore
from app.services.bookings.types import ORIGIN_LOCAL, ORIGIN_REMOTE, is_local_id, text
from app.services.remote.client import RemoteClient

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    """Result of merge_and_load: the ordered bookings plus where they came from."""
    records: list[dict[str, Any]] = field(default_factory=list)
    status: str = STATUS_OK
    message: str = ""
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status == STATUS_DEGRADED

    @property
    def data_mode(self) -> str:
        return DATA_MODE_LOCAL_ONLY if self.degraded else DATA_MODE_REMOTE_LOCAL


@dataclass
class MutationOutcome:
    """Result of an admin edit or delete."""
    status: str
    booking_id: str
    record: dict[str, Any] | None = None
    message: str = ""
    error: RemoteRequestError | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def merge_by_id(*groups: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """One record per id; later groups shallow-merge over earlier ones. Id-less records are skipped."""
    by_id: dict[str, dict[str, Any]] = {}
    for group in groups:
        for b in group:
            if not isinstance(b, dict):
                continue
            booking_id = text(b.get("id"))
            if not booking_id:
                continue
            by_id[booking_id] = {**by_id.get(booking_id, {}), **b}
    return list(by_id.values())


def sort_bookings(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """date descending; same date ordered by raw time_slot label ascending."""
    by_slot = sorted(records, key=lambda b: text(b.get("time_slot")))
    return sorted(by_slot, key=lambda b: text(b.get("date")), reverse=True)


def merge_and_load(
    store: LocalRecordStore,
    client: RemoteClient | None = None,
    limit: int = BOOKING_LIST_LIMIT,
) -> SyncOutcome:
    """
    Fetch the remote list (best effort), absorb it into the cache, and return
    remote ∪ cache as one de-duplicated list sorted for the console table.
    Never raises for remote faults: they become status=degraded.
    """
    remote_records: list[dict[str, Any]] = []
    error: str | None = None
    try:
        remote_records = remote.list_bookings(limit=limit, client=client)
    except RemoteRequestError as e:
        error = str(e)
        logger.warning("Remote booking list unavailable, using local cache only: %s", e)

    absorbed: list[dict[str, Any]] = []
    for item in remote_records:
        if not text(item.get("id")):
            logger.debug("Skipping remote booking without id: %s", item)
            continue
        absorbed.append(store.upsert(item, origin=ORIGIN_REMOTE))

    local_records = store.read_all()
    records = sort_bookings(merge_by_id(absorbed, local_records))

    if error is not None:
        return SyncOutcome(
            records=records,
            status=STATUS_DEGRADED,
            message=MSG_RESERVATIONS_UNAVAILABLE,
            error=error,
        )
    logger.info("Merged bookings: remote=%s local=%s total=%s", len(absorbed), len(local_records), len(records))
    return SyncOutcome(records=records, status=STATUS_OK, message=f"Loaded {len(records)} reservation(s).")


def update_booking(
    store: LocalRecordStore,
    booking_id: str,
    fields: dict[str, Any],
    client: RemoteClient | None = None,
) -> MutationOutcome:
    """Admin edit: PUT remote ids first, then merge the result into the cache."""
    if is_local_id(booking_id) and store.get(booking_id) is None:
        logger.info("Booking %s update skipped: not in the local cache", booking_id)
        return MutationOutcome(status=STATUS_FAILED, booking_id=booking_id, message=MSG_BOOKING_NOT_FOUND)
    try:
        if is_local_id(booking_id):
            updated, origin = dict(fields), ORIGIN_LOCAL
        else:
            updated, origin = remote.update_booking(booking_id, fields, client=client), ORIGIN_REMOTE
    except RemoteRequestError as e:
        logger.warning("Booking %s update failed: %s", booking_id, e)
        return MutationOutcome(status=STATUS_FAILED, booking_id=booking_id, message=str(e) or MSG_UPDATE_FAILED, error=e)
    record = store.upsert({**updated, "id": booking_id}, origin=origin, replace_empty=True)
    return MutationOutcome(status=STATUS_OK, booking_id=booking_id, record=record, message="Reservation updated.")


def delete_booking(
    store: LocalRecordStore,
    booking_id: str,
    client: RemoteClient | None = None,
) -> MutationOutcome:
    """Admin delete: DELETE remote ids first; the cached copy goes only once the remote agrees."""
    if not is_local_id(booking_id):
        try:
            remote.delete_booking(booking_id, client=client)
        except RemoteRequestError as e:
            logger.warning("Booking %s delete failed: %s", booking_id, e)
            return MutationOutcome(status=STATUS_FAILED, booking_id=booking_id, message=str(e) or MSG_DELETE_FAILED, error=e)
    store.remove(booking_id)
    return MutationOutcome(status=STATUS_OK, booking_id=booking_id, message="Reservation deleted.")
