"""
Admin console API: merged reservations (remote + local cache), edit/delete, visitor trend.

Every route except /me requires an admin (role from GET /entities/User/me on the remote API).
Remote faults never surface as 500s: the list degrades to local-only and analytics to
an all-zero series; edits/deletes answer with the remote message.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.api.deps import get_admin_gate, get_remote_client, get_store, require_admin
from app.core.errors import STATUS_NOT_FOUND, remote_error_to_http
from app.services.analytics import DEFAULT_VISIT_RANGE, load_visit_stats
from app.services.bookings import delete_booking, merge_and_load, update_booking
from app.services.bookings.store import LocalRecordStore
from app.services.identity import AdminGate
from app.services.remote.client import RemoteClient

router = APIRouter()
logger = logging.getLogger(__name__)


class BookingUpdate(BaseModel):
    guest_name: str = ""
    guest_phone: str = ""
    guest_email: str = ""
    date: str = ""
    time_slot: str = Field("", description="Free-text slot label, e.g. 2:00 PM")
    notes: str = ""


@router.get("/me")
def admin_me(gate: AdminGate = Depends(get_admin_gate)) -> dict[str, Any]:
    """Whether the configured credential belongs to an admin (drives the Admin nav link)."""
    return {"is_admin": gate.is_admin()}


@router.get("/bookings", dependencies=[Depends(require_admin)])
def list_bookings(
    store: LocalRecordStore = Depends(get_store),
    client: RemoteClient = Depends(get_remote_client),
) -> dict[str, Any]:
    """
    Remote list merged into the local cache, sorted date desc / time slot asc.
    data_mode is remote_local, or local_only when the remote list could not be fetched.
    """
    outcome = merge_and_load(store, client)
    return {
        "bookings": outcome.records,
        "count": len(outcome.records),
        "data_mode": outcome.data_mode,
        "status": outcome.status,
        "message": outcome.message,
    }


@router.post("/sync", dependencies=[Depends(require_admin)])
def sync_bookings(
    store: LocalRecordStore = Depends(get_store),
    client: RemoteClient = Depends(get_remote_client),
) -> dict[str, Any]:
    """Pull the remote list into the local cache without returning rows."""
    outcome = merge_and_load(store, client)
    return {
        "count": len(outcome.records),
        "data_mode": outcome.data_mode,
        "status": outcome.status,
        "message": outcome.message,
    }


@router.put("/bookings/{booking_id}", dependencies=[Depends(require_admin)])
def edit_booking(
    booking_id: str,
    body: BookingUpdate,
    store: LocalRecordStore = Depends(get_store),
    client: RemoteClient = Depends(get_remote_client),
) -> dict[str, Any]:
    """Save an edit (only the fields sent): remote bookings are PUT first; local_ bookings are edited in the cache only."""
    outcome = update_booking(store, booking_id, body.model_dump(exclude_unset=True), client=client)
    if not outcome.ok:
        if outcome.error is None:
            raise HTTPException(status_code=STATUS_NOT_FOUND, detail=outcome.message)
        raise remote_error_to_http(outcome.error)
    return {"booking": outcome.record, "message": outcome.message}


@router.delete("/bookings/{booking_id}", dependencies=[Depends(require_admin)])
def remove_booking(
    booking_id: str,
    store: LocalRecordStore = Depends(get_store),
    client: RemoteClient = Depends(get_remote_client),
) -> dict[str, Any]:
    outcome = delete_booking(store, booking_id, client=client)
    if not outcome.ok:
        raise remote_error_to_http(outcome.error)
    return {"id": booking_id, "message": outcome.message}


@router.get("/visits", dependencies=[Depends(require_admin)])
def visit_stats(
    range_: str = Query(DEFAULT_VISIT_RANGE, alias="range", pattern="^(day|week|month|year)$"),
    client: RemoteClient = Depends(get_remote_client),
) -> dict[str, Any]:
    """Visitor trend: unique users and total visits per bucket (24 hours / 7 days / 30 days / 12 months)."""
    stats = load_visit_stats(range_, client=client)
    return {
        "range": stats.range,
        "points": stats.points,
        "totals": stats.totals,
        "status": stats.status,
        "message": stats.message,
    }
