"""Remote entity API: Booking, User and app-log endpoints. The client below just sends the request."""
from typing import Any
from urllib.parse import quote

from app.core.booking_config import BOOKING_LIST_LIMIT, VISIT_LOG_LIMIT
from app.services.remote.client import RemoteClient
from app.services.remote.config import RemoteConfig

default_client = RemoteClient()

# Fields the console may edit through PUT /entities/Booking/{id}
EDITABLE_BOOKING_FIELDS = ("guest_name", "guest_phone", "guest_email", "date", "time_slot", "notes")


def _booking_path(booking_id: str) -> str:
    return "/entities/Booking/" + quote(str(booking_id), safe="")


def list_bookings(
    limit: int = BOOKING_LIST_LIMIT,
    sort: str = "-date",
    client: RemoteClient | None = None,
) -> list[dict[str, Any]]:
    """GET /entities/Booking?limit=N&sort=-date. Non-list bodies count as an empty list."""
    data = (client or default_client).request("/entities/Booking", params={"limit": limit, "sort": sort})
    if not isinstance(data, list):
        return []
    return [b for b in data if isinstance(b, dict)]


def update_booking(
    booking_id: str,
    fields: dict[str, Any],
    client: RemoteClient | None = None,
) -> dict[str, Any]:
    """PUT editable fields; returns the updated remote object (or the sent fields when the body is empty)."""
    payload = {k: fields[k] for k in EDITABLE_BOOKING_FIELDS if k in fields}
    data = (client or default_client).request(_booking_path(booking_id), method="PUT", json_body=payload)
    return data if isinstance(data, dict) else payload


def delete_booking(booking_id: str, client: RemoteClient | None = None) -> None:
    (client or default_client).request(_booking_path(booking_id), method="DELETE")


def get_current_user(client: RemoteClient | None = None) -> dict[str, Any] | None:
    """GET /entities/User/me. The `role` field drives admin gating."""
    data = (client or default_client).request("/entities/User/me")
    return data if isinstance(data, dict) else None


def fetch_visit_logs(limit: int = VISIT_LOG_LIMIT, client: RemoteClient | None = None) -> Any:
    """GET /app-logs/<app id>?limit=N. Raw payload; see analytics.visits.normalize_visit_logs_response."""
    c = client or default_client
    return c.request("/app-logs/" + c.config.app_id, params={"limit": limit})


__all__ = [
    "EDITABLE_BOOKING_FIELDS",
    "RemoteClient",
    "RemoteConfig",
    "default_client",
    "delete_booking",
    "fetch_visit_logs",
    "get_current_user",
    "list_bookings",
    "update_booking",
]
