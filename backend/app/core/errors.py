"""
Centralized error handling for remote API failures.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

MSG_RESERVATIONS_UNAVAILABLE = "Loaded local reservations only (remote list unavailable)."
MSG_UPDATE_FAILED = "Update failed."
MSG_DELETE_FAILED = "Delete failed."
MSG_BOOKING_NOT_FOUND = "Reservation not found."
MSG_VISITS_UNAVAILABLE = "Visit analytics unavailable."
MSG_ADMIN_REQUIRED = "Admin Access Required. Only admin users can view this page."

# HTTP status codes for known error categories
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404  # local_ booking missing from the cache
STATUS_BAD_GATEWAY = 502  # remote down, 5xx, network failure
STATUS_GATEWAY_TIMEOUT = 504


class RemoteRequestError(Exception):
    """Remote entity API call failed. status_code is None for network/transport errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _is_timeout(exc: RemoteRequestError) -> bool:
    return exc.status_code is None and "timed out" in exc.message.lower()


def _is_client_error(exc: RemoteRequestError) -> bool:
    return exc.status_code is not None and 400 <= exc.status_code < 500


REMOTE_ERROR_RULES: list[tuple[Callable[[RemoteRequestError], bool], Callable[[RemoteRequestError], int]]] = [
    (_is_timeout, lambda e: STATUS_GATEWAY_TIMEOUT),
    (_is_client_error, lambda e: e.status_code),
]


def remote_error_to_http(exc: Exception) -> HTTPException:
    """
    Map a gateway failure into an HTTPException.
    4xx from the remote API pass through; timeouts become 504; everything else 502.
    """
    if not isinstance(exc, RemoteRequestError):
        return HTTPException(status_code=STATUS_BAD_GATEWAY, detail=str(exc))
    for predicate, status_for in REMOTE_ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_for(exc), detail=exc.message)
    return HTTPException(status_code=STATUS_BAD_GATEWAY, detail=exc.message)
