"""
Request dependencies. Shared services live on app.state (set up in app.main);
tests swap them through app.dependency_overrides.
"""
from fastapi import Depends, HTTPException, Request

from app.core.errors import MSG_ADMIN_REQUIRED, STATUS_FORBIDDEN
from app.services.bookings.store import LocalRecordStore
from app.services.capture.page import SnapshotPageAdapter
from app.services.capture.watcher import ConfirmationWatcher
from app.services.identity import AdminGate
from app.services.remote.client import RemoteClient


def get_store(request: Request) -> LocalRecordStore:
    return request.app.state.store


def get_remote_client(request: Request) -> RemoteClient:
    return request.app.state.remote_client


def get_admin_gate(request: Request) -> AdminGate:
    return request.app.state.admin_gate


def get_watcher(request: Request) -> ConfirmationWatcher:
    return request.app.state.watcher


def get_page(request: Request) -> SnapshotPageAdapter:
    return request.app.state.page


def require_admin(gate: AdminGate = Depends(get_admin_gate)) -> None:
    if not gate.is_admin():
        raise HTTPException(status_code=STATUS_FORBIDDEN, detail=MSG_ADMIN_REQUIRED)
