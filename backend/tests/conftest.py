"""
Pytest configuration and fixtures
"""
from typing import Any

import httpx
import pytest
from apscheduler.jobstores.base import JobLookupError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models import RecordCache  # noqa: F401
from app.services.bookings.store import LocalRecordStore
from app.services.capture.page import SnapshotPageAdapter
from app.services.capture.watcher import ConfirmationWatcher
from app.services.remote.client import RemoteClient
from app.services.remote.config import RemoteConfig

REMOTE_BASE = "https://remote.test/api/apps"
REMOTE_APP_ID = "app123"
REMOTE_PREFIX = "/api/apps/" + REMOTE_APP_ID


class FakeRemote:
    """Routes (method, entity path) to canned responses and records every request."""

    def __init__(self, token: str = "tok") -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any, str | None]] = {}
        self.requests: list[httpx.Request] = []
        self.token = token

    def on(self, method: str, path: str, status: int = 200, json: Any = None, error: str | None = None) -> None:
        self.routes[(method, path)] = (status, json, error)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == REMOTE_PREFIX + path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(REMOTE_PREFIX):
            path = path[len(REMOTE_PREFIX):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        status, body, error = route
        if error == "connect":
            raise httpx.ConnectError("Connection refused", request=request)
        if error == "timeout":
            raise httpx.ReadTimeout("Read timed out", request=request)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def client(self) -> RemoteClient:
        config = RemoteConfig(base_url=REMOTE_BASE, app_id=REMOTE_APP_ID, access_token=self.token, timeout=5.0)
        return RemoteClient(config, transport=httpx.MockTransport(self.handler))


class FakeScheduler:
    """add_job/remove_job stand-in; tick() runs every registered job once."""

    def __init__(self) -> None:
        self.jobs: dict[str, tuple[Any, str, dict[str, Any]]] = {}
        self.added: list[str] = []

    def add_job(self, func, trigger=None, id=None, **kwargs):
        self.jobs[id] = (func, trigger, kwargs)
        self.added.append(id)

    def remove_job(self, job_id):
        if job_id not in self.jobs:
            raise JobLookupError(job_id)
        del self.jobs[job_id]

    def tick(self) -> None:
        for func, _, _ in list(self.jobs.values()):
            func()


def make_snapshot(
    name: str = "Ada Lovelace",
    email: str = "ada@example.org",
    phone: str = "555-0100",
    notes: str = "Extra towels",
    sauna: str = "Cedar Room",
    date: str = "2024-01-01",
    time_slot: str = "10:00",
    headings: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Booking page snapshot as posted by the in-page script."""
    return {
        "inputs": [
            {"placeholder": "John Doe", "value": name},
            {"placeholder": "john@example.com", "value": email},
            {"placeholder": "(555) 123-4567", "value": phone},
            {"placeholder": "Special requests...", "value": notes},
        ],
        "summary": [
            {"label": "Sauna", "value": sauna},
            {"label": "Date", "value": date},
            {"label": "Time", "value": time_slot},
        ],
        "title": sauna,
        "headings": list(headings),
    }


@pytest.fixture(scope="function")
def test_engine():
    """In-memory database shared across threads/sessions for one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def store(session_factory):
    """Local booking cache backed by the test database"""
    return LocalRecordStore(session_factory)


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def snapshot():
    """Factory for booking page snapshots"""
    return make_snapshot


@pytest.fixture
def page():
    return SnapshotPageAdapter()


@pytest.fixture
def watcher(store, scheduler, page):
    return ConfirmationWatcher(store, scheduler, page, interval_seconds=0.25, max_polls=40)


# Test markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
