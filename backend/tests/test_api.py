"""
Integration tests for the admin console and capture routes
"""
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_admin_gate, get_page, get_remote_client, get_store, get_watcher
from app.main import app
from app.services.identity import AdminGate


@pytest.fixture
def api(store, fake_remote, watcher, page):
    """TestClient over app with the cache, remote API, gate and watcher swapped for test doubles"""
    client = fake_remote.client
    gate = AdminGate(client)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_remote_client] = lambda: client
    app.dependency_overrides[get_admin_gate] = lambda: gate
    app.dependency_overrides[get_watcher] = lambda: watcher
    app.dependency_overrides[get_page] = lambda: page
    # No context manager: lifespan (init_db, background scheduler) stays off.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin(fake_remote):
    fake_remote.on("GET", "/entities/User/me", json={"role": "admin", "email": "owner@example.org"})


@pytest.mark.integration
class TestAdminAccess:

    def test_health(self, api):
        assert api.get("/health").json() == {"status": "ok"}

    def test_me_reports_admin(self, api, as_admin):
        assert api.get("/admin/me").json() == {"is_admin": True}

    def test_me_when_remote_down(self, api, fake_remote):
        fake_remote.on("GET", "/entities/User/me", error="connect")
        assert api.get("/admin/me").json() == {"is_admin": False}

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/admin/bookings"),
            ("POST", "/admin/sync"),
            ("DELETE", "/admin/bookings/r1"),
            ("GET", "/admin/visits"),
        ],
    )
    def test_non_admin_is_forbidden(self, api, fake_remote, method, path):
        fake_remote.on("GET", "/entities/User/me", json={"role": "user"})
        r = api.request(method, path)
        assert r.status_code == 403
        assert "Admin Access Required" in r.json()["detail"]
        assert fake_remote.calls("GET", "/entities/Booking") == []


@pytest.mark.integration
class TestAdminBookings:

    def test_list_merges_remote_and_local(self, api, as_admin, fake_remote, store):
        store.upsert({"guest_name": "Walk-in", "guest_email": "walkin@example.org", "date": "2024-01-05", "time_slot": "10:00"})
        fake_remote.on(
            "GET",
            "/entities/Booking",
            json=[{"id": "r1", "guest_name": "Grace", "guest_email": "grace@example.org", "date": "2024-01-06", "time_slot": "09:00"}],
        )
        body = api.get("/admin/bookings").json()
        assert body["count"] == 2
        assert body["data_mode"] == "remote_local"
        assert body["status"] == "ok"
        assert [b["guest_name"] for b in body["bookings"]] == ["Grace", "Walk-in"]

    def test_list_degrades_when_remote_down(self, api, as_admin, fake_remote, store):
        store.upsert({"guest_name": "Walk-in", "date": "2024-01-05", "time_slot": "10:00"})
        fake_remote.on("GET", "/entities/Booking", status=502, json={"message": "Bad gateway"})
        r = api.get("/admin/bookings")
        assert r.status_code == 200
        body = r.json()
        assert body["data_mode"] == "local_only"
        assert body["status"] == "degraded"
        assert body["count"] == 1

    def test_sync(self, api, as_admin, fake_remote, store):
        fake_remote.on("GET", "/entities/Booking", json=[{"id": "r1", "guest_name": "Grace"}])
        body = api.post("/admin/sync").json()
        assert body["count"] == 1
        assert "bookings" not in body
        assert store.get("r1") is not None

    def test_edit_remote_booking(self, api, as_admin, fake_remote, store):
        store.upsert({"id": "r1", "guest_name": "Grace", "notes": "old"}, origin="remote")
        fake_remote.on("PUT", "/entities/Booking/r1", json={"id": "r1", "guest_name": "Grace H.", "notes": ""})
        r = api.put("/admin/bookings/r1", json={"guest_name": "Grace H.", "notes": ""})
        assert r.status_code == 200
        assert r.json()["booking"]["guest_name"] == "Grace H."
        assert store.get("r1")["notes"] == ""

    def test_edit_failure_maps_remote_status(self, api, as_admin, fake_remote, store):
        store.upsert({"id": "r1", "guest_name": "Grace"}, origin="remote")
        fake_remote.on("PUT", "/entities/Booking/r1", status=404, json={"message": "Booking not found"})
        r = api.put("/admin/bookings/r1", json={"guest_name": "Nobody"})
        assert r.status_code == 404
        assert r.json()["detail"] == "Booking not found"
        assert store.get("r1")["guest_name"] == "Grace"

    def test_delete_remote_down_is_bad_gateway(self, api, as_admin, fake_remote, store):
        store.upsert({"id": "r1", "guest_name": "Grace"}, origin="remote")
        fake_remote.on("DELETE", "/entities/Booking/r1", error="connect")
        r = api.delete("/admin/bookings/r1")
        assert r.status_code == 502
        assert store.get("r1") is not None

    def test_edit_missing_local_booking(self, api, as_admin, fake_remote, store):
        r = api.put("/admin/bookings/local_1_abcdef", json={"guest_name": "Ghost"})
        assert r.status_code == 404
        assert r.json()["detail"] == "Reservation not found."
        assert store.read_all() == []

    def test_delete_local_booking(self, api, as_admin, fake_remote, store):
        draft = store.upsert({"guest_name": "Walk-in"})
        r = api.delete(f"/admin/bookings/{draft['id']}")
        assert r.status_code == 200
        assert r.json()["id"] == draft["id"]
        assert store.read_all() == []
        assert fake_remote.calls("DELETE", f"/entities/Booking/{draft['id']}") == []


@pytest.mark.integration
class TestAdminVisits:

    def test_visits_week_by_default(self, api, as_admin, fake_remote):
        fake_remote.on("GET", "/app-logs/app123", json=[])
        body = api.get("/admin/visits").json()
        assert body["range"] == "week"
        assert len(body["points"]) == 7
        assert body["totals"] == {"unique": 0, "visits": 0}

    def test_visits_failure_is_zero_series(self, api, as_admin, fake_remote):
        fake_remote.on("GET", "/app-logs/app123", status=500)
        r = api.get("/admin/visits", params={"range": "day"})
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "failed"
        assert len(body["points"]) == 24

    def test_unknown_range_rejected(self, api, as_admin):
        assert api.get("/admin/visits", params={"range": "decade"}).status_code == 422


@pytest.mark.integration
class TestCaptureRoutes:

    def test_click_then_confirmation_commits(self, api, watcher, store, snapshot):
        r = api.post("/capture/click", json={"label": "Confirm Booking", "snapshot": snapshot()})
        body = r.json()
        assert body["started"] is True
        assert body["state"] == "watching"

        r = api.post("/capture/page", json=snapshot(headings=("Booking Confirmed!",)))
        assert r.json() == {"ok": True, "state": "watching"}
        watcher.poll()

        status = api.get("/capture/status").json()
        assert status["state"] == "committed"
        assert status["committed_id"].startswith("local_")
        assert store.get(status["committed_id"])["guest_name"] == "Ada Lovelace"

    def test_other_click_does_nothing(self, api, snapshot):
        body = api.post("/capture/click", json={"label": "Choose time", "snapshot": snapshot()}).json()
        assert body["started"] is False
        assert body["state"] == "idle"

    def test_click_without_guest_details(self, api, snapshot):
        body = api.post("/capture/click", json={"label": "Confirm Booking", "snapshot": snapshot(name="", email="")}).json()
        assert body["started"] is False
