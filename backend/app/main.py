"""
FastAPI app entrypoint.

Booking sync + visit analytics for the sauna site: admin console API (/admin) and
booking-page capture events (/capture). The remote entity API stays the source of truth;
this service keeps a local cache of bookings and merges the two for the console.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.api.routes import admin, capture
from app.config import settings
from app.core.booking_config import BOOKING_SYNC_INTERVAL_SECONDS
from app.core.constants import BOOKING_SYNC_JOB_ID
from app.db.session import init_db
from app.scheduler.booking_sync_job import run_booking_sync_job
from app.services.bookings.store import LocalRecordStore
from app.services.capture.page import SnapshotPageAdapter
from app.services.capture.watcher import ConfirmationWatcher
from app.services.identity import AdminGate
from app.services.remote import default_client

logger = logging.getLogger(__name__)

# Scheduler: confirmation watch ticks + periodic booking sync
_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if BOOKING_SYNC_INTERVAL_SECONDS > 0:
        _scheduler.add_job(
            run_booking_sync_job,
            "interval",
            seconds=BOOKING_SYNC_INTERVAL_SECONDS,
            id=BOOKING_SYNC_JOB_ID,
            kwargs={"store": app.state.store, "client": app.state.remote_client},
            replace_existing=True,
        )
    _scheduler.start()
    app.state.scheduler = _scheduler
    logger.info(
        "Backend ready: remote=%s/%s token=%s sync_every=%ss",
        default_client.config.base_url,
        default_client.config.app_id,
        "set" if default_client.config.has_token() else "missing",
        BOOKING_SYNC_INTERVAL_SECONDS,
    )
    yield
    app.state.watcher.stop()
    _scheduler.shutdown(wait=False)


app = FastAPI(title="Go Sauna Bookings", version="0.1.0", lifespan=lifespan)

app.state.store = LocalRecordStore()
app.state.remote_client = default_client
app.state.admin_gate = AdminGate(default_client)
app.state.page = SnapshotPageAdapter()
app.state.watcher = ConfirmationWatcher(app.state.store, _scheduler, app.state.page)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the public site
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_extra = settings.cors_origins or os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin.router, prefix="/admin", tags=["admin"])
app.include_router(capture.router, prefix="/capture", tags=["capture"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Go Sauna bookings API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
