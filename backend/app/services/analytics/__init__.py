"""Visitor analytics: fetch the remote app log and bucket it for the console chart."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.core.booking_config import VISIT_LOG_LIMIT
from app.core.constants import STATUS_FAILED, STATUS_OK
from app.core.errors import MSG_VISITS_UNAVAILABLE, RemoteRequestError
from app.services import remote
from app.services.analytics.visits import (
    DEFAULT_VISIT_RANGE,
    VISIT_RANGES,
    aggregate_visit_logs,
    empty_visit_series,
    normalize_visit_logs_response,
    summarize_visits,
)
from app.services.remote.client import RemoteClient

logger = logging.getLogger(__name__)


@dataclass
class VisitStats:
    range: str
    points: list[dict[str, Any]] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=lambda: {"unique": 0, "visits": 0})
    status: str = STATUS_OK
    message: str = ""
    error: str | None = None


def load_visit_stats(
    range_: str = DEFAULT_VISIT_RANGE,
    client: RemoteClient | None = None,
    limit: int = VISIT_LOG_LIMIT,
    now: datetime | None = None,
) -> VisitStats:
    """Aggregated visit series for the range. Remote failure -> all-zero series, status=failed."""
    try:
        raw = remote.fetch_visit_logs(limit=limit, client=client)
    except RemoteRequestError as e:
        logger.warning("Visit logs unavailable: %s", e)
        return VisitStats(
            range=range_,
            points=empty_visit_series(range_, now),
            status=STATUS_FAILED,
            message=MSG_VISITS_UNAVAILABLE,
            error=str(e),
        )
    logs = normalize_visit_logs_response(raw)
    points = aggregate_visit_logs(logs, range_, now)
    return VisitStats(
        range=range_,
        points=points,
        totals=summarize_visits(points),
        message="Visit analytics loaded.",
    )


__all__ = [
    "DEFAULT_VISIT_RANGE",
    "VISIT_RANGES",
    "VisitStats",
    "load_visit_stats",
]
