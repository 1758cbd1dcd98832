"""
Visit-log aggregation for the console's visitor trend chart.

- Range -> dense, chronological buckets ending now: day = 24 hours, week = 7 days,
  month = 30 days, year = 12 calendar months.
- Bucket key = calendar truncation in the analytics timezone (hour incl. UTC offset,
  day, or year-month). The same key routes each log entry; entries that parse to no
  pre-built bucket (too old, in the future, bad timestamp) are dropped silently.
- Per bucket: unique = distinct actor keys, visits = matching entries.

Log entries come in loose shapes, so timestamp/actor lookups try an ordered list of
field names and take the first present value.
"""
import logging
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.booking_config import ANALYTICS_TIMEZONE

logger = logging.getLogger(__name__)

# Range name -> fixed bucket count
VISIT_RANGES: dict[str, int] = {
    "day": 24,
    "week": 7,
    "month": 30,
    "year": 12,
}
DEFAULT_VISIT_RANGE = "week"

TIMESTAMP_FIELDS = ("timestamp", "created_at", "createdAt", "created_date", "date")
ACTOR_FIELDS = ("user_id", "userId", "actor_id", "actorId")
# Object payloads carry the entry list under one of these keys
RESPONSE_LIST_FIELDS = ("items", "data", "events")

# Epoch numbers above this are milliseconds (10^11 s is the year 5138)
_EPOCH_MS_THRESHOLD = 100_000_000_000


def first_present(entry: Any, fields: Iterable[str]) -> Any:
    """First value in `fields` order that is present and not None/"" on a mapping."""
    if not isinstance(entry, Mapping):
        return None
    for f in fields:
        v = entry.get(f)
        if v is not None and v != "":
            return v
    return None


def normalize_visit_logs_response(payload: Any) -> list:
    """Accept a bare list or an object with an items/data/events list; anything else is []."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for f in RESPONSE_LIST_FIELDS:
            v = payload.get(f)
            if isinstance(v, list):
                return v
    return []


def _zone(tz: tzinfo | str | None) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = tz or ANALYTICS_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown analytics timezone %r; using UTC", name)
        return timezone.utc


def parse_timestamp(value: Any) -> datetime | None:
    """
    Timezone-aware datetime from an ISO-8601 string, epoch seconds/milliseconds or datetime.
    Naive values are UTC. Returns None when unparsable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.lstrip("-").isdigit():
            try:
                return parse_timestamp(int(s))
            except ValueError:
                return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _hour_label(dt: datetime) -> str:
    h = dt.hour
    return f"{h % 12 or 12} {'AM' if h < 12 else 'PM'}"


def bucket_key(dt: datetime, range_: str, tz: tzinfo | str | None = None) -> str:
    """Truncation key for dt in the given range (must match build_visit_buckets keys)."""
    local = dt.astimezone(_zone(tz))
    if range_ == "day":
        return local.strftime("%Y-%m-%dT%H%z")
    if range_ in ("week", "month"):
        return local.date().isoformat()
    if range_ == "year":
        return f"{local.year:04d}-{local.month:02d}"
    raise ValueError(f"Unknown visit range: {range_!r}")


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def build_visit_buckets(
    range_: str,
    now: datetime | None = None,
    tz: tzinfo | str | None = None,
) -> list[dict[str, Any]]:
    """Dense, oldest-first buckets ({key, label}) covering the last N windows ending at now."""
    if range_ not in VISIT_RANGES:
        raise ValueError(f"Unknown visit range: {range_!r}")
    zone = _zone(tz)
    local_now = _now(now).astimezone(zone)
    count = VISIT_RANGES[range_]
    buckets: list[dict[str, Any]] = []

    if range_ == "day":
        # Step in UTC so DST transitions still give 24 distinct hours.
        top = local_now.replace(minute=0, second=0, microsecond=0).astimezone(timezone.utc)
        for i in range(count - 1, -1, -1):
            d = (top - timedelta(hours=i)).astimezone(zone)
            buckets.append({"key": bucket_key(d, range_, zone), "label": _hour_label(d)})
        return buckets

    if range_ in ("week", "month"):
        today = local_now.date()
        for i in range(count - 1, -1, -1):
            d = today - timedelta(days=i)
            label = d.strftime("%a") if range_ == "week" else f"{d.strftime('%b')} {d.day}"
            buckets.append({"key": d.isoformat(), "label": label})
        return buckets

    for i in range(count - 1, -1, -1):
        months = local_now.year * 12 + (local_now.month - 1) - i
        y, m = divmod(months, 12)
        first = date(y, m + 1, 1)
        buckets.append({"key": f"{first.year:04d}-{first.month:02d}", "label": first.strftime("%b")})
    return buckets


def aggregate_visit_logs(
    entries: Iterable[Any] | None,
    range_: str,
    now: datetime | None = None,
    tz: tzinfo | str | None = None,
) -> list[dict[str, Any]]:
    """
    [{key, label, unique, visits}] per bucket, chronological, always VISIT_RANGES[range_] long.
    Actor falls back to anon_<index> so anonymous entries count as distinct visitors.
    """
    zone = _zone(tz)
    buckets = build_visit_buckets(range_, now, zone)
    actors: dict[str, set[str]] = {b["key"]: set() for b in buckets}
    visits: dict[str, int] = {b["key"]: 0 for b in buckets}

    for idx, entry in enumerate(entries or []):
        ts = parse_timestamp(first_present(entry, TIMESTAMP_FIELDS))
        if ts is None:
            continue
        key = bucket_key(ts, range_, zone)
        if key not in visits:
            continue
        actor = first_present(entry, ACTOR_FIELDS)
        actors[key].add(str(actor) if actor is not None else f"anon_{idx}")
        visits[key] += 1

    return [
        {"key": b["key"], "label": b["label"], "unique": len(actors[b["key"]]), "visits": visits[b["key"]]}
        for b in buckets
    ]


def empty_visit_series(range_: str, now: datetime | None = None, tz: tzinfo | str | None = None) -> list[dict[str, Any]]:
    """All-zero series for the range (chart placeholder when logs are unavailable)."""
    return [{**b, "unique": 0, "visits": 0} for b in build_visit_buckets(range_, now, tz)]


def summarize_visits(points: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    """Totals line for the chart: sum of per-bucket unique users and visits."""
    unique = 0
    total = 0
    for p in points:
        unique += int(p.get("unique") or 0)
        total += int(p.get("visits") or 0)
    return {"unique": unique, "visits": total}
