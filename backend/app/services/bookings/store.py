"""
Local booking cache: one record_cache row holding a JSON array of booking records.

The cache is advisory. Storage faults (missing row, bad JSON, database errors) never
reach callers: reads degrade to an empty list and writes are logged and dropped.
"""
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import LOCAL_BOOKINGS_KEY
from app.db.session import SessionLocal
from app.models.record_cache import RecordCache
from app.services.bookings.types import (
    BOOKING_TEXT_FIELDS,
    ORIGIN_LOCAL,
    ORIGIN_REMOTE,
    STATUS_CONFIRMED,
    is_local_id,
    merge_key,
    new_local_id,
    text,
)

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _find_index(records: list[dict[str, Any]], incoming: dict[str, Any]) -> int | None:
    """
    Index of the stored record matching by id, else by merge key.
    Two different remote ids never fold into one another.
    """
    booking_id = text(incoming.get("id")).strip()
    if booking_id:
        for i, r in enumerate(records):
            if text(r.get("id")) == booking_id:
                return i
    key = merge_key(incoming)
    if key is None:
        return None
    incoming_remote = bool(booking_id) and not is_local_id(booking_id)
    for i, r in enumerate(records):
        if merge_key(r) != key:
            continue
        stored_id = text(r.get("id"))
        if incoming_remote and stored_id and not is_local_id(stored_id):
            continue
        return i
    return None


class LocalRecordStore:
    """Durable key-value cache of booking records (read_all / write_all / upsert / remove)."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        cache_key: str = LOCAL_BOOKINGS_KEY,
    ) -> None:
        self._session_factory = session_factory
        self._cache_key = cache_key
        # Serializes read-modify-write so concurrent upserts of different ids don't drop each other.
        self._lock = threading.RLock()

    def read_all(self) -> list[dict[str, Any]]:
        """All cached records. Missing or corrupt data reads as []."""
        try:
            db = self._session_factory()
            try:
                row = db.get(RecordCache, self._cache_key)
                raw = row.payload_json if row else None
            finally:
                db.close()
        except SQLAlchemyError as e:
            logger.warning("Local booking cache unreadable (%s); treating as empty", e)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Local booking cache holds malformed JSON; treating as empty")
            return []
        if not isinstance(parsed, list):
            return []
        return [b for b in parsed if isinstance(b, dict)]

    def write_all(self, records: Iterable[dict[str, Any]] | None) -> bool:
        """Replace the cached list. Best effort: returns False (and logs) instead of raising."""
        try:
            payload = json.dumps(list(records or []))
        except (TypeError, ValueError) as e:
            logger.warning("Local booking cache write skipped: not serializable (%s)", e)
            return False
        try:
            db = self._session_factory()
            try:
                row = db.get(RecordCache, self._cache_key)
                now = datetime.now(timezone.utc)
                if row:
                    row.payload_json = payload
                    row.updated_at = now
                else:
                    db.add(RecordCache(cache_key=self._cache_key, payload_json=payload, updated_at=now))
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                raise
            finally:
                db.close()
        except SQLAlchemyError as e:
            logger.warning("Local booking cache write failed: %s", e)
            return False
        return True

    def get(self, booking_id: str) -> dict[str, Any] | None:
        for r in self.read_all():
            if text(r.get("id")) == booking_id:
                return r
        return None

    def upsert(
        self,
        record: dict[str, Any],
        origin: str = ORIGIN_LOCAL,
        replace_empty: bool = False,
    ) -> dict[str, Any]:
        """
        Insert or shallow-merge one record; returns the stored (normalized) record.

        Matches an existing record by id, else by merge key (email, date, time_slot).
        Incoming non-empty values win; empty values only overwrite when replace_empty
        (admin edits clearing a field). The id is the incoming id, else the matched
        record's id, else a new local_ id. Once remote, a record stays origin=remote.
        """
        with self._lock:
            records = self.read_all()
            idx = _find_index(records, record)
            existing = records[idx] if idx is not None else {}

            merged: dict[str, Any] = dict(existing)
            for k, v in record.items():
                if k in ("id", "origin"):
                    continue
                if _is_empty(v) and not replace_empty:
                    continue
                merged[k] = v
            for f in BOOKING_TEXT_FIELDS:
                merged[f] = text(merged.get(f))
            if _is_empty(merged.get("status")):
                merged["status"] = STATUS_CONFIRMED
            incoming_id = text(record.get("id")).strip()
            existing_id = text(existing.get("id"))
            # A remote-issued id is never replaced by a local one.
            if existing_id and not is_local_id(existing_id) and is_local_id(incoming_id):
                incoming_id = existing_id
            merged["id"] = incoming_id or existing_id or new_local_id()
            merged["origin"] = ORIGIN_REMOTE if ORIGIN_REMOTE in (origin, existing.get("origin")) else ORIGIN_LOCAL

            if idx is not None:
                records[idx] = merged
            else:
                records.insert(0, merged)

            # Local drafts for the same reservation are superseded by the merged record.
            key = merge_key(merged)
            if key is not None:
                records = [
                    r for r in records
                    if r is merged or not (is_local_id(r.get("id")) and merge_key(r) == key)
                ]
            self.write_all(records)
            return dict(merged)

    def remove(self, booking_id: str) -> None:
        with self._lock:
            records = self.read_all()
            kept = [r for r in records if text(r.get("id")) != booking_id]
            if len(kept) != len(records):
                self.write_all(kept)
