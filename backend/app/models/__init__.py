from app.models.record_cache import RecordCache

__all__ = [
    "RecordCache",
]
