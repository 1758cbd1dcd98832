"""Durable key -> JSON payload cache (e.g. the local booking list)."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.db.base import Base


class RecordCache(Base):
    __tablename__ = "record_cache"

    cache_key = Column(String(64), primary_key=True)
    payload_json = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
