"""SQLAlchemy model for the key-value store and its bootstrap."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text, func

from .session import Base, get_engine


class KeyValueEntry(Base):
    """One storage key (e.g. "members") holding a serialized JSON value."""

    __tablename__ = "kv_entries"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


def create_tables() -> None:
    """Create kv_entries if missing; raises SQLAlchemyError when unreachable."""
    Base.metadata.create_all(bind=get_engine(), tables=[KeyValueEntry.__table__])
