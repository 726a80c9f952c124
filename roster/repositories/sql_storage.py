"""Key-value persistence adapter backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from roster.core.errors import PersistenceReadError, PersistenceWriteError
from roster.db.models import KeyValueEntry
from roster.db.session import get_session
from roster.repositories.json_storage import DEFAULT_KEY, decode_records, encode_records


class SqlKeyValueStorage:
    """Stores the serialized collection as one row of kv_entries."""

    def __init__(self, key: str = DEFAULT_KEY) -> None:
        self.key = key

    def load(self) -> list[dict]:
        try:
            with get_session() as session:
                entry = session.get(KeyValueEntry, self.key)
                raw = entry.value if entry else None
        except SQLAlchemyError as exc:
            raise PersistenceReadError(f"cannot read {self.key}: {exc}") from exc
        return decode_records(raw)

    def save(self, records: list[dict]) -> None:
        payload = encode_records(records)
        now = datetime.now(timezone.utc)
        try:
            with get_session() as session:
                entry = session.get(KeyValueEntry, self.key)
                if not entry:
                    session.add(KeyValueEntry(key=self.key, value=payload, updated_at=now))
                else:
                    entry.value = payload
                    entry.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceWriteError(f"cannot write {self.key}: {exc}") from exc
