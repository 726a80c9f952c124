"""
Member collection store.

Holds the ordered, in-memory list of members and mirrors it to the injected
storage after every successful mutation. Persistence is best-effort: a failed
write is logged and the in-memory change is kept.
"""

from __future__ import annotations

from typing import Optional
import uuid

from roster.core.config import Settings, get_settings
from roster.core.errors import MemberNotFoundError, PersistenceReadError, PersistenceWriteError
from roster.core.logging import get_logger
from roster.domain.members import Member, MemberDraft
from roster.repositories.json_storage import JsonFileStorage, MemberStorage

logger = get_logger("roster.store")


def default_storage(settings: Settings | None = None) -> MemberStorage:
    """Pick the storage backend configured in the environment."""
    settings = settings or get_settings()
    if settings.database_url:
        from sqlalchemy.exc import SQLAlchemyError

        from roster.db.models import create_tables
        from roster.repositories.sql_storage import SqlKeyValueStorage

        try:
            create_tables()
        except SQLAlchemyError as exc:
            # open() then reads nothing and starts empty
            logger.error("Cannot prepare SQL storage: %s", exc)
        return SqlKeyValueStorage(settings.storage_key)
    return JsonFileStorage(settings.data_file, settings.storage_key)


class MemberStore:
    """Ordered member collection with create/update/delete and write-through."""

    def __init__(self, storage: MemberStorage, members: list[Member] | None = None) -> None:
        self.storage = storage
        self._members: list[Member] = list(members or [])

    @classmethod
    def open(cls, storage: MemberStorage) -> "MemberStore":
        """Load the prior snapshot; any read/parse failure starts empty."""
        try:
            members = [Member.from_dict(item) for item in storage.load()]
        except PersistenceReadError as exc:
            logger.info("No stored collection, starting empty (%s)", exc)
            members = []
        except (TypeError, ValueError, KeyError) as exc:
            logger.warning("Stored collection is invalid, starting empty (%s)", exc)
            members = []
        ids = [m.id for m in members]
        if len(ids) != len(set(ids)):
            logger.warning("Stored collection has duplicate ids, starting empty")
            members = []
        return cls(storage, members)

    # -------------------------------------- queries --------------------------------------
    def list(self) -> list[Member]:
        return list(self._members)

    def get(self, member_id: str) -> Optional[Member]:
        for member in self._members:
            if member.id == member_id:
                return member
        return None

    def snapshot(self) -> list[dict]:
        return [m.to_dict() for m in self._members]

    def __len__(self) -> int:
        return len(self._members)

    # -------------------------------------- mutations --------------------------------------
    def _new_id(self) -> str:
        taken = {m.id for m in self._members}
        while True:
            candidate = uuid.uuid4().hex
            if candidate not in taken:
                return candidate

    def _persist(self) -> None:
        try:
            self.storage.save(self.snapshot())
        except PersistenceWriteError as exc:
            logger.error("Failed to persist members: %s", exc)

    def create(self, draft: MemberDraft, photo: Optional[str] = None) -> Member:
        member = Member.from_draft(self._new_id(), draft, photo)
        self._members.append(member)
        self._persist()
        return member

    def update(self, member_id: str, draft: MemberDraft, photo: Optional[str] = None) -> Member:
        """Overwrite a member in place; photo=None keeps the stored photo."""
        member = self.get(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        member.apply(draft, photo)
        self._persist()
        return member

    def delete(self, member_id: str) -> bool:
        """Remove a member; absent ids are a silent no-op."""
        remaining = [m for m in self._members if m.id != member_id]
        if len(remaining) == len(self._members):
            return False
        self._members = remaining
        self._persist()
        return True
