"""One-off migration script: JSON key-value file -> SQL kv_entries table."""
from __future__ import annotations

import sys
from pathlib import Path

# Make the roster package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core.config import get_settings
from roster.core.errors import PersistenceReadError
from roster.db.models import create_tables
from roster.domain.members import Member
from roster.repositories.json_storage import JsonFileStorage
from roster.repositories.sql_storage import SqlKeyValueStorage


def migrate() -> int:
    settings = get_settings()
    if not settings.database_url:
        raise SystemExit("DATABASE_URL is not set")
    source = JsonFileStorage(settings.data_file, settings.storage_key)
    try:
        records = source.load()
    except PersistenceReadError as exc:
        raise SystemExit(f"Nothing to migrate: {exc}")
    # round-trip through Member so invalid rows fail here, not at app startup
    members = [Member.from_dict(item) for item in records]
    create_tables()
    SqlKeyValueStorage(settings.storage_key).save([m.to_dict() for m in members])
    return len(members)


if __name__ == "__main__":
    count = migrate()
    print(f"Migration completed: {count} members.")
