"""
JSON-file persistence adapters.

The data file is a small local key-value store: a JSON object whose entries
are addressed by a fixed key (the member collection lives under "members").
Each save rewrites the entry wholesale; other keys in the file are preserved.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
import json

from roster.core.errors import PersistenceReadError, PersistenceWriteError

DEFAULT_KEY = "members"


class MemberStorage(Protocol):
    """Port used by MemberStore to read/write the full collection."""

    def load(self) -> list[dict]:
        ...

    def save(self, records: list[dict]) -> None:
        ...


def decode_records(raw: str | None) -> list[dict]:
    """Parse a serialized collection; anything but a JSON array is an error."""
    if raw is None:
        raise PersistenceReadError("no stored collection")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PersistenceReadError(f"malformed collection: {exc}") from exc
    if not isinstance(data, list):
        raise PersistenceReadError("stored collection is not a list")
    return data


def encode_records(records: list[dict]) -> str:
    try:
        return json.dumps(records, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise PersistenceWriteError(f"collection is not serializable: {exc}") from exc


class JsonFileStorage:
    """Stores the collection as a JSON string under `key` inside `path`."""

    def __init__(self, path: Path | str, key: str = DEFAULT_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_file(self) -> dict:
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("data file is not an object")
        return data

    def load(self) -> list[dict]:
        if not self.path.exists():
            raise PersistenceReadError(f"{self.path} does not exist")
        try:
            entries = self._read_file()
        except (OSError, ValueError) as exc:
            raise PersistenceReadError(f"cannot read {self.path}: {exc}") from exc
        return decode_records(entries.get(self.key))

    def save(self, records: list[dict]) -> None:
        payload = encode_records(records)
        try:
            entries = self._read_file() if self.path.exists() else {}
        except (OSError, ValueError):
            entries = {}
        entries[self.key] = payload
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise PersistenceWriteError(f"cannot write {self.path}: {exc}") from exc


class MemoryStorage:
    """In-process key-value storage (tests, throwaway runs)."""

    def __init__(self, entries: dict[str, str] | None = None, key: str = DEFAULT_KEY) -> None:
        self.entries: dict[str, str] = entries if entries is not None else {}
        self.key = key
        self.saves = 0

    def load(self) -> list[dict]:
        return decode_records(self.entries.get(self.key))

    def save(self, records: list[dict]) -> None:
        self.entries[self.key] = encode_records(records)
        self.saves += 1
