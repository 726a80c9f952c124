"""
Configuration helpers for the roster backend.

Routers/services read settings through get_settings() instead of touching
os.environ directly, so tests can swap the environment and call
get_settings.cache_clear().
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "data.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_file: Path
    storage_key: str
    database_url: str
    max_upload_bytes: int
    require_photo_on_create: bool
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    data_file = (os.getenv("DATA_FILE") or "").strip()
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_file=Path(data_file) if data_file else DEFAULT_DATA_FILE,
        storage_key=(os.getenv("STORAGE_KEY") or "members").strip() or "members",
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)), 2 * 1024 * 1024),
        require_photo_on_create=_bool(os.getenv("REQUIRE_PHOTO_ON_CREATE"), True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
