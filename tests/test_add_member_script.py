"""
scripts/add_member.py honours the same photo rules as the web form.
"""
from __future__ import annotations

import io
import json
import runpy
import sys
from pathlib import Path

import pytest
from PIL import Image

# Make the roster package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core import config as core_config  # noqa: E402
from roster.core.errors import DraftValidationError  # noqa: E402

SCRIPT = ROOT / "scripts" / "add_member.py"
ARGS = ["--first", "Somchai", "--last", "Sukjai", "--history", "MP since 2019", "--party", "Demo Party"]


@pytest.fixture()
def data_file(tmp_path, monkeypatch):
    path = tmp_path / "data.json"
    monkeypatch.setenv("DATA_FILE", str(path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("REQUIRE_PHOTO_ON_CREATE", raising=False)
    core_config.get_settings.cache_clear()
    yield path
    core_config.get_settings.cache_clear()


def _run(monkeypatch, *extra: str) -> None:
    monkeypatch.setattr(sys, "argv", ["add_member.py", *ARGS, *extra])
    runpy.run_path(str(SCRIPT), run_name="add_member")["main"]()


def _stored(path: Path) -> list[dict]:
    return json.loads(json.loads(path.read_text(encoding="utf-8"))["members"])


def test_photo_is_required_by_default(data_file, monkeypatch):
    with pytest.raises(DraftValidationError) as exc:
        _run(monkeypatch)
    assert exc.value.errors == {"photoFile": "Please upload a photo"}
    assert not data_file.exists()


def test_photo_can_be_skipped_when_setting_is_off(data_file, monkeypatch):
    monkeypatch.setenv("REQUIRE_PHOTO_ON_CREATE", "false")
    core_config.get_settings.cache_clear()
    _run(monkeypatch)
    [member] = _stored(data_file)
    assert member["firstName"] == "Somchai"
    assert "photo" not in member


def test_photo_is_encoded_as_data_url(data_file, tmp_path, monkeypatch):
    photo = tmp_path / "photo.png"
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (0, 90, 200)).save(buf, format="PNG")
    photo.write_bytes(buf.getvalue())
    _run(monkeypatch, "--photo", str(photo))
    [member] = _stored(data_file)
    assert member["photo"].startswith("data:image/png;base64,")
