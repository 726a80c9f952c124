from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path

import pytest
from PIL import Image
from starlette.datastructures import Headers, UploadFile

# Make the roster package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core.errors import MemberNotFoundError  # noqa: E402
from roster.domain.members import DEFAULT_DRAFT, PHOTO_MESSAGE  # noqa: E402
from roster.repositories.json_storage import MemoryStorage  # noqa: E402
from roster.services.editor_service import Creating, Editing, MemberEditor  # noqa: E402
from roster.services.member_service import MemberStore  # noqa: E402
from roster.services.photo_service import UPLOAD_FAILED, PhotoEncoder  # noqa: E402

SOMCHAI = {
    "prefix": "Mr",
    "firstName": "Somchai",
    "lastName": "Sukjai",
    "workHistory": "MP since 2019",
    "party": "Demo Party",
}


def _png_bytes(color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return buf.getvalue()


def _upload(data: bytes, content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename="photo.png",
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture()
def editor():
    store = MemberStore.open(MemoryStorage())
    ed = MemberEditor(store, PhotoEncoder(max_bytes=1024 * 1024))
    yield ed
    ed.close()


def test_fresh_create_without_photo_fails_validation(editor):
    result = asyncio.run(editor.submit(SOMCHAI))
    assert not result.ok
    assert result.errors == {"photoFile": PHOTO_MESSAGE}
    assert editor.state == Creating()
    assert editor.draft["firstName"] == "Somchai"
    assert editor.store.list() == []


def test_create_with_photo_resets_to_creating(editor):
    result = asyncio.run(editor.submit(SOMCHAI, _upload(_png_bytes())))
    assert result.ok
    member = result.member
    assert member.photo.startswith("data:image/png;base64,")
    assert editor.store.list() == [member]
    assert editor.state == Creating()
    assert editor.draft == DEFAULT_DRAFT
    assert editor.errors == {}


def test_edit_without_new_photo_keeps_existing_one(editor):
    created = asyncio.run(editor.submit(SOMCHAI, io.BytesIO(_png_bytes()))).member
    original_photo = created.photo

    member = editor.begin_edit(created.id)
    assert editor.state == Editing(created.id)
    assert editor.submit_label == "Save changes"
    assert editor.draft["firstName"] == "Somchai"
    assert "photo" not in editor.draft

    result = asyncio.run(editor.submit(dict(SOMCHAI, party="New Party", ministry="Interior")))
    assert result.ok
    assert result.member.id == member.id
    assert result.member.party == "New Party"
    assert result.member.ministry == "Interior"
    assert result.member.photo == original_photo
    assert editor.state == Creating()
    assert editor.submit_label == "Add member"
    assert len(editor.store) == 1


def test_validation_failure_while_editing_keeps_state(editor):
    created = asyncio.run(editor.submit(SOMCHAI, io.BytesIO(_png_bytes()))).member
    editor.begin_edit(created.id)
    result = asyncio.run(editor.submit(dict(SOMCHAI, lastName="")))
    assert not result.ok
    assert set(result.errors) == {"lastName"}
    assert editor.state == Editing(created.id)
    assert editor.store.get(created.id).last_name == "Sukjai"


def test_unreadable_image_is_reported_without_mutation(editor):
    result = asyncio.run(editor.submit(SOMCHAI, _upload(b"definitely not an image")))
    assert not result.ok
    assert result.alert == UPLOAD_FAILED
    assert "photoFile" in result.errors
    assert editor.store.list() == []
    assert editor.state == Creating()


def test_oversized_and_non_image_uploads_are_rejected(editor):
    editor.encoder.max_bytes = 10
    result = asyncio.run(editor.submit(SOMCHAI, _upload(_png_bytes())))
    assert not result.ok and result.alert == UPLOAD_FAILED

    editor.encoder.max_bytes = 0
    result = asyncio.run(editor.submit(SOMCHAI, _upload(_png_bytes(), "text/plain")))
    assert not result.ok
    assert editor.store.list() == []


def test_begin_edit_unknown_member(editor):
    with pytest.raises(MemberNotFoundError):
        editor.begin_edit("ghost")
    assert editor.state == Creating()


def test_cancel_resets_draft(editor):
    created = asyncio.run(editor.submit(SOMCHAI, io.BytesIO(_png_bytes()))).member
    editor.begin_edit(created.id)
    editor.cancel()
    assert editor.state == Creating()
    assert editor.draft == DEFAULT_DRAFT


def test_deleting_edited_member_returns_to_creating(editor):
    a = asyncio.run(editor.submit(SOMCHAI, io.BytesIO(_png_bytes()))).member
    b = asyncio.run(editor.submit(dict(SOMCHAI, firstName="Malee"), io.BytesIO(_png_bytes()))).member

    editor.begin_edit(a.id)
    assert editor.delete(b.id) is True
    assert editor.state == Editing(a.id)

    assert editor.delete(a.id) is True
    assert editor.state == Creating()
    assert editor.draft == DEFAULT_DRAFT
    assert editor.delete(a.id) is False
    assert editor.store.list() == []


def test_submit_after_member_vanished_falls_back_to_creating(editor):
    created = asyncio.run(editor.submit(SOMCHAI, io.BytesIO(_png_bytes()))).member
    editor.begin_edit(created.id)
    editor.store.delete(created.id)
    result = asyncio.run(editor.submit(SOMCHAI))
    assert not result.ok
    assert result.alert
    assert editor.state == Creating()
    assert editor.store.list() == []


def test_preview_is_released_when_selection_changes_and_on_reset(editor):
    asyncio.run(editor.select_photo(_upload(_png_bytes())))
    first = editor.preview.path
    assert first.exists()

    asyncio.run(editor.select_photo(_upload(_png_bytes((0, 0, 255)))))
    second = editor.preview.path
    assert not first.exists()
    assert second.exists()

    editor.cancel()
    assert not second.exists()
    assert not editor.preview.active


def test_photo_optional_mode_creates_member_without_photo():
    store = MemberStore.open(MemoryStorage())
    editor = MemberEditor(store, PhotoEncoder(), require_photo=False)
    result = asyncio.run(editor.submit(SOMCHAI))
    assert result.ok
    assert len(store) == 1
    member = store.list()[0]
    assert member.id
    assert member.first_name == "Somchai"
    assert member.photo is None
    assert "photo" not in member.to_dict()
