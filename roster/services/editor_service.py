"""
Form/editing controller.

The editor is either Creating (no member selected) or Editing(member_id)
(form pre-filled from that member). Submitting validates the draft, encodes
the photo when one is supplied and only then mutates the store, so a record
and its photo are applied together or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from roster.core.errors import DraftValidationError, ImageReadError, MemberNotFoundError
from roster.core.logging import get_logger
from roster.domain.members import DEFAULT_DRAFT, Member, validate_draft
from roster.services.member_service import MemberStore
from roster.services.photo_service import UPLOAD_FAILED, PhotoEncoder, PhotoPreview, read_upload

logger = get_logger("roster.editor")

FORM_FIELDS = tuple(DEFAULT_DRAFT)


@dataclass(frozen=True)
class Creating:
    pass


@dataclass(frozen=True)
class Editing:
    member_id: str


EditorState = Union[Creating, Editing]


@dataclass
class SubmitResult:
    ok: bool
    member: Optional[Member] = None
    errors: dict[str, str] = field(default_factory=dict)
    alert: Optional[str] = None


def _form_values(values: Mapping[str, Any]) -> dict:
    draft = dict(DEFAULT_DRAFT)
    for key in FORM_FIELDS:
        if key in values and values[key] is not None:
            draft[key] = str(values[key])
    return draft


class MemberEditor:
    """Holds the form draft and which member (if any) is being edited."""

    def __init__(self, store: MemberStore, encoder: PhotoEncoder | None = None, *, require_photo: bool = True) -> None:
        self.store = store
        self.encoder = encoder or PhotoEncoder()
        self.require_photo = require_photo
        self.preview = PhotoPreview()
        self.state: EditorState = Creating()
        self.draft: dict = dict(DEFAULT_DRAFT)
        self.errors: dict[str, str] = {}
        self.alert: Optional[str] = None

    # -------------------------------------- helpers --------------------------------------
    @property
    def editing_id(self) -> Optional[str]:
        return self.state.member_id if isinstance(self.state, Editing) else None

    @property
    def submit_label(self) -> str:
        return "Save changes" if isinstance(self.state, Editing) else "Add member"

    def editing_member(self) -> Optional[Member]:
        member_id = self.editing_id
        return self.store.get(member_id) if member_id else None

    def _reset(self) -> None:
        self.state = Creating()
        self.draft = dict(DEFAULT_DRAFT)
        self.errors = {}
        self.preview.release()

    # -------------------------------------- transitions --------------------------------------
    def begin_edit(self, member_id: str) -> Member:
        member = self.store.get(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        self.preview.release()
        self.state = Editing(member.id)
        self.draft = member.to_form()
        self.errors = {}
        self.alert = None
        return member

    def cancel(self) -> None:
        self._reset()
        self.alert = None

    async def select_photo(self, upload: Any) -> None:
        """Replace the preview with a newly picked image."""
        data = await read_upload(upload)
        mime = self.encoder.check(data, getattr(upload, "content_type", None))
        self.preview.replace(data, mime)

    async def submit(self, values: Mapping[str, Any], photo_upload: Any = None) -> SubmitResult:
        state = self.state
        photo_required = self.require_photo and isinstance(state, Creating)
        self.alert = None
        self.draft = _form_values(values)
        try:
            draft = validate_draft(values, photo_upload, photo_required=photo_required)
        except DraftValidationError as exc:
            self.errors = exc.errors
            return SubmitResult(ok=False, errors=exc.errors)
        self.errors = {}

        photo = None
        if photo_upload is not None:
            try:
                photo = await self.encoder.encode(photo_upload)
            except ImageReadError as exc:
                logger.warning("Photo upload rejected: %s", exc.message)
                self.alert = UPLOAD_FAILED
                self.errors = {"photoFile": exc.message}
                return SubmitResult(ok=False, errors=dict(self.errors), alert=UPLOAD_FAILED)

        if isinstance(state, Editing):
            try:
                member = self.store.update(state.member_id, draft, photo)
            except MemberNotFoundError:
                self._reset()
                self.alert = "This member no longer exists"
                return SubmitResult(ok=False, alert=self.alert)
        else:
            member = self.store.create(draft, photo)
        self._reset()
        return SubmitResult(ok=True, member=member)

    def delete(self, member_id: str) -> bool:
        removed = self.store.delete(member_id)
        if self.editing_id == member_id:
            self._reset()
        return removed

    def close(self) -> None:
        self.preview.release()
