"""Member record model and draft validation rules."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from roster.core.errors import DraftValidationError


class Prefix(str, Enum):
    MR = "Mr"
    MRS = "Mrs"
    MS = "Ms"
    OTHER = "Other"


PREFIXES = tuple(p.value for p in Prefix)

# Form field name -> message shown when the field is left blank.
REQUIRED_MESSAGES = {
    "firstName": "Please enter a first name",
    "lastName": "Please enter a last name",
    "workHistory": "Please describe the work history",
    "party": "Please enter a party",
}
PREFIX_MESSAGE = "Please choose one of: " + ", ".join(PREFIXES)
PHOTO_MESSAGE = "Please upload a photo"

# Values the form is reset to (Creating state, nothing typed yet).
DEFAULT_DRAFT = {
    "prefix": Prefix.MR.value,
    "firstName": "",
    "lastName": "",
    "workHistory": "",
    "ministerPosition": "",
    "ministry": "",
    "party": "",
}


class MemberDraft(BaseModel):
    """Unvalidated form values, keyed by the form's camelCase field names."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    prefix: Prefix
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    photo_file: Optional[Any] = Field(default=None, alias="photoFile")
    work_history: str = Field(alias="workHistory")
    minister_position: str = Field(default="", alias="ministerPosition")
    ministry: str = Field(default="")
    party: str

    @field_validator("first_name", "last_name", "work_history", "party")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("blank")
        return value

    @field_validator("minister_position", "ministry", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str:
        return ("" if value is None else str(value)).strip()

    @field_validator("photo_file")
    @classmethod
    def _file_like(cls, value: Any) -> Any:
        if value is not None and not hasattr(value, "read"):
            raise ValueError("not a file")
        return value


_ALIASES = {
    name: (info.alias or name) for name, info in MemberDraft.model_fields.items()
}


def _field_key(loc: tuple) -> str:
    head = str(loc[0]) if loc else ""
    return _ALIASES.get(head, head)


def validate_draft(values: Mapping[str, Any], photo_file: Any = None, *, photo_required: bool) -> MemberDraft:
    """
    Validate raw form values.

    Returns the MemberDraft or raises DraftValidationError with one message per
    offending field (keyed by form field name).
    """
    payload = {k: v for k, v in dict(values).items() if k not in ("photoFile", "photo_file")}
    payload["photoFile"] = photo_file
    errors: dict[str, str] = {}
    draft: MemberDraft | None = None
    try:
        draft = MemberDraft.model_validate(payload)
    except ValidationError as exc:
        for err in exc.errors():
            key = _field_key(tuple(err.get("loc") or ()))
            if key in errors:
                continue
            if key in REQUIRED_MESSAGES:
                errors[key] = REQUIRED_MESSAGES[key]
            elif key == "prefix":
                errors[key] = PREFIX_MESSAGE
            elif key == "photoFile":
                errors[key] = PHOTO_MESSAGE
            else:
                errors[key] = err.get("msg") or "Invalid value"
    if photo_required and photo_file is None and "photoFile" not in errors:
        errors["photoFile"] = PHOTO_MESSAGE
    if errors:
        raise DraftValidationError(errors)
    return draft


@dataclass
class Member:
    """A persisted member record."""

    id: str
    prefix: str
    first_name: str
    last_name: str
    work_history: str
    party: str
    minister_position: str = ""
    ministry: str = ""
    photo: Optional[str] = field(default=None)

    @property
    def display_name(self) -> str:
        return f"{self.prefix} {self.first_name} {self.last_name}"

    def apply(self, draft: MemberDraft, photo: Optional[str] = None) -> None:
        """Overwrite every field except id; photo only when a new one is given."""
        self.prefix = draft.prefix.value
        self.first_name = draft.first_name
        self.last_name = draft.last_name
        self.work_history = draft.work_history
        self.minister_position = draft.minister_position
        self.ministry = draft.ministry
        self.party = draft.party
        if photo is not None:
            self.photo = photo

    @classmethod
    def from_draft(cls, member_id: str, draft: MemberDraft, photo: Optional[str] = None) -> "Member":
        return cls(
            id=member_id,
            prefix=draft.prefix.value,
            first_name=draft.first_name,
            last_name=draft.last_name,
            work_history=draft.work_history,
            party=draft.party,
            minister_position=draft.minister_position,
            ministry=draft.ministry,
            photo=photo,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "prefix": self.prefix,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "workHistory": self.work_history,
            "ministerPosition": self.minister_position,
            "ministry": self.ministry,
            "party": self.party,
        }
        if self.photo:
            data["photo"] = self.photo
        return data

    def to_form(self) -> dict:
        """Form values for editing; the photo input always starts empty."""
        data = self.to_dict()
        data.pop("id", None)
        data.pop("photo", None)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Member":
        if not isinstance(data, Mapping):
            raise ValueError("member record must be an object")
        member_id = str(data.get("id") or "").strip()
        if not member_id:
            raise ValueError("member record without id")
        prefix = data.get("prefix")
        if prefix not in PREFIXES:
            raise ValueError(f"invalid prefix {prefix!r}")
        required = {}
        for key in REQUIRED_MESSAGES:
            value = str(data.get(key) or "").strip()
            if not value:
                raise ValueError(f"member {member_id} without {key}")
            required[key] = value
        photo = data.get("photo") or None
        return cls(
            id=member_id,
            prefix=prefix,
            first_name=required["firstName"],
            last_name=required["lastName"],
            work_history=required["workHistory"],
            party=required["party"],
            minister_position=str(data.get("ministerPosition") or ""),
            ministry=str(data.get("ministry") or ""),
            photo=str(photo) if photo else None,
        )
