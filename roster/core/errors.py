"""Exceptions shared by the roster services and routers."""

from __future__ import annotations


class RosterError(Exception):
    """Base class for roster-related exceptions."""


class DraftValidationError(RosterError):
    """Raised when a submitted draft does not satisfy the member schema."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = dict(errors)


class ImageReadError(RosterError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MemberNotFoundError(RosterError):
    def __init__(self, member_id: str):
        super().__init__(f"Member {member_id} not found")
        self.member_id = member_id


class PersistenceReadError(RosterError):
    """Raised when the stored collection is missing or cannot be parsed."""


class PersistenceWriteError(RosterError):
    """Raised when the collection cannot be written back to storage."""
