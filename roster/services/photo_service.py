"""Photo handling: uploaded file -> data URL, plus the transient preview file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
import base64
import inspect
import io
import os
import tempfile

from PIL import Image

from roster.core.config import get_settings
from roster.core.errors import ImageReadError
from roster.core.logging import get_logger

logger = get_logger("roster.photo")

UPLOAD_FAILED = "Photo upload failed, please try again"

# Pillow format -> MIME type browsers render in a data URL.
# Camera JPEGs with an MPF segment open as MPO but are plain JPEG to a browser.
EMBEDDABLE_FORMATS = {
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


async def read_upload(upload: Any) -> bytes:
    """Read an UploadFile (async read) or a plain binary file object."""
    try:
        data = upload.read()
        if inspect.isawaitable(data):
            data = await data
    except (OSError, ValueError) as exc:
        raise ImageReadError(UPLOAD_FAILED) from exc
    if isinstance(data, str):
        raise ImageReadError(UPLOAD_FAILED)
    return bytes(data or b"")


def identify_image(data: bytes, declared_type: str | None = None) -> str:
    """Return the image MIME type or raise ImageReadError."""
    declared = (declared_type or "").lower().strip()
    if declared and not declared.startswith("image/") and declared != "application/octet-stream":
        raise ImageReadError("Unsupported file type, please choose an image")
    try:
        image = Image.open(io.BytesIO(data))
        fmt = image.format
        image.verify()
    except Exception as exc:
        raise ImageReadError("Invalid image file") from exc
    mime = EMBEDDABLE_FORMATS.get(fmt or "")
    if not mime:
        raise ImageReadError("Unsupported image format (use JPEG, PNG, GIF or WEBP)")
    return mime


class PhotoEncoder:
    """Turns an uploaded image into an embeddable data URL."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes if max_bytes is not None else get_settings().max_upload_bytes

    def check(self, data: bytes, declared_type: str | None = None) -> str:
        if not data:
            raise ImageReadError("Empty image")
        if self.max_bytes and len(data) > self.max_bytes:
            raise ImageReadError(f"Image exceeds {self.max_bytes // 1024} KB")
        return identify_image(data, declared_type)

    async def encode(self, upload: Any) -> str:
        data = await read_upload(upload)
        mime = self.check(data, getattr(upload, "content_type", None))
        return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


class PhotoPreview:
    """
    Temporary file holding the image picked in the form before submit.

    The file is released whenever the selection changes, the draft is reset,
    or the owner shuts down.
    """

    def __init__(self) -> None:
        self.path: Optional[Path] = None
        self.content_type: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.path is not None

    def replace(self, data: bytes, content_type: str) -> None:
        self.release()
        suffix = "." + content_type.split("/", 1)[-1]
        fd, name = tempfile.mkstemp(prefix="roster-preview-", suffix=suffix)
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        self.path = Path(name)
        self.content_type = content_type

    def read(self) -> Optional[tuple[bytes, str]]:
        path, content_type = self.path, self.content_type
        if path is None:
            return None
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        return data, content_type or "application/octet-stream"

    def release(self) -> None:
        if self.path is None:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove preview %s: %s", self.path, exc)
        self.path = None
        self.content_type = None

    def __enter__(self) -> "PhotoPreview":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
