from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from ..errors import UploadError

"""Upload contract checks.

A single file field is accepted. Transport failures reported by the HTTP (or
CLI) layer map onto three messages: too large, no file, or a generic message
carrying the failure code. Only ``.xlsx`` names pass, and empty payloads are
refused before the decoder ever sees them.
"""

__all__ = [
    "ALLOWED_EXTENSIONS",
    "UploadFailure",
    "UploadedFile",
    "upload_failure_message",
    "check_upload",
]

ALLOWED_EXTENSIONS = frozenset({".xlsx"})

TOO_LARGE_MESSAGE = "The uploaded file is too large."
NO_FILE_MESSAGE = "Please choose an Excel (.xlsx) file to upload."
BAD_EXTENSION_MESSAGE = "Only .xlsx files are supported."
EMPTY_FILE_MESSAGE = "The uploaded file is empty."


class UploadFailure(IntEnum):
    """Transport status of an upload as seen by the receiving layer."""
    OK = 0
    TOO_LARGE = 1
    NO_FILE = 2
    PARTIAL = 3
    WRITE_FAILED = 4


@dataclass(frozen=True)
class UploadedFile:
    filename: str | None
    path: Path | None
    size: int = 0
    failure: UploadFailure = UploadFailure.OK


def upload_failure_message(failure: UploadFailure) -> str:
    if failure is UploadFailure.TOO_LARGE:
        return TOO_LARGE_MESSAGE
    if failure is UploadFailure.NO_FILE:
        return NO_FILE_MESSAGE
    return f"File upload failed (error code {int(failure)})."


def check_upload(upload: UploadedFile, max_bytes: int | None = None) -> Path:
    """Validate an upload and return the path of the received payload.

    Raises:
        UploadError: any contract violation; the message is user-facing.
    """
    if upload.failure is not UploadFailure.OK:
        raise UploadError(upload_failure_message(upload.failure))
    if not upload.filename or upload.path is None:
        raise UploadError(NO_FILE_MESSAGE)
    if max_bytes is not None and upload.size > max_bytes:
        raise UploadError(TOO_LARGE_MESSAGE)
    if Path(upload.filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise UploadError(BAD_EXTENSION_MESSAGE)
    if upload.size <= 0:
        raise UploadError(EMPTY_FILE_MESSAGE)
    return upload.path
