from __future__ import annotations

"""Error kinds raised by the import pipeline.

Every error is recoverable at the request boundary (CLI ``import`` command or
``POST /upload``) where it is converted into a single user-facing banner.
``user_message`` is the only text that may reach a page; ``DecodeError`` is the
one kind whose collaborator message is shown verbatim.
"""

__all__ = [
    "BookError",
    "UploadError",
    "DecodeError",
    "ValidationError",
    "NoMemberRowsError",
    "PersistenceError",
]


class BookError(Exception):
    """Base class for pipeline errors."""

    error_type = "BOOK_ERROR"

    @property
    def user_message(self) -> str:
        return str(self)


class UploadError(BookError):
    """Bad extension, transport failure or empty upload."""

    error_type = "UPLOAD_ERROR"


class DecodeError(BookError):
    """The workbook payload could not be decoded."""

    error_type = "DECODE_ERROR"


class ValidationError(BookError):
    """Required headers missing or no usable data in the sheet."""

    error_type = "VALIDATION_ERROR"

    def __init__(self, message: str, missing_columns: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_columns = missing_columns or []


class NoMemberRowsError(ValidationError):
    """The sheet parsed fine but produced no member rows (informational)."""

    error_type = "NO_MEMBER_ROWS"


class PersistenceError(BookError):
    """Connection or transactional save failure.

    ``str(error)`` keeps the internal detail for the error log; the page only
    ever shows ``user_message``.
    """

    error_type = "PERSISTENCE_ERROR"

    def __init__(self, detail: str, user_message: str | None = None) -> None:
        super().__init__(detail)
        self._user_message = user_message or detail

    @property
    def user_message(self) -> str:
        return self._user_message
