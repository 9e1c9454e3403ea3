from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines import error log.

One record is written per rejected or failed import. ``message`` holds the
internal detail, which for persistence failures is never shown to the user.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded file name ("" when no file was received)
        error_type: UPPER_SNAKE_CASE classification (e.g. VALIDATION_ERROR)
        message: error detail
    """
    timestamp: str
    file: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(timestamp=ts, file=file, error_type=error_type, message=message)

    def to_json_line(self) -> str:
        # fixed key set: dataclass fields only
        return json.dumps(asdict(self), ensure_ascii=False)
