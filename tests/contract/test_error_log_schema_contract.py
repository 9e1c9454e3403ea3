from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from sdsvg_book.errors import DecodeError, NoMemberRowsError, PersistenceError, UploadError, ValidationError
from sdsvg_book.logging.error_log import ErrorLogBuffer
from sdsvg_book.services.importer import reject_import

"""Error log record contract: one JSON object per line with a fixed key set."""

RECORD_KEYS = {"timestamp", "file", "error_type", "message"}
TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


@pytest.mark.parametrize(
    "error, error_type",
    [
        (UploadError("Only .xlsx files are supported."), "UPLOAD_ERROR"),
        (DecodeError("Unable to read the spreadsheet: bad zip"), "DECODE_ERROR"),
        (ValidationError("Missing required column(s): Group", missing_columns=["Group"]), "VALIDATION_ERROR"),
        (NoMemberRowsError("No member rows were found in the uploaded file."), "NO_MEMBER_ROWS"),
        (PersistenceError("save failed: boom", user_message="Unable to save"), "PERSISTENCE_ERROR"),
    ],
)
def test_error_log_record_shape(tmp_path: Path, error, error_type):
    buf = ErrorLogBuffer(tmp_path)
    reject_import("members.xlsx", error, error_log=buf)

    (log,) = tmp_path.glob("errors-*.log")
    (line,) = log.read_text(encoding="utf-8").splitlines()
    record = json.loads(line)
    assert set(record) == RECORD_KEYS
    assert TIMESTAMP_RE.match(record["timestamp"])
    assert record["file"] == "members.xlsx"
    assert record["error_type"] == error_type
    # the log keeps the internal detail, not the user-facing text
    assert record["message"] == str(error)


def test_error_log_file_name(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    reject_import("", UploadError("Please choose an Excel (.xlsx) file to upload."), error_log=buf)
    (log,) = tmp_path.glob("errors-*.log")
    assert re.match(r"^errors-\d{8}-\d{6}\.log$", log.name)
    assert json.loads(log.read_text(encoding="utf-8"))["file"] == ""
