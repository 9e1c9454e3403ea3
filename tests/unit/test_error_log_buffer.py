from __future__ import annotations

import json
from pathlib import Path

from sdsvg_book.logging.error_log import ErrorLogBuffer, ErrorRecord


def test_error_record_json_line():
    rec = ErrorRecord.create(file="members.xlsx", error_type="VALIDATION_ERROR", message="Missing required column(s): Group")
    data = json.loads(rec.to_json_line())
    assert set(data.keys()) == {"timestamp", "file", "error_type", "message"}
    assert data["file"] == "members.xlsx"
    assert data["error_type"] == "VALIDATION_ERROR"
    assert data["timestamp"].endswith("Z")


def test_error_record_keeps_unicode():
    rec = ErrorRecord.create("सदस्य.xlsx", "DECODE_ERROR", "bad")
    assert "सदस्य.xlsx" in rec.to_json_line()


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.xlsx", "UPLOAD_ERROR", "Only .xlsx files are supported."))
    buf.append(ErrorRecord.create("a.xlsx", "PERSISTENCE_ERROR", "save failed: boom"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["error_type"] for line in lines] == ["UPLOAD_ERROR", "PERSISTENCE_ERROR"]
    assert len(buf) == 0


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_repeated_flushes_append_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("f.xlsx", "DECODE_ERROR", "first"))
    first = buf.flush()
    size1 = first.stat().st_size
    buf.append(ErrorRecord.create("f.xlsx", "DECODE_ERROR", "second"))
    second = buf.flush()
    assert first == second
    assert second.stat().st_size > size1
