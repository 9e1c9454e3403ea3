from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.member_store import DEFAULT_TABLE, SAVE_FAILED_MESSAGE, load_all, replace_all
from ..errors import BookError, NoMemberRowsError, PersistenceError
from ..excel.extractor import extract_records
from ..excel.reader import read_workbook
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..logging.init import log_summary
from ..models.import_result import ImportResult, ImportStatus, PageState
from ..models.member import Group
from .grouping import count_members, group_records
from .summary import render_summary_line
from .upload import UploadedFile, check_upload

"""Import orchestration and the request boundary.

``run_import`` is the pipeline proper: decode -> extract -> group -> replace.
It raises BookError subclasses. ``handle_upload`` and ``load_page`` sit at the
request boundary: they never raise BookError, they turn it into a PageState
banner, write the error log, and emit the SUMMARY line.
"""

__all__ = [
    "NO_MEMBER_ROWS_MESSAGE",
    "parse_groups",
    "run_import",
    "import_file",
    "reject_import",
    "handle_upload",
    "load_page",
]

logger = logging.getLogger(__name__)

NO_MEMBER_ROWS_MESSAGE = "No member rows were found in the uploaded file."


def parse_groups(path: Path) -> list[Group]:
    """Decode, extract and group a workbook without touching the database.

    Raises:
        DecodeError: unreadable workbook
        ValidationError: missing headers or empty sheet
        NoMemberRowsError: no usable member rows
    """
    workbook = read_workbook(path)
    records = extract_records(workbook.rows())
    groups = group_records(records)
    if not groups:
        raise NoMemberRowsError(NO_MEMBER_ROWS_MESSAGE)
    return groups


def run_import(path: Path, cursor: Any, table: str = DEFAULT_TABLE) -> list[Group]:
    """Parse ``path`` and replace the persisted members with its groups."""
    groups = parse_groups(path)
    if cursor is None:
        raise PersistenceError("no database connection", user_message=SAVE_FAILED_MESSAGE)
    replace_all(cursor, groups, table=table)
    return groups


def import_file(
    path: Path,
    cursor: Any,
    *,
    file_name: str | None = None,
    table: str = DEFAULT_TABLE,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Run one import and account for it (error log + SUMMARY line).

    Never raises BookError; the outcome is described by the returned result.
    """
    file_name = file_name or path.name
    start_time = datetime.now(UTC)
    try:
        groups = run_import(path, cursor, table=table)
    except BookError as e:
        return reject_import(file_name, e, start_time=start_time, error_log=error_log)
    result = ImportResult(
        file_name=file_name,
        status=ImportStatus.OK,
        start_time=start_time,
        end_time=datetime.now(UTC),
        groups=groups,
        member_count=count_members(groups),
    )
    log_summary(render_summary_line(result))
    return result


def reject_import(
    file_name: str,
    error: BookError,
    *,
    start_time: datetime | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Account for a rejected or failed import: one error log entry and the SUMMARY line.

    Also used when the import stops before the pipeline runs (upload contract
    failure, unreachable database).
    """
    status = ImportStatus.FAILED if isinstance(error, PersistenceError) else ImportStatus.REJECTED
    result = _failed_result(file_name, start_time or datetime.now(UTC), status, error)
    _record_error(error_log, file_name, error)
    log_summary(render_summary_line(result))
    return result


def _failed_result(
    file_name: str, start_time: datetime, status: ImportStatus, error: BookError
) -> ImportResult:
    if isinstance(error, NoMemberRowsError):
        logger.warning(f"{file_name}: {error}")
    elif isinstance(error, PersistenceError):
        logger.error(f"{file_name}: {error}")
    else:
        logger.warning(f"{file_name}: rejected: {error}")
    return ImportResult(
        file_name=file_name,
        status=status,
        start_time=start_time,
        end_time=datetime.now(UTC),
        error_type=error.error_type,
        message=error.user_message,
    )


def _record_error(error_log: ErrorLogBuffer | None, file_name: str, error: BookError) -> None:
    if error_log is None:
        return
    error_log.append(ErrorRecord.create(file=file_name, error_type=error.error_type, message=str(error)))
    try:
        error_log.flush()
    except OSError as e:
        logger.error(f"failed to write error log: {e}")


def load_page(cursor: Any, table: str = DEFAULT_TABLE, warning: str | None = None, **banners: str | None) -> PageState:
    """Build the page from the persisted members.

    A missing cursor or a failed load downgrades the page to a warning banner
    with an empty table.
    """
    if cursor is None:
        return PageState(groups=[], warning=warning, **banners)
    try:
        groups = load_all(cursor, table=table)
    except PersistenceError as e:
        logger.error(str(e))
        return PageState(groups=[], warning=e.user_message, **banners)
    return PageState(groups=groups, warning=warning, **banners)


def handle_upload(
    upload: UploadedFile,
    cursor: Any,
    *,
    table: str = DEFAULT_TABLE,
    max_bytes: int | None = None,
    error_log: ErrorLogBuffer | None = None,
    warning: str | None = None,
) -> PageState:
    """Request boundary for an upload: contract checks, import, page state."""
    file_name = upload.filename or ""
    try:
        path = check_upload(upload, max_bytes=max_bytes)
    except BookError as e:
        reject_import(file_name, e, error_log=error_log)
        return load_page(cursor, table=table, warning=warning, error=e.user_message)

    result = import_file(path, cursor, file_name=file_name, table=table, error_log=error_log)
    if result.status is ImportStatus.OK:
        # render from storage so the page shows exactly what was committed
        return load_page(
            cursor,
            table=table,
            warning=warning,
            success=(
                f"Imported {result.member_count} member(s) in {len(result.groups)} group(s) "
                f"from {file_name}."
            ),
        )
    if result.error_type == NoMemberRowsError.error_type:
        return load_page(cursor, table=table, warning=warning, notice=result.message)
    return load_page(cursor, table=table, warning=warning, error=result.message)
