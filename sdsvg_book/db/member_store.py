from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..errors import PersistenceError
from ..models.member import DEFAULT_GROUP, Group, MemberRecord
from ..services.grouping import group_records
from .batch_insert import BatchMetrics, batch_insert

"""Persistence gateway for the members table.

The table is a flat, denormalised copy of the grouped view: one row per member
carrying its own group name and group address. Every successful import
replaces the whole table inside one transaction (DELETE + INSERT, then
COMMIT). Under PostgreSQL MVCC readers keep seeing the previous rows until the
commit, and a failed import rolls back leaving them untouched.

The cursor must belong to a connection in autocommit mode so that the
explicit BEGIN/COMMIT/ROLLBACK statements below own the transaction.
"""

__all__ = [
    "DEFAULT_TABLE",
    "MEMBER_COLUMNS",
    "SAVE_FAILED_MESSAGE",
    "LOAD_FAILED_MESSAGE",
    "validate_table_name",
    "ensure_schema",
    "member_to_row",
    "replace_all",
    "load_all",
]

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "members"
SAVE_FAILED_MESSAGE = "Unable to save the imported members. Previously saved data was kept."
LOAD_FAILED_MESSAGE = "Unable to load the saved members."

MEMBER_COLUMNS: tuple[str, ...] = (
    "group_name",
    "group_address",
    "last_name",
    "title",
    "first_name",
    "middle_name",
    "member_name",
    "gender",
    "relationship",
    "dob",
    "dob_display",
    "education",
    "mobile",
    "email",
    "address",
    "order_flag",
)
LOAD_COLUMNS: tuple[str, ...] = ("id", *MEMBER_COLUMNS)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id SERIAL PRIMARY KEY,
    group_name TEXT NOT NULL,
    group_address TEXT NOT NULL DEFAULT '',
    last_name TEXT NOT NULL DEFAULT '',
    title TEXT NOT NULL DEFAULT '',
    first_name TEXT NOT NULL DEFAULT '',
    middle_name TEXT NOT NULL DEFAULT '',
    member_name TEXT NOT NULL DEFAULT '',
    gender TEXT NOT NULL DEFAULT '',
    relationship TEXT NOT NULL DEFAULT '',
    dob DATE NULL,
    dob_display TEXT NOT NULL DEFAULT '',
    education TEXT NOT NULL DEFAULT '',
    mobile TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL DEFAULT '',
    address TEXT NOT NULL DEFAULT '',
    order_flag CHAR(1) NULL CHECK (order_flag IN ('P', 'S'))
)
"""

# same keys as services.grouping.member_sort_key; "C" collation compares code
# points like Python str ordering, id is the final tie-break
_SELECT_SQL = (
    "SELECT {columns} FROM {table} "
    "ORDER BY group_name COLLATE \"C\", "
    "CASE WHEN order_flag = 'P' THEN 0 ELSE 1 END, "
    "LOWER(last_name) COLLATE \"C\", LOWER(first_name) COLLATE \"C\", id"
)


def validate_table_name(table: str) -> str:
    if not _IDENTIFIER.match(table):
        raise PersistenceError(f"invalid table name: {table!r}")
    return table


def ensure_schema(cursor: Any, table: str = DEFAULT_TABLE) -> None:
    """Create the members table when it does not exist yet."""
    validate_table_name(table)
    try:
        cursor.execute(_CREATE_TABLE_SQL.format(table=table))
    except Exception as e:
        raise PersistenceError(
            f"failed to create table {table}: {e}",
            user_message="Unable to prepare the members table.",
        ) from e


def member_to_row(group: Group, record: MemberRecord) -> tuple[Any, ...]:
    return (
        group.name,
        group.address,
        record.last_name,
        record.title,
        record.first_name,
        record.middle_name,
        record.member_name,
        record.gender,
        record.relationship,
        record.dob_iso,
        record.dob_display,
        record.education,
        record.mobile,
        record.email,
        record.address,
        record.order_flag or None,
    )


def _log_batch(metrics: BatchMetrics) -> None:
    logger.debug(f"insert batch rows={metrics.batch_size} elapsed_sec={metrics.elapsed_seconds:.4f}")


def replace_all(cursor: Any, groups: Sequence[Group], table: str = DEFAULT_TABLE) -> int:
    """Replace every persisted member with ``groups`` in one transaction.

    Returns the number of inserted rows.

    Raises
    ------
    PersistenceError
        Any failure; the transaction is rolled back first.
    """
    validate_table_name(table)
    rows = [member_to_row(group, record) for group in groups for record in group.rows]

    in_transaction = False
    try:
        cursor.execute("BEGIN")
        in_transaction = True
        cursor.execute(f"DELETE FROM {table}")
        result = batch_insert(cursor, table, MEMBER_COLUMNS, rows, metrics_callback=_log_batch)
        cursor.execute("COMMIT")
        in_transaction = False
    except Exception as e:
        if in_transaction:
            try:
                cursor.execute("ROLLBACK")
            except Exception as rollback_error:
                logger.error(f"rollback failed: {rollback_error}")
        raise PersistenceError(f"save failed: {e}", user_message=SAVE_FAILED_MESSAGE) from e

    logger.info(f"replaced table={table} rows={result.inserted_rows} groups={len(groups)}")
    return result.inserted_rows


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _row_to_record(row: dict[str, Any]) -> MemberRecord:
    dob = row.get("dob")
    if dob is not None and hasattr(dob, "isoformat"):
        dob = dob.isoformat()
    return MemberRecord(
        last_name=_as_text(row.get("last_name")),
        title=_as_text(row.get("title")),
        first_name=_as_text(row.get("first_name")),
        middle_name=_as_text(row.get("middle_name")),
        gender=_as_text(row.get("gender")),
        relationship=_as_text(row.get("relationship")),
        dob_display=_as_text(row.get("dob_display")),
        dob_iso=dob or None,
        education=_as_text(row.get("education")),
        mobile=_as_text(row.get("mobile")),
        email=_as_text(row.get("email")),
        address=_as_text(row.get("address")),
        order_flag=_as_text(row.get("order_flag")).strip(),
        group_label=_as_text(row.get("group_name")) or DEFAULT_GROUP,
    )


def load_all(cursor: Any, table: str = DEFAULT_TABLE) -> list[Group]:
    """Reload the persisted members as display groups.

    Ordering comes from the query; groups are re-bucketed without re-sorting.
    A group's address is the stored group address, else the first member
    address, exactly as on import.
    """
    validate_table_name(table)
    try:
        cursor.execute(_SELECT_SQL.format(columns=", ".join(LOAD_COLUMNS), table=table))
        fetched = cursor.fetchall()
    except Exception as e:
        raise PersistenceError(f"load failed: {e}", user_message=LOAD_FAILED_MESSAGE) from e

    rows = [dict(zip(LOAD_COLUMNS, raw, strict=False)) for raw in fetched]
    stored_addresses: dict[str, str] = {}
    records = []
    for row in rows:
        record = _row_to_record(row)
        group_address = _as_text(row.get("group_address"))
        if group_address and not stored_addresses.get(record.group_label):
            stored_addresses[record.group_label] = group_address
        records.append(record)

    groups = group_records(records, presorted=True)
    for group in groups:
        group.address = stored_addresses.get(group.name) or group.address
    return groups
