from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..errors import ValidationError
from ..models.cells import NumberCell, RawRow, TextCell, cell_at
from ..models.member import DEFAULT_GROUP, ORDER_FLAGS, MemberRecord
from ..normalize.cell import normalize_cell
from ..normalize.dates import normalize_date
from .headers import ORDER_FLAG_ALIASES, HeaderMap, resolve_headers

"""Record extraction: header row + data rows -> MemberRecord list.

Rows without any content in a mapped column are dropped entirely; every other
row yields exactly one record.
"""

__all__ = [
    "FIELD_COLUMNS",
    "PRIMARY_RELATIONSHIPS",
    "extract_records",
    "extract_record",
    "normalize_address",
    "resolve_order_flag",
    "row_has_content",
]

logger = logging.getLogger(__name__)

# record attribute -> header label
FIELD_COLUMNS: dict[str, str] = {
    "last_name": "last name",
    "title": "title",
    "first_name": "first name",
    "middle_name": "middle name",
    "gender": "gender",
    "relationship": "relationship",
    "education": "education",
    "mobile": "mobile",
    "email": "email",
    "address": "address",
    "group_label": "group",
}
DOB_COLUMN = "dob"

PRIMARY_RELATIONSHIPS = frozenset({"P", "PRIMARY"})

_NEWLINE_RUNS = re.compile(r"\n{2,}")


def normalize_address(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _NEWLINE_RUNS.sub("\n", text).strip()


def row_has_content(row: RawRow, headers: HeaderMap) -> bool:
    for index in headers.mapped_indices():
        match cell_at(row, index):
            case NumberCell():
                return True
            case TextCell(text=text) if text.strip():
                return True
    return False


def resolve_order_flag(row: RawRow, headers: HeaderMap, relationship: str) -> str:
    flag = ""
    for index in headers.columns_for(ORDER_FLAG_ALIASES):
        flag = normalize_cell(cell_at(row, index))
        if flag:
            break
    if not flag and relationship.upper() in PRIMARY_RELATIONSHIPS:
        flag = "P"
    flag = flag.upper()
    return flag if flag in ORDER_FLAGS else ""


def extract_record(row: RawRow, headers: HeaderMap) -> MemberRecord:
    values = {
        attr: normalize_cell(cell_at(row, headers.index_of(label)))
        for attr, label in FIELD_COLUMNS.items()
    }
    dob = normalize_date(cell_at(row, headers.index_of(DOB_COLUMN)))

    values["address"] = normalize_address(values["address"])
    values["group_label"] = values["group_label"] or DEFAULT_GROUP
    order_flag = resolve_order_flag(row, headers, values["relationship"])
    return MemberRecord(
        dob_display=dob.display,
        dob_iso=dob.iso,
        order_flag=order_flag,
        **values,
    )


def extract_records(rows: Sequence[RawRow]) -> list[MemberRecord]:
    """Resolve the header row and extract one record per non-blank data row.

    Raises
    ------
    ValidationError
        The sheet has no header row, or required columns are missing.
    """
    if not rows:
        raise ValidationError("The uploaded spreadsheet is empty.")
    headers = resolve_headers(rows[0])
    headers.require()

    records: list[MemberRecord] = []
    skipped = 0
    for row in rows[1:]:
        if not row_has_content(row, headers):
            skipped += 1
            continue
        records.append(extract_record(row, headers))
    logger.debug(f"extracted records={len(records)} skipped_blank_rows={skipped}")
    return records
