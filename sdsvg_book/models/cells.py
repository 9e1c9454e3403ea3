from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, TypeAlias

"""Raw cell model: the tagged union produced at the workbook decoder boundary.

Every scalar coming out of the decoder becomes exactly one variant, so the
normalisers can ``match`` on the variant instead of probing Python types.

Workbook date/datetime cells are converted here into spreadsheet serial
numbers (days since 1899-12-30, fraction = time of day). Downstream code only
has to deal with text, numbers and absent values.
"""

__all__ = [
    "TextCell",
    "NumberCell",
    "EmptyCell",
    "OtherCell",
    "Cell",
    "RawRow",
    "EMPTY",
    "to_cell",
    "cell_at",
    "SERIAL_EPOCH",
]

SERIAL_EPOCH = datetime(1899, 12, 30)


@dataclass(frozen=True)
class TextCell:
    text: str


@dataclass(frozen=True)
class NumberCell:
    value: float | int


@dataclass(frozen=True)
class EmptyCell:
    pass


@dataclass(frozen=True)
class OtherCell:
    """Any decoder value outside text/number/absent (booleans, times, ...)."""
    value: Any


Cell: TypeAlias = TextCell | NumberCell | EmptyCell | OtherCell
RawRow: TypeAlias = dict[int, Cell]

EMPTY = EmptyCell()


def _datetime_to_serial(value: datetime) -> float:
    delta = value.replace(tzinfo=None) - SERIAL_EPOCH
    return delta.total_seconds() / 86400


def to_cell(value: Any) -> Cell:
    """Wrap a raw decoder scalar into its Cell variant."""
    if value is None:
        return EMPTY
    if isinstance(value, str):
        return TextCell(value)
    # NaN and NaT are unequal to themselves; pandas.NA refuses bool()
    try:
        if bool(value != value):
            return EMPTY
    except (TypeError, ValueError):
        return EMPTY
    # bool is an int subclass; it is not a numeric cell
    if isinstance(value, bool):
        return OtherCell(value)
    if isinstance(value, datetime):
        return NumberCell(_datetime_to_serial(value))
    if isinstance(value, date):
        return NumberCell(_datetime_to_serial(datetime.combine(value, time())))
    if isinstance(value, int):
        return NumberCell(value)
    if isinstance(value, float):
        if math.isinf(value):
            return OtherCell(value)
        return NumberCell(value)
    # numpy scalars expose .item() returning the matching Python scalar
    item = getattr(value, "item", None)
    if callable(item):
        try:
            return to_cell(item())
        except (TypeError, ValueError):
            return OtherCell(value)
    return OtherCell(value)


def cell_at(row: RawRow, index: int | None) -> Cell:
    """Return the cell at ``index`` or EMPTY when the column is absent."""
    if index is None:
        return EMPTY
    return row.get(index, EMPTY)
