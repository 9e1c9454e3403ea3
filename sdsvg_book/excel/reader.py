from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from ..errors import DecodeError
from ..models.cells import RawRow, to_cell

"""Workbook decoding.

Only the first sheet is read. The sheet is read without a header and with
pandas NA-string conversion disabled, so literal cell text such as ``NA`` or
``null`` survives as text; the first decoded row is the header row.
"""

__all__ = [
    "Workbook",
    "read_workbook",
    "rows_from_frame",
]


@dataclass(frozen=True)
class Workbook:
    """Decoded first sheet of a workbook."""
    sheet_name: str
    raw_rows: list[RawRow] = field(default_factory=list)

    def rows(self) -> list[RawRow]:
        return self.raw_rows


def rows_from_frame(df: pd.DataFrame) -> list[RawRow]:
    rows: list[RawRow] = []
    for raw in df.itertuples(index=False, name=None):
        rows.append({index: to_cell(value) for index, value in enumerate(raw)})
    return rows


def read_workbook(path: Path) -> Workbook:
    """Decode the first sheet of ``path`` into raw rows.

    Raises
    ------
    DecodeError
        The payload is not a readable workbook. The message comes from the
        decoder and is meant to be shown as-is.
    """
    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise DecodeError(f"workbook '{path.name}' has no sheets")
            sheet_name = str(xls.sheet_names[0])
            df = xls.parse(
                xls.sheet_names[0],
                header=None,
                dtype=object,
                keep_default_na=False,
                na_values=[],
            )
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Unable to read the spreadsheet: {e}") from e
    return Workbook(sheet_name=sheet_name, raw_rows=rows_from_frame(df))
