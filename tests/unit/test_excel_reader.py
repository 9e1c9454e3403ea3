from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from sdsvg_book.errors import DecodeError
from sdsvg_book.excel.reader import read_workbook
from sdsvg_book.models.cells import NumberCell, TextCell


def test_read_first_sheet_rows(make_workbook):
    path = make_workbook([
        ["Last Name", "First Name", "Group", "DOB"],
        ["Doe", "Jane", "Smiths", 45000],
    ])
    wb = read_workbook(path)
    rows = wb.rows()
    assert wb.sheet_name == "Sheet1"
    assert len(rows) == 2
    assert rows[0][0] == TextCell("Last Name")
    assert rows[1][3] == NumberCell(45000)


def test_na_like_text_is_preserved(make_workbook):
    path = make_workbook([["Last Name", "First Name", "Group"], ["NA", "null", "N/A"]])
    rows = read_workbook(path).rows()
    assert rows[1] == {0: TextCell("NA"), 1: TextCell("null"), 2: TextCell("N/A")}


def test_date_cells_arrive_as_serials(make_workbook):
    path = make_workbook([["DOB"], [datetime(2023, 3, 15)]])
    rows = read_workbook(path).rows()
    assert rows[1][0] == NumberCell(45000.0)


def test_not_a_workbook_raises_decode_error(tmp_path: Path):
    bogus = tmp_path / "bogus.xlsx"
    bogus.write_bytes(b"this is not a zip archive")
    with pytest.raises(DecodeError) as e:
        read_workbook(bogus)
    assert str(e.value).startswith("Unable to read the spreadsheet:")


def test_missing_file_raises_decode_error(tmp_path: Path):
    with pytest.raises(DecodeError):
        read_workbook(tmp_path / "absent.xlsx")
