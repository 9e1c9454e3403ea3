from __future__ import annotations

import io
from pathlib import Path

import pandas as pd

"""Sample workbook with the expected header row and two example households."""

__all__ = [
    "SAMPLE_HEADERS",
    "SAMPLE_ROWS",
    "sample_frame",
    "write_sample_workbook",
    "sample_workbook_bytes",
]

SAMPLE_HEADERS: list[str] = [
    "Group",
    "Address",
    "Record",
    "Last Name",
    "Title",
    "First Name",
    "Middle Name",
    "Gender",
    "Relationship",
    "DOB",
    "Education",
    "Mobile",
    "Email",
]

SAMPLE_ROWS: list[list[object]] = [
    ["Sharma Family", "12 Lake View Road\nPune 411001", "P", "Sharma", "Mr", "Rakesh", "Kumar",
     "Male", "Primary", "14/03/1972", "B.Com", "9820012345", "rakesh@example.com"],
    ["Sharma Family", "", "S", "Sharma", "Mrs", "Anita", "", "Female", "Spouse", "1975-08-02",
     "M.A.", "9820012346", ""],
    ["Sharma Family", "", "S", "Sharma", "", "Rohan", "", "Male", "Son", "5 Jan 2004",
     "B.Tech", "", ""],
    ["Mehta Family", "", "", "Mehta", "Ms", "Kavya", "", "Female", "Daughter", "21.11.2008",
     "", "", ""],
    ["Mehta Family", "4 Hill Street, Nashik", "", "Mehta", "Mr", "Suresh", "", "Male", "P",
     "02-07-1968", "B.Sc", "9890011122", ""],
]

SHEET_NAME = "Members"


def sample_frame() -> pd.DataFrame:
    return pd.DataFrame(SAMPLE_ROWS, columns=SAMPLE_HEADERS)


def write_sample_workbook(path: Path) -> Path:
    with pd.ExcelWriter(path) as writer:
        sample_frame().to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return path


def sample_workbook_bytes() -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        sample_frame().to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return buf.getvalue()
