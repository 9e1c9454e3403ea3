from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pandas as pd

from ..models.cells import Cell, NumberCell, TextCell
from .cell import normalize_cell

"""Date-of-birth normaliser.

A cell may carry a spreadsheet serial date (days since 1899-12-30) or free
text. Resolution order:

1. positive serial -> unix timestamp ``floor((serial - 25569) * 86400 + 0.5)``; a
   negative timestamp falls through to the text branch
2. strict formats, first match wins (``DATE_FORMATS``)
3. lenient free-form parse via ``pandas.to_datetime``; a year before
   ``MIN_LENIENT_YEAR`` means the text had no year and is discarded
4. give up: display keeps the trimmed original text, ISO is ``None``

The format order decides ambiguous strings such as ``01-02-2024``
(day-first wins); no locale inference happens.
"""

__all__ = [
    "NormalizedDate",
    "DATE_FORMATS",
    "normalize_date",
    "format_display_date",
    "format_iso_date",
    "serial_to_date",
]

# days between 1899-12-30 and 1970-01-01
UNIX_EPOCH_SERIAL = 25569
SECONDS_PER_DAY = 86400
UNIX_EPOCH = datetime(1970, 1, 1)
MIN_LENIENT_YEAR = 1900
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# %d also accepts an unpadded day, which covers the "D Mon YYYY" variant
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%d %b %Y",
)


@dataclass(frozen=True)
class NormalizedDate:
    display: str
    iso: str | None = None

    @classmethod
    def from_date(cls, value: date) -> NormalizedDate:
        return cls(display=_display(value), iso=value.isoformat())


def _display(value: date) -> str:
    # D-Mon-YYYY: no leading zero on the day
    return f"{value.day}-{MONTH_ABBR[value.month - 1]}-{value.year:04d}"


def serial_to_date(serial: float) -> date | None:
    """Convert a positive spreadsheet serial to a UTC calendar day.

    Returns None when the serial maps before 1970-01-01 or past the calendar.
    """
    if serial <= 0:
        return None
    # half-up rounding on the seconds value
    timestamp = math.floor((serial - UNIX_EPOCH_SERIAL) * SECONDS_PER_DAY + 0.5)
    if timestamp < 0:
        return None
    try:
        return (UNIX_EPOCH + timedelta(seconds=timestamp)).date()
    except OverflowError:
        return None


def _parse_strict(text: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_lenient(text: str) -> date | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    # text without a year comes back in year 1
    if parsed.year < MIN_LENIENT_YEAR:
        return None
    return parsed.date()


def _normalize_text(text: str) -> NormalizedDate:
    text = text.strip()
    if not text:
        return NormalizedDate(display="")
    parsed = _parse_strict(text) or _parse_lenient(text)
    if parsed is None:
        return NormalizedDate(display=text)
    return NormalizedDate.from_date(parsed)


def normalize_date(value: Cell | str) -> NormalizedDate:
    """Normalise a raw cell (or already-normalised text) into display + ISO forms."""
    if isinstance(value, str):
        return _normalize_text(value)
    match value:
        case NumberCell(value=serial) if serial > 0:
            parsed = serial_to_date(serial)
            if parsed is not None:
                return NormalizedDate.from_date(parsed)
            return _normalize_text(normalize_cell(value))
        case TextCell(text=text):
            return _normalize_text(text)
        case _:
            return _normalize_text(normalize_cell(value))


def format_display_date(value: Cell | str) -> str:
    return normalize_date(value).display


def format_iso_date(value: Cell | str) -> str | None:
    return normalize_date(value).iso
