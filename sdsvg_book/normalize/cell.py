from __future__ import annotations

from ..models.cells import Cell, EmptyCell, NumberCell, OtherCell, TextCell

"""Raw cell normaliser.

Turns any Cell variant into a canonical trimmed string. Whole numbers render as
plain integers (no separators, no decimal point); other numbers keep at most 8
fractional digits with trailing zeros removed. Never raises.
"""

__all__ = [
    "normalize_cell",
    "format_number",
]

MAX_FRACTION_DIGITS = 8


def format_number(value: float | int) -> str:
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    text = f"{value:.{MAX_FRACTION_DIGITS}f}".rstrip("0").rstrip(".")
    # values below the precision floor round to zero
    return "0" if text in ("", "-0") else text


def normalize_cell(cell: Cell) -> str:
    match cell:
        case TextCell(text=text):
            return text.strip()
        case NumberCell(value=value):
            return format_number(value)
        case EmptyCell():
            return ""
        case OtherCell():
            return ""
    return ""
