"""Cell and date normalisers used by the record extractor."""

from .cell import normalize_cell
from .dates import NormalizedDate, format_display_date, format_iso_date, normalize_date

__all__ = [
    "normalize_cell",
    "NormalizedDate",
    "normalize_date",
    "format_display_date",
    "format_iso_date",
]
