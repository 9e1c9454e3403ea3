"""SDSVG Book: member spreadsheet import, grouping and persistence."""

__version__ = "0.1.0"
