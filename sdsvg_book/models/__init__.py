"""Domain models for the member book importer.

Cells (the decoder boundary union), member records and groups, import results
and page state, and the error log record.
"""

from .cells import Cell, EmptyCell, NumberCell, OtherCell, RawRow, TextCell, to_cell
from .error_record import ErrorRecord
from .import_result import ImportResult, ImportStatus, PageState
from .member import DEFAULT_GROUP, Group, MemberRecord

__all__ = [
    # Decoder boundary
    "Cell",
    "EmptyCell",
    "NumberCell",
    "OtherCell",
    "RawRow",
    "TextCell",
    "to_cell",
    # Members
    "DEFAULT_GROUP",
    "Group",
    "MemberRecord",
    # Outcomes
    "ErrorRecord",
    "ImportResult",
    "ImportStatus",
    "PageState",
]
