from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .member import Group

"""Import outcome and page state models.

ImportResult feeds the SUMMARY log line; PageState is what the request
boundary hands to the renderer: at most one banner of each kind plus the
grouped table.
"""

__all__ = [
    "ImportStatus",
    "ImportResult",
    "PageState",
]


class ImportStatus(Enum):
    """Outcome of one import.

    - OK: groups persisted
    - REJECTED: upload/decode/validation problem, nothing persisted
    - FAILED: the save failed and was rolled back
    """
    OK = "ok"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportResult:
    file_name: str
    status: ImportStatus
    start_time: datetime
    end_time: datetime
    groups: list[Group] = field(default_factory=list)
    member_count: int = 0
    error_type: str | None = None
    message: str | None = None

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


@dataclass(frozen=True)
class PageState:
    """Everything the page needs after a request.

    error: red banner (upload/decode/validation/save failures)
    notice: informational banner (no member rows found)
    warning: database unavailable; the table shows whatever could be loaded
    success: confirmation after a committed import
    """
    groups: list[Group] = field(default_factory=list)
    error: str | None = None
    notice: str | None = None
    warning: str | None = None
    success: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "notice": self.notice,
            "warning": self.warning,
            "success": self.success,
            "groups": [
                {
                    "name": g.name,
                    "address": g.address,
                    "row_count": g.row_count,
                    "rows": [
                        {
                            "member_name": r.member_name,
                            "order_flag": r.order_flag,
                            "order_label": r.order_label,
                            "gender": r.gender,
                            "relationship": r.relationship,
                            "dob": r.dob_iso,
                            "dob_display": r.dob_display,
                            "education": r.education,
                            "mobile": r.mobile,
                            "email": r.email,
                            "address": r.address,
                        }
                        for r in g.rows
                    ],
                }
                for g in self.groups
            ],
        }
