from __future__ import annotations

from dataclasses import dataclass, field

"""Member record and group models.

A MemberRecord is created transiently while a workbook is parsed, persisted as
one flat table row, and rebuilt from that row when the persisted view is
reloaded for display. Groups are rebuilt on every import and every reload.
"""

__all__ = [
    "DEFAULT_GROUP",
    "ORDER_FLAGS",
    "ORDER_LABELS",
    "MemberRecord",
    "Group",
]

DEFAULT_GROUP = "Ungrouped"
ORDER_FLAGS = frozenset({"P", "S"})
# display labels layered on top of the flag
ORDER_LABELS = {"P": "Parent", "S": "Child"}


@dataclass(frozen=True)
class MemberRecord:
    """One member row after normalisation.

    ``order_flag`` is always one of ``"P"``, ``"S"`` or ``""``. ``dob_iso`` is
    ``None`` when the date of birth could not be parsed; ``dob_display`` then
    carries the original text.
    """
    last_name: str = ""
    title: str = ""
    first_name: str = ""
    middle_name: str = ""
    gender: str = ""
    relationship: str = ""
    dob_display: str = ""
    dob_iso: str | None = None
    education: str = ""
    mobile: str = ""
    email: str = ""
    address: str = ""
    order_flag: str = ""
    group_label: str = DEFAULT_GROUP

    @property
    def member_name(self) -> str:
        parts = (self.last_name, self.title, self.first_name, self.middle_name)
        return " ".join(p.strip() for p in parts if p.strip())

    @property
    def priority(self) -> int:
        # two tiers only: "S" and unflagged rows share a tier
        return 0 if self.order_flag == "P" else 1

    @property
    def order_label(self) -> str:
        return ORDER_LABELS.get(self.order_flag, "")


@dataclass
class Group:
    """Records sharing a group label, in display order."""
    name: str
    address: str = ""
    rows: list[MemberRecord] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def add(self, record: MemberRecord) -> None:
        self.rows.append(record)
        if not self.address and record.address:
            self.address = record.address
