from __future__ import annotations

from collections.abc import Iterable

from ..models.member import Group, MemberRecord

"""Group aggregation and ordering.

Groups keep first-seen order. Within a group rows are ordered by

1. priority (``"P"`` = 0, everything else = 1)
2. last name, case-insensitive
3. first name, case-insensitive

``list.sort`` is stable, so full ties keep their original row order.
"""

__all__ = [
    "member_sort_key",
    "group_records",
    "count_members",
]


def member_sort_key(record: MemberRecord) -> tuple[int, str, str]:
    return (record.priority, record.last_name.lower(), record.first_name.lower())


def group_records(records: Iterable[MemberRecord], presorted: bool = False) -> list[Group]:
    """Bucket records by group label and order each bucket.

    Parameters
    ----------
    records: extracted (or reloaded) member records
    presorted: rows already arrive in display order (persisted reload); skip
        the in-group sort

    Groups without rows are never returned.
    """
    groups: dict[str, Group] = {}
    for record in records:
        group = groups.get(record.group_label)
        if group is None:
            group = groups[record.group_label] = Group(name=record.group_label)
        group.add(record)

    if not presorted:
        for group in groups.values():
            group.rows.sort(key=member_sort_key)
    return [g for g in groups.values() if g.rows]


def count_members(groups: Iterable[Group]) -> int:
    return sum(g.row_count for g in groups)
