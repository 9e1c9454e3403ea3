from __future__ import annotations

from collections.abc import Iterable

from ..models.import_result import ImportResult
from ..models.member import Group

"""SUMMARY line and plain-text table rendering."""

__all__ = [
    "format_seconds",
    "render_summary_line",
    "render_groups_text",
]

TEXT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("order_label", "Record"),
    ("member_name", "Member Name"),
    ("gender", "Gender"),
    ("relationship", "Relationship"),
    ("dob_display", "DOB"),
    ("education", "Education"),
    ("mobile", "Mobile"),
    ("email", "Email"),
)


def format_seconds(value: float) -> str:
    # avoid scientific notation for tiny durations
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY content (the SUMMARY label is added by the logger).

    Format:
    file={name} status={ok|rejected|failed} groups={n} members={n} elapsed_sec={s}
    """
    return (
        f"file={result.file_name or '-'} "
        f"status={result.status.value} "
        f"groups={len(result.groups)} "
        f"members={result.member_count} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )


def render_groups_text(groups: Iterable[Group]) -> str:
    """Plain-text grouped table: one block per group, one line per member."""
    blocks: list[str] = []
    for group in groups:
        lines = [f"== {group.name} ({group.row_count} member{'s' if group.row_count != 1 else ''})"]
        if group.address:
            lines.extend(f"   {line}" for line in group.address.split("\n"))
        rows = [[getattr(r, attr) for attr, _ in TEXT_COLUMNS] for r in group.rows]
        header = [label for _, label in TEXT_COLUMNS]
        widths = [max(len(str(v)) for v in col) for col in zip(header, *rows, strict=False)]
        for values in [header, *rows]:
            lines.append("  " + "  ".join(str(v).ljust(w) for v, w in zip(values, widths, strict=False)).rstrip())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
