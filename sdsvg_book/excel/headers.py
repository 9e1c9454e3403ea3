from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..errors import ValidationError
from ..models.cells import RawRow
from ..normalize.cell import normalize_cell

"""Header row resolution.

Header labels are matched case- and whitespace-insensitively. The first
occurrence of a label wins; blank header cells are ignored.
"""

__all__ = [
    "REQUIRED_COLUMNS",
    "ORDER_FLAG_ALIASES",
    "HeaderMap",
    "normalize_label",
    "resolve_headers",
]

REQUIRED_COLUMNS: tuple[str, ...] = ("last name", "first name", "group")

# Highest priority first. The first alias column with a value wins per row.
ORDER_FLAG_ALIASES: tuple[str, ...] = ("record", "p/s", "p_s", "p")


def normalize_label(label: str) -> str:
    return label.strip().lower()


class HeaderMap(Mapping[str, int]):
    """Normalised header label -> zero-based column index."""

    def __init__(self, columns: dict[str, int] | None = None) -> None:
        self._columns: dict[str, int] = dict(columns or {})

    def __getitem__(self, label: str) -> int:
        return self._columns[normalize_label(label)]

    def __iter__(self):
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and normalize_label(label) in self._columns

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"HeaderMap({self._columns!r})"

    def index_of(self, label: str) -> int | None:
        """Column index for ``label`` or None when the column is absent."""
        return self._columns.get(normalize_label(label))

    def columns_for(self, aliases: Iterable[str]) -> list[int]:
        """Indices of the alias columns present, in alias priority order."""
        found = []
        for alias in aliases:
            index = self.index_of(alias)
            if index is not None and index not in found:
                found.append(index)
        return found

    def mapped_indices(self) -> set[int]:
        return set(self._columns.values())

    def missing(self, required: Iterable[str] = REQUIRED_COLUMNS) -> list[str]:
        return [name for name in required if name not in self]

    def require(self, required: Iterable[str] = REQUIRED_COLUMNS) -> None:
        """Raise ValidationError naming every missing required column."""
        missing = [name.title() for name in self.missing(required)]
        if missing:
            raise ValidationError(
                f"Missing required column(s): {', '.join(missing)}",
                missing_columns=missing,
            )


def resolve_headers(row: RawRow) -> HeaderMap:
    columns: dict[str, int] = {}
    for index in sorted(row):
        label = normalize_label(normalize_cell(row[index]))
        if not label or label in columns:
            continue
        columns[label] = index
    return HeaderMap(columns)
