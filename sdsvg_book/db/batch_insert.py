from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""Batched INSERT via psycopg2.extras.execute_values.

Transaction boundaries belong to the caller; this module only issues the
INSERT statement(s) and wraps driver failures in BatchInsertError.
"""

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "batch_insert",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one execute_values call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Insert ``rows`` into ``table``.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table name (validated identifier)
    columns: insert column order, matching each row's value order
    rows: row value sequences
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the call; not invoked when
        ``rows`` is empty
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return InsertResult(inserted_rows=len(rows_list))
