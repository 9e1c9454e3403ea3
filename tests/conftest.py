# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from sdsvg_book.db.member_store import LOAD_COLUMNS
from sdsvg_book.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.delenv("SDSVG_BOOK_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
table: members
upload:
  max_bytes: 1048576
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "book.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path, rows: list[list[object]], sheet: str = "Sheet1") -> Path:
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook(tmp_path: Path):
    def _make(rows: list[list[object]], name: str = "members.xlsx") -> Path:
        return write_workbook(tmp_path / name, rows)
    return _make


def _display_order(row: tuple[Any, ...]) -> tuple[Any, ...]:
    """ORDER BY of the members reload: group, P tier, last, first, id (code point order)."""
    values = dict(zip(LOAD_COLUMNS, row))
    tier = 0 if values["order_flag"] == "P" else 1
    return (values["group_name"], tier, values["last_name"].lower(), values["first_name"].lower(), values["id"])


class FakeCursor:
    """In-memory stand-in for a psycopg2 cursor on an autocommit connection.

    BEGIN snapshots the committed rows, DELETE/INSERT act on the snapshot,
    COMMIT publishes it and ROLLBACK drops it. SELECT returns the committed
    rows with a 1-based id in front, sorted like the reload ORDER BY.
    """

    def __init__(self) -> None:
        self.statements: list[str] = []
        self.committed: list[tuple[Any, ...]] = []
        self._pending: list[tuple[Any, ...]] | None = None
        self._result: list[tuple[Any, ...]] = []
        self.fail_on_insert = False
        self.fail_on_select = False

    @property
    def in_transaction(self) -> bool:
        return self._pending is not None

    def execute(self, sql: str, params: Any = None) -> None:
        self.statements.append(sql)
        verb = sql.strip().split()[0].upper()
        if verb == "BEGIN":
            self._pending = list(self.committed)
        elif verb == "DELETE":
            assert self._pending is not None, "DELETE outside a transaction"
            self._pending = []
        elif verb == "COMMIT":
            assert self._pending is not None
            self.committed = self._pending
            self._pending = None
        elif verb == "ROLLBACK":
            self._pending = None
        elif verb == "SELECT":
            if self.fail_on_select:
                raise RuntimeError("relation does not exist")
            numbered = [(i, *row) for i, row in enumerate(self.committed, start=1)]
            self._result = sorted(numbered, key=_display_order) if "ORDER BY" in sql else numbered

    def insert_rows(self, rows: list[Any]) -> None:
        if self.fail_on_insert:
            raise RuntimeError("could not extend file: No space left on device")
        assert self._pending is not None, "INSERT outside a transaction"
        self._pending.extend(tuple(r) for r in rows)

    def fetchall(self) -> list[tuple[Any, ...]]:
        return self._result


@pytest.fixture()
def fake_cursor(monkeypatch) -> FakeCursor:
    import sdsvg_book.db.batch_insert as bi

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        cursor.statements.append(sql)
        cursor.insert_rows(rows)

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return FakeCursor()
