from __future__ import annotations

import pytest

from sdsvg_book.db.batch_insert import BatchInsertError, InsertResult, batch_insert


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.rows: list = []


# execute_values is monkeypatched inside the module so no live server is needed

@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import sdsvg_book.db.batch_insert as bi

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        if getattr(cursor, "explode", False):
            raise RuntimeError("duplicate key value")
        cursor.queries.append(sql)
        cursor.rows.extend(rows)

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return fake_execute_values


def test_batch_insert_basic():
    cur = DummyCursor()
    res = batch_insert(cur, table="members", columns=["last_name", "first_name"], rows=[["Doe", "Jane"], ["Roe", "Rick"]])
    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert cur.queries == ['INSERT INTO members ("last_name","first_name") VALUES %s']
    assert cur.rows == [["Doe", "Jane"], ["Roe", "Rick"]]


def test_batch_insert_empty_rows_issues_nothing():
    cur = DummyCursor()
    res = batch_insert(cur, table="members", columns=["last_name"], rows=[])
    assert res.inserted_rows == 0
    assert cur.queries == []


def test_batch_insert_wraps_driver_errors():
    cur = DummyCursor()
    cur.explode = True
    with pytest.raises(BatchInsertError, match="duplicate key value"):
        batch_insert(cur, table="members", columns=["last_name"], rows=[["Doe"]])


def test_batch_insert_with_metrics_callback():
    cur = DummyCursor()
    captured = []
    batch_insert(cur, table="members", columns=["last_name"], rows=[["a"], ["b"]], metrics_callback=captured.append)
    assert len(captured) == 1
    metrics = captured[0]
    assert metrics.batch_size == 2
    assert metrics.end_time >= metrics.start_time
    assert metrics.elapsed_seconds == metrics.end_time - metrics.start_time


def test_batch_insert_empty_rows_skip_metrics():
    captured = []
    batch_insert(DummyCursor(), table="members", columns=["last_name"], rows=[], metrics_callback=captured.append)
    assert captured == []
