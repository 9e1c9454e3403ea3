from __future__ import annotations

import pytest

from sdsvg_book.config.loader import DatabaseConfig
from sdsvg_book.db.connection import CONNECT_FAILED_MESSAGE, resolve_dsn
from sdsvg_book.errors import PersistenceError


def test_dsn_from_config(temp_workdir):
    cfg = DatabaseConfig(host="db", port=5433, user="book", password="pw", database="members")
    assert resolve_dsn(cfg) == "host=db port=5433 user=book dbname=members password=pw"


def test_environment_overrides_config(monkeypatch, temp_workdir):
    monkeypatch.setenv("PGHOST", "envhost")
    monkeypatch.setenv("PGPASSWORD", "envpw")
    cfg = DatabaseConfig(host="db", port=5432, user="book", database="members")
    assert resolve_dsn(cfg) == "host=envhost port=5432 user=book dbname=members password=envpw"


def test_full_dsn_wins(monkeypatch, temp_workdir):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/d")
    assert resolve_dsn(DatabaseConfig(host="db")) == "postgresql://u@h/d"
    monkeypatch.delenv("DATABASE_URL")
    assert resolve_dsn(DatabaseConfig(dsn="postgresql://cfg/d")) == "postgresql://cfg/d"


def test_missing_value_is_named(temp_workdir):
    cfg = DatabaseConfig(host="db", port=5432, user="book")
    with pytest.raises(PersistenceError) as e:
        resolve_dsn(cfg)
    assert str(e.value) == "Missing database configuration value: database"
    assert e.value.user_message == CONNECT_FAILED_MESSAGE
