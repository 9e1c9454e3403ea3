from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sdsvg_book.config.loader import (
    DEFAULT_MAX_UPLOAD_BYTES,
    ConfigError,
    _validate_config_schema,
    default_config_path,
    load_config,
)


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.database.host == "localhost"
    assert cfg.database.port == 5432
    assert cfg.database.user == "appuser"
    assert cfg.database.client_encoding == "UTF8"
    assert cfg.table == "members"
    assert cfg.upload.max_bytes == 1048576
    assert cfg.logs_directory == "./logs"


def test_load_config_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "book.yml"
    path.write_text("database:\n  dsn: postgresql://localhost/book\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.database.dsn == "postgresql://localhost/book"
    assert cfg.table == "members"
    assert cfg.upload.max_bytes == DEFAULT_MAX_UPLOAD_BYTES


def test_default_path_uses_environment(monkeypatch, temp_workdir: Path):
    assert default_config_path() == Path("config/book.yml")
    monkeypatch.setenv("SDSVG_BOOK_CONFIG", "/etc/book.yml")
    assert default_config_path() == Path("/etc/book.yml")


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "absent.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "book.yml"
    path.write_text("database: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_validate_missing_database_section():
    with pytest.raises(ConfigError) as e:
        _validate_config_schema({})
    assert "config validation failed" in str(e.value)
    assert "required property" in str(e.value)


@pytest.mark.parametrize(
    "data",
    [
        {"database": {"port": "5432"}},
        {"database": {}, "table": "Members; DROP"},
        {"database": {}, "upload": {"max_bytes": 0}},
        {"database": {}, "unexpected": True},
        {"database": {"charset": "utf8"}},
    ],
)
def test_validate_rejects_bad_values(data):
    with pytest.raises(ConfigError, match="config validation failed"):
        _validate_config_schema(data)


def test_validate_missing_schema_file():
    with patch("sdsvg_book.config.loader.SCHEMA_PATH", Path("/nonexistent/schema.json")):
        with pytest.raises(ConfigError, match="config schema not found"):
            _validate_config_schema({"database": {}})


def test_validate_invalid_schema_json(tmp_path: Path):
    bad = tmp_path / "schema.json"
    bad.write_text("{ invalid json }", encoding="utf-8")
    with patch("sdsvg_book.config.loader.SCHEMA_PATH", bad):
        with pytest.raises(ConfigError, match="invalid schema file"):
            _validate_config_schema({"database": {}})


def test_packaged_schema_is_valid_json():
    from sdsvg_book.config.loader import SCHEMA_PATH

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    assert schema["required"] == ["database"]
