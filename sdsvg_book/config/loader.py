from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

"""Configuration loading.

Responsibilities:
- Load the YAML config (default ``config/book.yml``, overridable through
  ``SDSVG_BOOK_CONFIG``)
- Validate it against the packaged JSON schema
- Apply defaults for the optional keys

Connection values may be overridden from the environment; see
``sdsvg_book.db.connection``.
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "UploadConfig",
    "BookConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "default_config_path",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/book.yml")
CONFIG_PATH_ENV = "SDSVG_BOOK_CONFIG"

DEFAULT_TABLE = "members"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_LOGS_DIRECTORY = "./logs"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    client_encoding: str = "UTF8"


@dataclass(frozen=True)
class UploadConfig:
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES


@dataclass(frozen=True)
class BookConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    table: str = DEFAULT_TABLE
    upload: UploadConfig = field(default_factory=UploadConfig)
    logs_directory: str = DEFAULT_LOGS_DIRECTORY


def default_config_path() -> Path:
    return Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or unreadable, or the data
            violates it (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> BookConfig:
    path = path or default_config_path()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    upload_raw = data.get("upload") or {}
    return BookConfig(
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
            client_encoding=db_raw.get("client_encoding", "UTF8"),
        ),
        table=data.get("table", DEFAULT_TABLE),
        upload=UploadConfig(max_bytes=upload_raw.get("max_bytes", DEFAULT_MAX_UPLOAD_BYTES)),
        logs_directory=data.get("logs_directory", DEFAULT_LOGS_DIRECTORY),
    )
