from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..config.loader import BookConfig, DatabaseConfig
from ..errors import PersistenceError

"""PostgreSQL connection handling.

Resolution order for connection values:
    1. ``DATABASE_URL`` / ``PGDSN`` (full DSN), then the config ``dsn``
    2. ``PGHOST`` / ``PGPORT`` / ``PGUSER`` / ``PGPASSWORD`` / ``PGDATABASE``
    3. the ``database`` section of the YAML config

``.env`` is loaded by the entrypoints before this module reads the
environment.
"""

__all__ = [
    "CONNECT_FAILED_MESSAGE",
    "resolve_dsn",
    "db_cursor",
]

logger = logging.getLogger(__name__)

CONNECT_FAILED_MESSAGE = "Database connection failed. Saved members cannot be shown right now."

_REQUIRED_KEYS = ("host", "port", "user", "database")


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the libpq DSN from environment and config.

    Raises:
        PersistenceError: a required connection value resolves to nothing.
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn

    values = {
        "host": os.getenv("PGHOST") or db_cfg.host,
        "port": os.getenv("PGPORT") or (str(db_cfg.port) if db_cfg.port else None),
        "user": os.getenv("PGUSER") or db_cfg.user,
        "database": os.getenv("PGDATABASE") or db_cfg.database,
    }
    for key in _REQUIRED_KEYS:
        if not values[key]:
            raise PersistenceError(
                f"Missing database configuration value: {key}",
                user_message=CONNECT_FAILED_MESSAGE,
            )
    dsn = (
        f"host={values['host']} port={values['port']} "
        f"user={values['user']} dbname={values['database']}"
    )
    password = os.getenv("PGPASSWORD") or db_cfg.password
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(cfg: BookConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper; needs a live server)
    """Yield a cursor on an autocommit connection.

    Autocommit leaves transaction control to the explicit BEGIN/COMMIT issued
    by ``member_store.replace_all``.
    """
    dsn = resolve_dsn(cfg.database)
    try:
        conn = psycopg2.connect(dsn)
    except psycopg2.Error as e:
        raise PersistenceError(
            f"Failed to connect to the database: {e}",
            user_message=CONNECT_FAILED_MESSAGE,
        ) from e
    try:
        conn.autocommit = True
        conn.set_client_encoding(cfg.database.client_encoding)
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()
