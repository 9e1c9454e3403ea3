from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import BookConfig, ConfigError, load_config
from ..db.connection import db_cursor
from ..db.member_store import ensure_schema, load_all
from ..errors import BookError, PersistenceError, UploadError
from ..excel.extractor import extract_records
from ..excel.headers import resolve_headers
from ..excel.reader import read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import set_debug, setup_logging
from ..models.import_result import ImportStatus
from ..services.importer import import_file, reject_import
from ..services.sample import write_sample_workbook
from ..services.summary import render_groups_text
from ..services.upload import UploadedFile, check_upload

"""CLI entrypoint.

Commands:
- import FILE   upload checks + import + SUMMARY line
- show          print the persisted grouped table
- init-db       create the members table
- sample OUT    write a sample workbook
- inspect FILE  print resolved headers and the first records (no database)
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2

INSPECT_SAMPLE_ROWS = 5


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its connection values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sdsvg-book", description="Member book spreadsheet importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="Path to the YAML config")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Replace the saved members with a workbook")
    imp.add_argument("file", type=Path)
    sub.add_parser("show", help="Print the saved members grouped")
    sub.add_parser("init-db", help="Create the members table")
    sample = sub.add_parser("sample", help="Write a sample workbook")
    sample.add_argument("out", type=Path)
    inspect = sub.add_parser("inspect", help="Show headers and first records without saving")
    inspect.add_argument("file", type=Path)
    return p.parse_args(argv)


def _inspect(path: Path) -> int:
    try:
        workbook = read_workbook(path)
        rows = workbook.rows()
        headers = resolve_headers(rows[0]) if rows else None
        records = extract_records(rows)
    except BookError as e:
        print(f"inspect: {e.user_message}")
        return EXIT_REJECTED
    print(f"SHEET: {workbook.sheet_name} headers={dict(headers) if headers else {}}")
    print(f"records={len(records)}")
    for record in records[:INSPECT_SAMPLE_ROWS]:
        print(
            f"  [{record.group_label}] {record.member_name} flag={record.order_flag or '-'} "
            f"dob={record.dob_display or '-'}"
        )
    return EXIT_SUCCESS


def _import(cfg: BookConfig, path: Path) -> int:
    error_log = ErrorLogBuffer(cfg.logs_directory)
    try:
        if not path.is_file():
            raise UploadError(f"File not found: {path}")
        upload = UploadedFile(filename=path.name, path=path, size=path.stat().st_size)
        check_upload(upload, max_bytes=cfg.upload.max_bytes)
    except BookError as e:
        reject_import(path.name, e, error_log=error_log)
        print(f"import: {e.user_message}")
        return EXIT_REJECTED

    start_time = datetime.now(UTC)
    try:
        with db_cursor(cfg) as cur:
            ensure_schema(cur, table=cfg.table)
            result = import_file(path, cur, table=cfg.table, error_log=error_log)
    except PersistenceError as e:
        reject_import(path.name, e, start_time=start_time, error_log=error_log)
        print(f"import: {e.user_message}")
        return EXIT_FATAL
    if result.status is ImportStatus.OK:
        return EXIT_SUCCESS
    print(f"import: {result.message}")
    return EXIT_FATAL if result.status is ImportStatus.FAILED else EXIT_REJECTED


def _show(cfg: BookConfig) -> int:
    with db_cursor(cfg) as cur:
        groups = load_all(cur, table=cfg.table)
    if not groups:
        print("No saved members.")
    else:
        print(render_groups_text(groups))
    return EXIT_SUCCESS


def _init_db(cfg: BookConfig) -> int:
    with db_cursor(cfg) as cur:
        ensure_schema(cur, table=cfg.table)
    print(f"table ready: {cfg.table}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read the process arguments when none were given explicitly
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug()

    if args.command == "sample":
        write_sample_workbook(args.out)
        print(f"sample written: {args.out}")
        return EXIT_SUCCESS
    if args.command == "inspect":
        return _inspect(args.file)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.command == "import":
            return _import(cfg, args.file)
        if args.command == "show":
            return _show(cfg)
        return _init_db(cfg)
    except PersistenceError as e:
        logger.error(f"database: {e}")
        print(e.user_message)
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
