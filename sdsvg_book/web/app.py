from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import AsyncIterator, Iterator
from contextlib import ExitStack, asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from .. import __version__
from ..config.loader import BookConfig, ConfigError, load_config
from ..db.connection import db_cursor
from ..db.member_store import ensure_schema
from ..errors import PersistenceError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import setup_logging
from ..services.importer import handle_upload, load_page
from ..services.sample import sample_workbook_bytes
from ..services.upload import UploadedFile, UploadFailure

"""HTTP boundary.

The page is always re-rendered with HTTP 200: banners in the returned page
state describe what happened. HTML rendering lives outside this package; the
endpoints return the page state as JSON.
"""

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "excelFile"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
COPY_CHUNK_BYTES = 1024 * 1024


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    yield


app = FastAPI(title="SDSVG Book", version=__version__, lifespan=lifespan)


@dataclass
class DbSession:
    cursor: Any
    warning: str | None = None


def get_config() -> BookConfig:
    load_dotenv(dotenv_path=Path(".env"), override=True)
    try:
        return load_config()
    except ConfigError as e:
        logger.error(f"config: {e}")
        raise HTTPException(status_code=500, detail="Server configuration error") from e


def get_session(cfg: BookConfig = Depends(get_config)) -> Iterator[DbSession]:
    """Yield a cursor, or a warning-only session when the database is down."""
    stack = ExitStack()
    try:
        cur = stack.enter_context(db_cursor(cfg))
        ensure_schema(cur, table=cfg.table)
    except PersistenceError as e:
        stack.close()
        logger.warning(f"database unavailable: {e}")
        yield DbSession(cursor=None, warning=e.user_message)
        return
    with stack:
        yield DbSession(cursor=cur)


def _receive_upload(file: UploadFile | None, workdir: Path, max_bytes: int) -> UploadedFile:
    """Copy the multipart payload to ``workdir`` and describe the transfer."""
    if file is None or not file.filename:
        return UploadedFile(filename=None, path=None, failure=UploadFailure.NO_FILE)
    target = workdir / Path(file.filename).name
    size = 0
    try:
        with target.open("wb") as out:
            while chunk := file.file.read(COPY_CHUNK_BYTES):
                size += len(chunk)
                if size > max_bytes:
                    return UploadedFile(filename=file.filename, path=None, size=size, failure=UploadFailure.TOO_LARGE)
                out.write(chunk)
    except OSError as e:
        logger.error(f"upload write failed: {e}")
        return UploadedFile(filename=file.filename, path=None, failure=UploadFailure.WRITE_FAILED)
    return UploadedFile(filename=file.filename, path=target, size=size)


@app.get("/")
def index(session: DbSession = Depends(get_session), cfg: BookConfig = Depends(get_config)) -> JSONResponse:
    page = load_page(session.cursor, table=cfg.table, warning=session.warning)
    return JSONResponse(page.to_dict())


@app.post("/upload")
def upload(
    excel_file: UploadFile | None = File(None, alias=UPLOAD_FIELD),
    session: DbSession = Depends(get_session),
    cfg: BookConfig = Depends(get_config),
) -> JSONResponse:
    workdir = Path(tempfile.mkdtemp(prefix="sdsvg-upload-"))
    try:
        received = _receive_upload(excel_file, workdir, cfg.upload.max_bytes)
        page = handle_upload(
            received,
            session.cursor,
            table=cfg.table,
            max_bytes=cfg.upload.max_bytes,
            error_log=ErrorLogBuffer(cfg.logs_directory),
            warning=session.warning,
        )
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
    return JSONResponse(page.to_dict())


@app.get("/sample")
def sample() -> Response:
    return Response(
        content=sample_workbook_bytes(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="sdsvg-book-sample.xlsx"'},
    )
