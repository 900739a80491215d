"""FastAPI application exposing transcript sessions over HTTP.

WHY: The host UI (and the streaming producer behind it) needs an HTTP
boundary to the engine: create a transcript, append streamed chunks,
read the derived table, edit, select or delete rows, import a CSV, and
download exports. FastAPI provides request validation and OpenAPI documentation.

HOW: A single FastAPI app exposes endpoints grouped by tags. Every
endpoint resolves its session from the SessionStore, holds the session
lock while it touches the buffer, and maps engine errors to HTTP codes:
  BufferLockedError          → 409
  IndexError                 → 404
  NoTimestampedSegmentsError → 422
  session limit              → 429

RULES:
- All endpoints have OpenAPI descriptions and consistent ErrorResponse bodies
- The session store is a module-level singleton
- Idle sessions are expired by a periodic task started in the lifespan
- Exports are returned as attachments named {name}{suffix}
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response

from transcript_studio import __version__
from transcript_studio.config import API_HOST, API_PORT
from transcript_studio.core.rows import is_visible
from transcript_studio.exceptions import BufferLockedError, ExportError
from transcript_studio.formatters import FORMATTERS
from transcript_studio.server.models import (
    AppendRequest,
    AppendResponse,
    BeginSourceRequest,
    CreateTranscriptRequest,
    DeleteRowsRequest,
    DeleteRowsResponse,
    EditRowRequest,
    ErrorResponse,
    ExportFormat,
    FormatInfo,
    HealthResponse,
    ImportResponse,
    RowModel,
    RowsResponse,
    SelectionResponse,
    ToggleRowRequest,
    TranscriptResponse,
)
from transcript_studio.server.sessions import SessionStore, TranscriptSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Transcript Studio API",
    description=(
        "REST API over in-memory transcript buffers. Stream text in, read "
        "the normalized time-coded table, edit or delete rows, import CSV, "
        "and export plain text, CSV, or SRT subtitles."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Transcript not found"}}
_LOCKED = {409: {"model": ErrorResponse, "description": "Transcript is still streaming"}}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session_or_404(transcript_id: str) -> TranscriptSession:
    session = session_store.get_session(transcript_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Transcript not found: {}".format(transcript_id))
    return session


def _locked(exc: BufferLockedError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


def _content_disposition(filename: str) -> str:
    """Attachment header value that survives non-ASCII and quoted names.

    Header values are latin-1 on the wire, so the plain ``filename`` gets an
    ASCII fallback and the real name travels in RFC 5987 ``filename*``.
    """
    sanitized = filename.replace("\r", " ").replace("\n", " ").strip()
    ascii_fallback = "".join(
        char if 32 <= ord(char) < 127 and char not in {'"', "\\"} else "_"
        for char in sanitized
    )
    return "attachment; filename=\"{}\"; filename*=UTF-8''{}".format(
        ascii_fallback, quote(sanitized, safe=""),
    )


# ---------------------------------------------------------------------------
# Endpoints: Transcripts
# ---------------------------------------------------------------------------


@app.post(
    "/transcripts",
    response_model=TranscriptResponse,
    status_code=201,
    tags=["transcripts"],
    summary="Create a transcript",
    responses={429: {"model": ErrorResponse, "description": "Too many transcripts"}},
)
async def create_transcript(request: CreateTranscriptRequest) -> TranscriptResponse:
    try:
        session = session_store.create_session(request.name, request.text)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return TranscriptResponse.from_session(session)


@app.get(
    "/transcripts",
    response_model=List[TranscriptResponse],
    tags=["transcripts"],
    summary="List transcripts",
)
async def list_transcripts() -> List[TranscriptResponse]:
    return [TranscriptResponse.from_session(s) for s in session_store.list_sessions()]


@app.get(
    "/transcripts/{transcript_id}",
    response_model=TranscriptResponse,
    tags=["transcripts"],
    summary="Get a transcript",
    description="Returns the session summary; pass include_text=true for the full buffer.",
    responses=_NOT_FOUND,
)
async def get_transcript(transcript_id: str, include_text: bool = False) -> TranscriptResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        return TranscriptResponse.from_session(session, include_text=include_text)


@app.delete(
    "/transcripts/{transcript_id}",
    status_code=204,
    tags=["transcripts"],
    summary="Delete a transcript",
    responses=_NOT_FOUND,
)
async def delete_transcript(transcript_id: str) -> Response:
    if not session_store.delete_session(transcript_id):
        raise HTTPException(status_code=404, detail="Transcript not found: {}".format(transcript_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Streaming
# ---------------------------------------------------------------------------


@app.post(
    "/transcripts/{transcript_id}/sources",
    response_model=TranscriptResponse,
    tags=["streaming"],
    summary="Begin streaming a new recording",
    description=(
        "Writes a separator line declaring the recording's start time when "
        "needed and switches the transcript into streaming mode."
    ),
    responses=_NOT_FOUND,
)
async def begin_source(transcript_id: str, request: BeginSourceRequest) -> TranscriptResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        session.buffer.begin_source(request.name, request.start_time)
        result = TranscriptResponse.from_session(session)
    session_store.touch(transcript_id)
    return result


@app.post(
    "/transcripts/{transcript_id}/append",
    response_model=AppendResponse,
    tags=["streaming"],
    summary="Append a streamed chunk",
    responses=_NOT_FOUND,
)
async def append_chunk(transcript_id: str, request: AppendRequest) -> AppendResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        session.buffer.append(request.chunk)
        result = AppendResponse(version=session.buffer.version, line_count=len(session.buffer))
    session_store.touch(transcript_id)
    return result


@app.post(
    "/transcripts/{transcript_id}/stream/end",
    response_model=TranscriptResponse,
    tags=["streaming"],
    summary="Finish streaming",
    description="Leaves streaming mode so rows can be edited, deleted, and imported.",
    responses=_NOT_FOUND,
)
async def end_stream(transcript_id: str) -> TranscriptResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        session.buffer.end_stream()
        result = TranscriptResponse.from_session(session)
    session_store.touch(transcript_id)
    return result


# ---------------------------------------------------------------------------
# Endpoints: Rows
# ---------------------------------------------------------------------------


@app.get(
    "/transcripts/{transcript_id}/rows",
    response_model=RowsResponse,
    tags=["rows"],
    summary="Get the derived table",
    description="Blank lines are omitted unless include_blank=true.",
    responses=_NOT_FOUND,
)
async def get_rows(transcript_id: str, include_blank: bool = False) -> RowsResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        rows = session.buffer.rows
        version = session.buffer.version
    models = [RowModel.from_row(row) for row in rows if include_blank or is_visible(row)]
    return RowsResponse(transcript_id=session.id, version=version, rows=models)


@app.patch(
    "/transcripts/{transcript_id}/rows/{index}",
    response_model=RowModel,
    tags=["rows"],
    summary="Edit one cell of a row",
    description=(
        "Rewrites the single raw line behind the row. Editing a segment's time "
        "rebuilds its bracket; speaker and content edits keep the original bracket."
    ),
    responses={**_NOT_FOUND, **_LOCKED},
)
async def edit_row(transcript_id: str, index: int, request: EditRowRequest) -> RowModel:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        try:
            session.buffer.edit_field(index, request.field.value, request.value)
        except BufferLockedError as exc:
            raise _locked(exc)
        except IndexError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        row = session.buffer.rows[index]
    session_store.touch(transcript_id)
    return RowModel.from_row(row)


@app.post(
    "/transcripts/{transcript_id}/rows/delete",
    response_model=DeleteRowsResponse,
    tags=["rows"],
    summary="Delete rows",
    description="Removes exactly the given raw lines and clears the selection.",
    responses={**_NOT_FOUND, **_LOCKED},
)
async def delete_rows(transcript_id: str, request: DeleteRowsRequest) -> DeleteRowsResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        try:
            removed = session.buffer.delete_rows(request.indices)
        except BufferLockedError as exc:
            raise _locked(exc)
        session.selection.clear()
        line_count = len(session.buffer)
    session_store.touch(transcript_id)
    return DeleteRowsResponse(removed=removed, line_count=line_count)


@app.post(
    "/transcripts/{transcript_id}/import",
    response_model=ImportResponse,
    tags=["rows"],
    summary="Import a CSV table",
    description="Appends the transcript lines recovered from an exported CSV file.",
    responses={**_NOT_FOUND, **_LOCKED},
)
async def import_table(
    transcript_id: str,
    file: Annotated[UploadFile, File(description="CSV file exported by this tool or a spreadsheet.")],
) -> ImportResponse:
    session = _get_session_or_404(transcript_id)
    raw = await file.read()
    file_text = raw.decode("utf-8", errors="replace")
    source_name = Path(file.filename or "import.csv").name

    with session.lock:
        try:
            imported = session.buffer.import_csv(file_text, source_name=source_name)
        except BufferLockedError as exc:
            raise _locked(exc)
        line_count = len(session.buffer)
    session_store.touch(transcript_id)
    logger.info("Imported %d lines into transcript %s", imported, transcript_id)
    return ImportResponse(imported=imported, line_count=line_count)


# ---------------------------------------------------------------------------
# Endpoints: Selection
# ---------------------------------------------------------------------------


@app.get(
    "/transcripts/{transcript_id}/selection",
    response_model=SelectionResponse,
    tags=["selection"],
    summary="Get the selected rows",
    responses=_NOT_FOUND,
)
async def get_selection(transcript_id: str) -> SelectionResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        return SelectionResponse.from_session(session)


@app.post(
    "/transcripts/{transcript_id}/selection/toggle",
    response_model=SelectionResponse,
    tags=["selection"],
    summary="Select or deselect one row",
    responses=_NOT_FOUND,
)
async def toggle_row(transcript_id: str, request: ToggleRowRequest) -> SelectionResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        if not 0 <= request.index < len(session.buffer):
            raise HTTPException(
                status_code=404,
                detail="Row index {} out of range (0-{})".format(request.index, len(session.buffer) - 1),
            )
        session.selection.toggle(request.index)
        result = SelectionResponse.from_session(session)
    session_store.touch(transcript_id)
    return result


@app.post(
    "/transcripts/{transcript_id}/selection/toggle-all",
    response_model=SelectionResponse,
    tags=["selection"],
    summary="Select every row, or clear a full selection",
    responses=_NOT_FOUND,
)
async def toggle_all_rows(transcript_id: str) -> SelectionResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        session.selection.toggle_all(len(session.buffer))
        result = SelectionResponse.from_session(session)
    session_store.touch(transcript_id)
    return result


@app.post(
    "/transcripts/{transcript_id}/selection/delete",
    response_model=DeleteRowsResponse,
    tags=["selection"],
    summary="Delete the selected rows",
    description="Removes the raw lines behind the selected rows, then clears the selection.",
    responses={**_NOT_FOUND, **_LOCKED},
)
async def delete_selection(transcript_id: str) -> DeleteRowsResponse:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        try:
            removed = session.buffer.delete_selected(session.selection)
        except BufferLockedError as exc:
            raise _locked(exc)
        line_count = len(session.buffer)
    session_store.touch(transcript_id)
    return DeleteRowsResponse(removed=removed, line_count=line_count)


# ---------------------------------------------------------------------------
# Endpoints: Export
# ---------------------------------------------------------------------------


@app.get(
    "/transcripts/{transcript_id}/export/{format_key}",
    tags=["export"],
    summary="Download an export",
    responses={
        **_NOT_FOUND,
        422: {"model": ErrorResponse, "description": "Nothing exportable in this format"},
    },
)
async def export_transcript(transcript_id: str, format_key: ExportFormat) -> Response:
    session = _get_session_or_404(transcript_id)
    with session.lock:
        rows = session.buffer.rows

    formatter = FORMATTERS[format_key.value]()
    try:
        outputs = formatter.format(rows)
    except ExportError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    output = outputs[0]
    filename = "{}{}".format(Path(session.name).stem, output.suffix) if session.name else output.default_filename()
    return Response(
        content=output.content.encode("utf-8"),
        media_type="{}; charset=utf-8".format(output.media_type),
        headers={"Content-Disposition": _content_disposition(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available export formats",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(key=key, name=formatter.name, suffix=formatter.suffix))
    return result


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the transcript-studio-api console script."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
