"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
represent closed sets like export format names and editable fields. All
models include Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Enum values match internal constants exactly (formatter keys, EditField)
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from transcript_studio.core.editor import EditField
from transcript_studio.core.rows import Row, RowKind, SegmentRow, SeparatorRow
from transcript_studio.server.sessions import TranscriptSession


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ExportFormat(str, Enum):
    """Available export format identifiers.

    RULES:
    - Values match keys in transcript_studio.formatters.FORMATTERS exactly
    """

    plain_text = "plain_text"
    csv_table = "csv_table"
    srt_subtitles = "srt_subtitles"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateTranscriptRequest(BaseModel):
    """Body for creating a transcript session."""

    name: str = Field(
        default="",
        description="Display name; the stem of exported filenames. Unnamed "
                    "transcripts export as dated files (transcription_YYYY-MM-DD.txt).",
    )
    text: str = Field(
        default="",
        description="Initial transcript text (e.g. a previously saved transcript).",
    )


class AppendRequest(BaseModel):
    """A chunk of streamed transcript text."""

    chunk: str = Field(description="Text to append verbatim; may end mid-line.")


class BeginSourceRequest(BaseModel):
    """Announces a new recording before its text is streamed."""

    name: str = Field(description="Source recording name, written into the separator line.")
    start_time: str = Field(
        default="00:00",
        description="Absolute start time of the recording (MM:SS or HH:MM:SS).",
    )


class EditRowRequest(BaseModel):
    """A single table cell edit."""

    field: EditField = Field(description="Column to edit: time, speaker or content.")
    value: str = Field(description="New cell value as typed.")


class DeleteRowsRequest(BaseModel):
    """Rows to delete, by index."""

    indices: List[int] = Field(description="Row indices to remove from the buffer.")


class ToggleRowRequest(BaseModel):
    """One row to add to or remove from the selection."""

    index: int = Field(description="Row index to toggle.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TranscriptResponse(BaseModel):
    """Transcript session summary."""

    id: str = Field(description="Unique session identifier (UUID).")
    name: str = Field(description="Display name of the transcript.")
    streaming: bool = Field(description="True while only appends are accepted.")
    version: int = Field(description="Incremented on every buffer mutation.")
    line_count: int = Field(description="Number of raw lines in the buffer.")
    segment_count: int = Field(description="Number of timestamped segment rows.")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    updated_at: float = Field(description="Last use timestamp (Unix epoch seconds).")
    text: Optional[str] = Field(
        default=None,
        description="Full buffer text, only included when requested.",
    )

    @classmethod
    def from_session(cls, session: TranscriptSession, include_text: bool = False) -> "TranscriptResponse":
        buffer = session.buffer
        return cls(
            id=session.id,
            name=session.name,
            streaming=buffer.streaming,
            version=buffer.version,
            line_count=len(buffer),
            segment_count=len(buffer.segments),
            created_at=session.created_at,
            updated_at=session.updated_at,
            text=buffer.text if include_text else None,
        )


class AppendResponse(BaseModel):
    """Result of an append."""

    version: int = Field(description="Buffer version after the append.")
    line_count: int = Field(description="Number of raw lines after the append.")


class RowModel(BaseModel):
    """One derived row of the transcript table."""

    index: int = Field(description="Row position in the buffer.")
    kind: RowKind = Field(description="segment, separator or raw.")
    display_line: str = Field(description="Normalized line used for text export.")
    time: Optional[str] = Field(default=None, description="Display time, segments only.")
    speaker: Optional[str] = Field(default=None, description="Speaker, segments only.")
    content: str = Field(default="", description="Row text.")
    start_s: Optional[float] = Field(default=None, description="Absolute start in seconds.")
    end_s: Optional[float] = Field(default=None, description="Absolute end in seconds, if given.")
    declared_offset_s: Optional[float] = Field(
        default=None,
        description="Start offset declared by a separator, if any.",
    )

    @classmethod
    def from_row(cls, row: Row) -> "RowModel":
        if isinstance(row, SegmentRow):
            return cls(
                index=row.index,
                kind=row.kind,
                display_line=row.display_line,
                time=row.time,
                speaker=row.speaker,
                content=row.content,
                start_s=row.start_s,
                end_s=row.end_s,
            )
        if isinstance(row, SeparatorRow):
            return cls(
                index=row.index,
                kind=row.kind,
                display_line=row.display_line,
                content=row.label,
                declared_offset_s=row.declared_offset_s,
            )
        return cls(
            index=row.index,
            kind=row.kind,
            display_line=row.display_line,
            content=row.content,
        )


class RowsResponse(BaseModel):
    """The derived table for a transcript."""

    transcript_id: str = Field(description="The session these rows belong to.")
    version: int = Field(description="Buffer version the rows were derived from.")
    rows: List[RowModel] = Field(description="Rows in buffer order.")


class DeleteRowsResponse(BaseModel):
    removed: int = Field(description="Number of lines removed.")
    line_count: int = Field(description="Number of raw lines remaining.")


class SelectionResponse(BaseModel):
    """The rows currently selected in the table."""

    indices: List[int] = Field(description="Selected row indices, ascending.")
    row_count: int = Field(description="Number of rows in the table.")

    @classmethod
    def from_session(cls, session: TranscriptSession) -> "SelectionResponse":
        return cls(indices=list(session.selection), row_count=len(session.buffer))


class ImportResponse(BaseModel):
    imported: int = Field(description="Number of transcript lines appended from the CSV.")
    line_count: int = Field(description="Number of raw lines after the import.")


class FormatInfo(BaseModel):
    """Description of an available export format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-transcript.csv').")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
