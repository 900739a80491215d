"""The transcript buffer: the single owned, mutable log of raw lines.

WHY: A streaming producer keeps appending text, users edit and delete
lines once streaming ends, and CSV imports add whole blocks. All of
that state has to live in exactly one place, with rows always derived
from it and never edited directly.

HOW: TranscriptBuffer stores a list of lines and a version counter that
is bumped on every mutation. The ``rows`` property re-derives the full
row list when the version changed since the last derivation and reuses
the cached list otherwise. Appends join text: the first piece of a
chunk extends the last line, so a half-received utterance stays raw
text until the rest of its line arrives.

RULES:
- Only append()/begin_source() are allowed while streaming; edits,
  deletes, imports and clear raise BufferLockedError
- edit_field() rewrites exactly one line
- delete_rows() removes exactly the given lines and keeps order
- Row lists handed out are never mutated afterwards
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from transcript_studio import config
from transcript_studio.core.classifier import derive_rows, split_lines
from transcript_studio.core.editor import RowSelection, rewrite_line
from transcript_studio.core.importer import import_csv
from transcript_studio.core.rows import Row, SegmentRow
from transcript_studio.core.timecode import parse_time_to_seconds
from transcript_studio.exceptions import BufferLockedError

logger = logging.getLogger(__name__)


class TranscriptBuffer:
    """Append-only while streaming, freely editable afterwards."""

    def __init__(self, text: str = "") -> None:
        self._lines: List[str] = split_lines(text)
        self._version = 0
        self._rows_version = -1
        self._rows: List[Row] = []
        self.streaming = False
        self._pending_cr = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def version(self) -> int:
        return self._version

    @property
    def rows(self) -> List[Row]:
        """Rows for the current buffer, derived at most once per version."""
        if self._rows_version != self._version:
            self._rows = derive_rows(self._lines)
            self._rows_version = self._version
        return self._rows

    @property
    def segments(self) -> List[SegmentRow]:
        return [row for row in self.rows if isinstance(row, SegmentRow)]

    def __len__(self) -> int:
        return len(self._lines)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def append(self, chunk: str) -> None:
        """Append a chunk of producer text to the end of the buffer."""
        if not chunk:
            return
        if self._pending_cr and chunk.startswith("\n"):
            self._pending_cr = False
            chunk = chunk[1:]
            if not chunk:
                return
        # A trailing "\r" may be the first half of a "\r\n" split across chunks.
        self._pending_cr = chunk.endswith("\r")
        pieces = chunk.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        if self._lines:
            self._lines[-1] += pieces[0]
            self._lines.extend(pieces[1:])
        else:
            self._lines = pieces
        self._touch()

    def begin_source(self, name: str, start_time: str = "00:00") -> None:
        """Prepare the buffer for another recording and start streaming.

        A separator declaring the recording's start time is appended when
        the buffer already holds text or the start time is not zero, so
        the new recording's relative times are shifted correctly.
        """
        if self._lines or parse_time_to_seconds(start_time) != 0:
            separator = config.SEPARATOR_TEMPLATE.format(
                label=config.CONTINUED_SOURCE_LABEL, name=name, start=start_time,
            )
            self.append("\n\n{}\n\n".format(separator))
        self.streaming = True
        logger.debug("Started streaming source %s at %s", name, start_time)

    def end_stream(self) -> None:
        self.streaming = False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def edit_field(self, index: int, field: str, value: str) -> str:
        """Apply a table edit to the row at ``index``.

        Returns:
            The rewritten raw line.

        Raises:
            BufferLockedError: While streaming.
            IndexError: If ``index`` is not a row index.
            ValueError: If ``field`` is not an editable column.
        """
        self._ensure_editable()
        if not 0 <= index < len(self._lines):
            raise IndexError("Row index {} out of range (0-{})".format(index, len(self._lines) - 1))

        row = self.rows[index]
        new_line = rewrite_line(row, self._lines[index], field, value)
        self._lines[index] = new_line
        self._touch()
        return new_line

    def delete_rows(self, indices: Iterable[int]) -> int:
        """Remove the lines at ``indices``; unknown indices are ignored.

        Returns:
            The number of lines removed.
        """
        self._ensure_editable()
        doomed = set(indices)
        before = len(self._lines)
        self._lines = [line for i, line in enumerate(self._lines) if i not in doomed]
        removed = before - len(self._lines)
        if removed:
            self._touch()
        return removed

    def delete_selected(self, selection: RowSelection) -> int:
        removed = self.delete_rows(selection.indices)
        selection.clear()
        return removed

    def import_csv(self, file_text: str, source_name: Optional[str] = None) -> int:
        """Append the transcript lines recovered from CSV file text.

        Imported times are absolute, so when the buffer already holds text
        a separator resetting the offset to zero is written first.

        Returns:
            The number of transcript lines imported.
        """
        self._ensure_editable()
        block = import_csv(file_text)
        if not block:
            return 0

        if self._lines:
            separator = config.SEPARATOR_TEMPLATE.format(
                label=config.IMPORTED_SOURCE_LABEL, name=source_name or "CSV", start="00:00",
            )
            self.append("\n{}\n".format(separator))
        self.append(block)
        count = block.count("\n")
        logger.debug("Imported %d lines from %s", count, source_name or "CSV")
        return count

    def clear(self) -> None:
        self._ensure_editable()
        self._lines = []
        self._pending_cr = False
        self._touch()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_editable(self) -> None:
        if self.streaming:
            raise BufferLockedError("Transcript is still streaming; only appends are allowed.")

    def _touch(self) -> None:
        self._version += 1
