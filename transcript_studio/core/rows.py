"""Row dataclasses: the derived, disposable projection of the raw buffer.

WHY: The transcript buffer is free text written by a streaming producer.
Exporters, the editing table, and the HTTP API all need the same
structured view of it — times, speakers, content, recording boundaries —
without ever treating that view as state. The row types are that shared
contract between the classifier and everything downstream.

HOW: Three frozen dataclasses, one per line shape, share a common base:
  SegmentRow   — a time-coded utterance ("[00:10 - 00:20] Alice: hi")
  SeparatorRow — a boundary between concatenated recordings
  RawRow       — anything else, passed through unchanged (blank lines too)
RowKind tags each one so callers can dispatch without isinstance chains.

RULES:
- One row per raw line; row.index is the line position in the buffer
- Rows are frozen — edits go through the buffer, then rows are re-derived
- raw_line is excluded from equality: two rows that mean the same thing
  compare equal even if the original spacing/padding differed
- SegmentRow.start_s/end_s already include the active offset
- SegmentRow.end_s is None when the line gave no end time; end times are
  only inferred at export, never here
- All times are in float seconds
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union

from transcript_studio.core.timecode import format_time_range


class RowKind(str, enum.Enum):
    """Line shapes recognised by the classifier."""

    SEGMENT = "segment"
    SEPARATOR = "separator"
    RAW = "raw"


@dataclass(frozen=True)
class SegmentRow:
    """A transcript line with at least a start time.

    RULES:
    - time: display form of the offset-corrected range ("01:40 - 01:50")
    - speaker: text before the first ":" after the bracket, or ""
    - offset_s: the offset that was active when the row was derived
    - display_line: bracket re-emitted with corrected times, then
      "Speaker: " (only when speaker is non-empty), then content
    """

    index: int
    start_s: float
    end_s: Optional[float]
    speaker: str
    content: str
    offset_s: float = 0.0
    raw_line: str = field(default="", compare=False)

    @property
    def kind(self) -> RowKind:
        return RowKind.SEGMENT

    @property
    def time(self) -> str:
        return format_time_range(self.start_s, self.end_s)

    @property
    def display_line(self) -> str:
        speaker_part = "{}: ".format(self.speaker) if self.speaker else ""
        return "[{}] {}{}".format(self.time, speaker_part, self.content)


@dataclass(frozen=True)
class SeparatorRow:
    """A boundary line marking the start of another concatenated recording.

    RULES:
    - declared_offset_s: the "Start:" time, or None when the line has none
    - label: the line with every "---" removed, trimmed
    - display_line is the raw line, untouched
    """

    index: int
    label: str
    declared_offset_s: Optional[float] = None
    raw_line: str = field(default="", compare=False)

    @property
    def kind(self) -> RowKind:
        return RowKind.SEPARATOR

    @property
    def display_line(self) -> str:
        return self.raw_line


@dataclass(frozen=True)
class RawRow:
    """A line that matched no pattern: free text, blank, truncated output."""

    index: int
    content: str
    raw_line: str = field(default="", compare=False)

    @property
    def kind(self) -> RowKind:
        return RowKind.RAW

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()

    @property
    def display_line(self) -> str:
        return self.content


Row = Union[SegmentRow, SeparatorRow, RawRow]


def is_visible(row: Row) -> bool:
    """True for rows shown in the table and exported to CSV (not blank)."""
    return not (isinstance(row, RawRow) and row.is_blank)
