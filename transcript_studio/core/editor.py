"""Row-level edits mapped back onto single raw lines, plus row selection.

WHY: The table lets users change a segment's time, speaker, or content,
but rows are only a projection — the raw buffer is the source of truth.
Every edit therefore has to become a rewrite of exactly one raw line
that the classifier will read back as the edited row.

HOW: rewrite_line() builds the replacement text for one line. Speaker
and content edits keep the line's original bracket prefix untouched.
Time edits rebuild the bracket from the typed value in canonical form,
shifted back by the row's active offset so the buffer keeps storing
file-relative times. Non-segment rows are replaced by the literal value.

RULES:
- Only the edited line changes; the caller splices it into the buffer
- Time edits that are not a valid time range are written as "[value]"
  verbatim — the line then derives as raw text instead of being dropped
- Shifted-back times never go below zero
- RowSelection.toggle_all flips between empty and full coverage
"""

from __future__ import annotations

import enum
import re
from typing import Iterable, Iterator, Set

from transcript_studio.core.rows import Row, SegmentRow
from transcript_studio.core.timecode import format_time_range, parse_time_range

_BRACKET_PREFIX_RE = re.compile(r"^(\[.*?\])")


class EditField(str, enum.Enum):
    """Editable columns of the transcript table."""

    TIME = "time"
    SPEAKER = "speaker"
    CONTENT = "content"


def _speaker_prefix(speaker: str) -> str:
    return "{}: ".format(speaker) if speaker else ""


def _bracket_from_time(row: SegmentRow, value: str) -> str:
    parsed = parse_time_range(value)
    if parsed is None:
        return "[{}]".format(value)

    start, end = parsed
    local_start = max(0.0, start - row.offset_s)
    local_end = max(0.0, end - row.offset_s) if end is not None else None
    return "[{}]".format(format_time_range(local_start, local_end))


def rewrite_line(row: Row, original_line: str, field: str, value: str) -> str:
    """Return the replacement raw line for an edit of ``field`` on ``row``.

    Args:
        row: The derived row being edited.
        original_line: The buffer line the row was derived from.
        field: "time", "speaker" or "content" (or an EditField).
        value: The new field value as typed.

    Raises:
        ValueError: If ``field`` is not an editable column.
    """
    edit_field = EditField(field)

    if not isinstance(row, SegmentRow):
        return value

    speaker = value if edit_field is EditField.SPEAKER else row.speaker
    content = value if edit_field is EditField.CONTENT else row.content

    if edit_field is EditField.TIME:
        prefix = _bracket_from_time(row, value)
    else:
        match = _BRACKET_PREFIX_RE.match(original_line)
        prefix = match.group(1) if match else "[{}]".format(row.time)

    return "{} {}{}".format(prefix, _speaker_prefix(speaker), content)


class RowSelection:
    """An explicit set of selected row indices."""

    def __init__(self, indices: Iterable[int] = ()) -> None:
        self._indices: Set[int] = set(indices)

    def toggle(self, index: int) -> None:
        if index in self._indices:
            self._indices.discard(index)
        else:
            self._indices.add(index)

    def toggle_all(self, row_count: int) -> None:
        """Select every index, or clear when everything is already selected."""
        if row_count > 0 and len(self._indices) == row_count:
            self._indices.clear()
        else:
            self._indices = set(range(row_count))

    def clear(self) -> None:
        self._indices.clear()

    @property
    def indices(self) -> Set[int]:
        return set(self._indices)

    def __contains__(self, index: object) -> bool:
        return index in self._indices

    def __len__(self) -> int:
        return len(self._indices)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._indices))
