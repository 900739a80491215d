"""Line classification, offset tracking, and row derivation.

WHY: The buffer is a single human-readable transcript that may hold
several concatenated recordings, each with its own relative clock. The
table, the editor, and every exporter need that text as structured rows
with absolute times. This module is the bridge between the raw lines and
the row projection.

HOW: One left-to-right pass with a single piece of state — the current
offset in seconds, starting at 0. Each line goes through an ordered list
of matchers and the first match wins:
  1. separator — trimmed line starts with SEPARATOR_PREFIX; a "Start: T"
     inside it REPLACES the offset (never accumulates)
  2. blank     — whitespace-only line, kept as a RawRow
  3. segment   — "[T1]", "[T1-T2]" or "[T1 - T2]", optional "Speaker:",
     then content; the offset is added to T1 and T2
  4. raw       — everything else, unchanged

RULES:
- Separator must be checked before segment, blank before segment
- Classification never raises; unmatched lines fall through to raw
- Missing end times stay None — no inference happens at parse time
- derive_rows is pure: the same lines always give equal rows
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Tuple, Union

from transcript_studio import config
from transcript_studio.core.rows import RawRow, Row, SegmentRow, SeparatorRow
from transcript_studio.core.timecode import TIME_TOKEN, parse_time_to_seconds

SEGMENT_RE = re.compile(
    r"^\[(" + TIME_TOKEN + r")(?:\s*-?\s*(" + TIME_TOKEN + r"))?\]\s*(?:(.*?):)?\s*(.*)"
)
"""Groups: 1 start token, 2 optional end token, 3 optional speaker, 4 content."""

SEPARATOR_OFFSET_RE = re.compile(r"Start:\s*(" + TIME_TOKEN + r")")

# A matcher receives (index, line, offset) and returns (row, new_offset),
# or None to let the next matcher try.
Matcher = Callable[[int, str, float], Optional[Tuple[Row, float]]]


def _match_separator(index: int, line: str, offset: float) -> Optional[Tuple[Row, float]]:
    trimmed = line.strip()
    if not trimmed.startswith(config.SEPARATOR_PREFIX):
        return None

    declared: Optional[float] = None
    offset_match = SEPARATOR_OFFSET_RE.search(trimmed)
    if offset_match:
        declared = float(parse_time_to_seconds(offset_match.group(1)))
        offset = declared

    row = SeparatorRow(
        index=index,
        label=trimmed.replace("---", "").strip(),
        declared_offset_s=declared,
        raw_line=line,
    )
    return row, offset


def _match_blank(index: int, line: str, offset: float) -> Optional[Tuple[Row, float]]:
    if line.strip():
        return None
    return RawRow(index=index, content=line, raw_line=line), offset


def _match_segment(index: int, line: str, offset: float) -> Optional[Tuple[Row, float]]:
    match = SEGMENT_RE.match(line)
    if not match:
        return None

    start_token, end_token, speaker, content = match.groups()
    start_s = parse_time_to_seconds(start_token) + offset
    end_s: Optional[float] = None
    if end_token:
        end_s = parse_time_to_seconds(end_token) + offset

    row = SegmentRow(
        index=index,
        start_s=float(start_s),
        end_s=float(end_s) if end_s is not None else None,
        speaker=speaker or "",
        content=content,
        offset_s=offset,
        raw_line=line,
    )
    return row, offset


def _match_raw(index: int, line: str, offset: float) -> Optional[Tuple[Row, float]]:
    return RawRow(index=index, content=line, raw_line=line), offset


MATCHERS: Tuple[Matcher, ...] = (
    _match_separator,
    _match_blank,
    _match_segment,
    _match_raw,
)
"""Ordered matchers; first match wins. _match_raw always matches."""


def classify_line(index: int, line: str, offset: float = 0.0) -> Tuple[Row, float]:
    """Classify one line given the offset active before it.

    Returns the row and the offset that applies to the following lines.
    """
    for matcher in MATCHERS:
        result = matcher(index, line, offset)
        if result is not None:
            return result
    # Unreachable: _match_raw accepts every line.
    return RawRow(index=index, content=line, raw_line=line), offset


def split_lines(text: str) -> List[str]:
    """Split buffer text into lines the way the buffer stores them."""
    if not text:
        return []
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def derive_rows(source: Union[str, Iterable[str]]) -> List[Row]:
    """Derive the full row list from buffer text or a sequence of lines.

    Args:
        source: Either the joined buffer text or its lines.

    Returns:
        One row per line, in line order, with offsets applied.
    """
    lines = split_lines(source) if isinstance(source, str) else list(source)

    rows: List[Row] = []
    offset = 0.0
    for index, line in enumerate(lines):
        row, offset = classify_line(index, line, offset)
        rows.append(row)
    return rows


def reserialize(rows: Iterable[Row]) -> List[str]:
    """Turn rows back into lines using each row's display line."""
    return [row.display_line for row in rows]
