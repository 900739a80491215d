"""Time codec: display time strings, seconds, and subtitle timestamps.

WHY: Every other component speaks seconds internally but reads and writes
human time strings. Keeping the conversions in one place guarantees the
classifier, the editor, and the exporters agree on the same grammar.

HOW: Pure functions. Parsing splits on ":" and maps the components to
int; formatting floors to whole hours/minutes/seconds. The subtitle
formatter always emits the fixed-width HH:MM:SS,mmm form.

RULES:
- Accepted grammar: MM:SS or HH:MM:SS (TIME_TOKEN below)
- Malformed input parses to 0 — never raises
- Display format omits hours when they are 0 (e.g. "05:07", "01:02:03")
- Subtitle format never omits hours (e.g. "00:05:07,250")
"""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple

TIME_TOKEN = r"[0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?"
"""Regex fragment for a single MM:SS or HH:MM:SS token."""

_TIME_RANGE_RE = re.compile(
    r"^\s*(" + TIME_TOKEN + r")(?:\s*-?\s*(" + TIME_TOKEN + r"))?\s*$"
)


def parse_time_to_seconds(value: str) -> int:
    """Parse ``MM:SS`` or ``HH:MM:SS`` into whole seconds.

    Returns 0 for an empty string, a non-numeric or non-ASCII component,
    or any component count other than two or three.
    """
    if not value or not value.isascii():
        return 0
    try:
        parts = [int(p) for p in value.split(":")]
    except ValueError:
        return 0

    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    return 0


def format_seconds_to_time(seconds: float) -> str:
    """Format seconds as ``MM:SS``, or ``HH:MM:SS`` once an hour is reached."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(math.floor(seconds % 60))

    if hours > 0:
        return "{:02d}:{:02d}:{:02d}".format(hours, minutes, secs)
    return "{:02d}:{:02d}".format(minutes, secs)


def format_seconds_to_subtitle_time(seconds: float) -> str:
    """Convert seconds to SRT timestamp format: HH:MM:SS,mmm"""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    millis = int((seconds % 1) * 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def format_time_range(start_s: float, end_s: Optional[float] = None) -> str:
    """Render a row's display time: ``start`` or ``start - end``."""
    if end_s is None:
        return format_seconds_to_time(start_s)
    return "{} - {}".format(format_seconds_to_time(start_s), format_seconds_to_time(end_s))


def parse_time_range(value: str) -> Optional[Tuple[int, Optional[int]]]:
    """Parse a user-typed time range such as ``01:40``, ``01:40-01:50``
    or ``01:40 - 01:50``.

    Returns ``(start, end)`` in seconds with ``end`` None when only one
    token was given, or None when the value is not a time range at all.
    """
    match = _TIME_RANGE_RE.match(value or "")
    if not match:
        return None
    start = parse_time_to_seconds(match.group(1))
    end = parse_time_to_seconds(match.group(2)) if match.group(2) else None
    return start, end
