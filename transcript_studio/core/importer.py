"""CSV import: turn an exported (or hand-made) table back into buffer lines.

WHY: Users export the table to CSV, fix it in a spreadsheet, and load it
back. The buffer only understands transcript lines, so the CSV has to be
reduced to lines the classifier can read again — without rejecting
files that are only roughly CSV.

HOW: Strip a leading BOM, normalise line endings, split, trim. Blank
lines, separator lines, and a header line near the top are skipped.
Each surviving line is read as one CSV record:
  - Time/Speaker/Content with a valid time range → rebuilt as a
    canonical segment line "[time] Speaker: content"
  - empty Time → the Content cell (a content-only row); content that is
    itself a separator line is dropped, because exported times are
    already offset-corrected and the separator would apply its offset
    a second time
  - anything else → the line passes through unchanged

RULES:
- Never raises on malformed input; unreadable records pass through
- Header detection: "time,speaker" (case-insensitive, quotes ignored)
  within the first CSV_HEADER_SCAN_LINES lines
- The result ends with "\\n" when non-empty, ready to append
"""

from __future__ import annotations

import csv
from typing import List, Optional

from transcript_studio import config
from transcript_studio.core.timecode import format_time_range, parse_time_range

_BOM = "\ufeff"


def _is_header(line: str, line_number: int) -> bool:
    if line_number >= config.CSV_HEADER_SCAN_LINES:
        return False
    return "time,speaker" in line.replace('"', "").lower()


def _parse_record(line: str) -> Optional[List[str]]:
    try:
        records = list(csv.reader([line]))
    except csv.Error:
        return None
    if len(records) != 1 or len(records[0]) != 3:
        return None
    return records[0]


def _convert_line(line: str) -> Optional[str]:
    """Map one CSV line to a buffer line, or None to drop it."""
    record = _parse_record(line)
    if record is None:
        return line

    time_cell, speaker, content = (cell.strip() for cell in record)

    if not time_cell:
        if not content or content.startswith(config.SEPARATOR_PREFIX):
            return None
        return content

    parsed = parse_time_range(time_cell)
    if parsed is None:
        return line

    start, end = parsed
    speaker_part = "{}: ".format(speaker) if speaker else ""
    return "[{}] {}{}".format(format_time_range(start, end), speaker_part, content)


def import_csv(file_text: str) -> str:
    """Convert CSV file text into a block of transcript lines.

    Args:
        file_text: The decoded file content.

    Returns:
        The lines to append to the buffer, joined with "\\n" and
        terminated by "\\n"; the empty string when nothing survived.
    """
    if file_text.startswith(_BOM):
        file_text = file_text[1:]
    lines = file_text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    kept: List[str] = []
    for line_number, raw in enumerate(lines):
        line = raw.strip()
        if not line or line.startswith(config.SEPARATOR_PREFIX) or _is_header(line, line_number):
            continue
        converted = _convert_line(line)
        if converted is not None:
            kept.append(converted)

    if not kept:
        return ""
    return "\n".join(kept) + "\n"
