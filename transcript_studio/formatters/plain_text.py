"""Plain text transcript formatter: the buffer as the table shows it.

WHY: Users copy or download the transcript as text for review, archival,
and pasting elsewhere. The text must carry the normalized times, so each
segment line is re-emitted with its offset-corrected bracket.

HOW: Every row contributes its display line — segments their rebuilt
"[time] Speaker: content" line, separators and raw text their original
line — joined with "\\n" in buffer order.

RULES:
- One output line per row, including blank lines
- No trailing newline is added
- Output suffix: "-transcript.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List, Sequence

from transcript_studio.core.rows import Row
from transcript_studio.formatters.base import BaseFormatter, FormatterOutput


def export_text(rows: Sequence[Row]) -> str:
    """Join the display lines of ``rows`` with newlines."""
    return "\n".join(row.display_line for row in rows)


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces the normalized transcript text."""

    @property
    def name(self) -> str:
        return "Plain Text"

    @property
    def suffix(self) -> str:
        return "-transcript.txt"

    def format(self, rows: Sequence[Row]) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=export_text(rows),
                media_type="text/plain",
            )
        ]
