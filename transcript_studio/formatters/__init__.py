"""Export formatter registry — pluggable format hub.

WHY: The CLI and the HTTP API need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["csv_table"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and URL paths)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from transcript_studio.formatters.csv_table import CSVTableFormatter, export_csv
from transcript_studio.formatters.plain_text import PlainTextFormatter, export_text
from transcript_studio.formatters.srt_subtitles import SRTSubtitleFormatter, export_subtitle

if TYPE_CHECKING:
    from transcript_studio.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "plain_text": PlainTextFormatter,
    "csv_table": CSVTableFormatter,
    "srt_subtitles": SRTSubtitleFormatter,
}

__all__ = ["FORMATTERS", "export_csv", "export_subtitle", "export_text"]
