"""CSV formatter: the editable table as a spreadsheet-friendly file.

WHY: Users review and correct transcripts in spreadsheet tools, then load
the file back through the CSV importer. The export has to open cleanly in
Excel (hence the BOM) and keep non-segment rows in place so the table
survives a round trip.

HOW: Writes a byte-order mark and an unquoted "Time,Speaker,Content"
header, then one record per visible row through csv.writer with
QUOTE_ALL:
  segment   → display time, speaker, content
  separator → "", "", original line
  raw       → "", "", line text
Blank raw rows are skipped.

RULES:
- Every field is double-quote-wrapped, internal quotes doubled
- Line terminator is "\\n"
- Output suffix: "-transcript.csv"
- Media type: "text/csv"
"""

from __future__ import annotations

import csv
import io
from typing import List, Sequence

from transcript_studio import config
from transcript_studio.core.rows import Row, SegmentRow, SeparatorRow, is_visible
from transcript_studio.formatters.base import BaseFormatter, FormatterOutput

_BOM = "\ufeff"


def export_csv(rows: Sequence[Row]) -> str:
    """Render ``rows`` as BOM-prefixed CSV text."""
    out = io.StringIO()
    out.write(_BOM)
    out.write(",".join(config.CSV_HEADER) + "\n")

    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        if not is_visible(row):
            continue
        if isinstance(row, SegmentRow):
            writer.writerow([row.time, row.speaker, row.content])
        elif isinstance(row, SeparatorRow):
            writer.writerow(["", "", row.raw_line])
        else:
            writer.writerow(["", "", row.content])

    return out.getvalue()


class CSVTableFormatter(BaseFormatter):
    """Formatter that produces the Time/Speaker/Content table."""

    @property
    def name(self) -> str:
        return "CSV Table"

    @property
    def suffix(self) -> str:
        return "-transcript.csv"

    def format(self, rows: Sequence[Row]) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=export_csv(rows),
                media_type="text/csv",
            )
        ]
