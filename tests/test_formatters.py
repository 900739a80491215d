"""Unit tests for all formatter modules.

WHY: Each formatter turns the derived rows into a downloadable file.
A wrong quote, a missing BOM, or a backwards subtitle cue produces files
that spreadsheet tools mangle or video players reject.

HOW: Tests run each formatter against the shared sample buffer from
conftest.py and against small hand-built row lists:
  - Plain text: display lines joined in order, offsets applied
  - CSV: BOM, unquoted header, QUOTE_ALL records, blank rows skipped
  - SRT: end-time inference (cap, default, minimum), cue layout, errors

RULES:
- Expected values are written out literally, never recomputed with the
  code under test.
"""

import datetime

import pytest

from transcript_studio.core.classifier import derive_rows
from transcript_studio.exceptions import ExportError, NoTimestampedSegmentsError
from transcript_studio.formatters import FORMATTERS, export_csv, export_subtitle, export_text
from transcript_studio.formatters.base import BaseFormatter, FormatterOutput
from transcript_studio.formatters.csv_table import CSVTableFormatter
from transcript_studio.formatters.plain_text import PlainTextFormatter
from transcript_studio.formatters.srt_subtitles import SRTSubtitleFormatter, infer_end_times


def _srt_blocks(srt_content):
    """Split SRT text into (index, time line, text) tuples."""
    blocks = []
    for block in srt_content.split("\n\n"):
        if not block:
            continue
        index, times, text = block.split("\n", 2)
        blocks.append((index, times, text))
    return blocks


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:

    def test_keys(self):
        assert set(FORMATTERS) == {"plain_text", "csv_table", "srt_subtitles"}

    def test_values_are_formatter_classes(self):
        for formatter_cls in FORMATTERS.values():
            assert issubclass(formatter_cls, BaseFormatter)
            assert formatter_cls().name

    def test_default_filename_keeps_extension(self):
        output = FormatterOutput(suffix="-transcript.csv", content="", media_type="text/csv")
        assert output.default_filename(datetime.date(2026, 3, 4)) == "transcription_2026-03-04.csv"

    def test_subtitle_default_filename(self):
        output = SRTSubtitleFormatter().format(derive_rows("[00:01] hi"))[0]
        assert output.default_filename(datetime.date(2026, 3, 4)) == "subtitle_2026-03-04.srt"


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


class TestPlainText:

    def test_sample_transcript(self, sample_buffer):
        assert export_text(sample_buffer.rows) == "\n".join([
            "[00:00 - 00:04] Alice: Welcome to the show.",
            "[00:05] Bob: Thanks for having me.",
            "[00:40] Alice: Let's begin.",
            "",
            "Free text the producer wrote without a timestamp",
            "",
            "--- [Continued file: part2.mp3 | Start: 01:30] ---",
            "",
            "[01:40 - 01:50] Alice: Second part starts here.",
            "[01:55] Closing words without a speaker",
        ])

    def test_canonical_buffer_is_unchanged(self):
        text = "[00:05] A: one\n\nloose text\n[01:00 - 01:02] two"
        assert export_text(derive_rows(text)) == text

    def test_no_trailing_newline(self):
        assert export_text(derive_rows("[00:05] A: one\n")) == "[00:05] A: one\n"
        assert export_text(derive_rows("[00:05] A: one")) == "[00:05] A: one"

    def test_empty(self):
        assert export_text([]) == ""

    def test_formatter_output(self, sample_buffer):
        outputs = PlainTextFormatter().format(sample_buffer.rows)
        assert len(outputs) == 1
        assert outputs[0].suffix == "-transcript.txt"
        assert outputs[0].media_type == "text/plain"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


class TestCSV:

    def test_sample_transcript(self, sample_buffer):
        assert export_csv(sample_buffer.rows) == (
            "\ufeffTime,Speaker,Content\n"
            '"00:00 - 00:04","Alice","Welcome to the show."\n'
            '"00:05","Bob","Thanks for having me."\n'
            '"00:40","Alice","Let\'s begin."\n'
            '"","","Free text the producer wrote without a timestamp"\n'
            '"","","--- [Continued file: part2.mp3 | Start: 01:30] ---"\n'
            '"01:40 - 01:50","Alice","Second part starts here."\n'
            '"01:55","","Closing words without a speaker"\n'
        )

    def test_starts_with_bom_and_header(self):
        assert export_csv([]) == "\ufeffTime,Speaker,Content\n"

    def test_quotes_are_doubled(self):
        content = export_csv(derive_rows('[00:01] A: she said "hi", then left'))
        assert content.splitlines()[1] == '"00:01","A","she said ""hi"", then left"'

    def test_blank_rows_skipped(self):
        content = export_csv(derive_rows("[00:01] A: x\n\n   \n[00:02] B: y"))
        assert len(content.splitlines()) == 3

    def test_formatter_output(self, sample_buffer):
        output = CSVTableFormatter().format(sample_buffer.rows)[0]
        assert output.suffix == "-transcript.csv"
        assert output.media_type == "text/csv"


# ---------------------------------------------------------------------------
# SRT
# ---------------------------------------------------------------------------


class TestInferEndTimes:

    def test_sample_transcript(self, sample_buffer):
        assert infer_end_times(sample_buffer.segments) == [4, 12, 47, 110, 118]

    def test_next_start_bounds_cue(self):
        segments = derive_rows("[00:10] a\n[00:12] b")
        assert infer_end_times(segments)[0] == 12

    def test_cap_applies(self):
        segments = derive_rows("[00:10] a\n[00:40] b")
        assert infer_end_times(segments) == [17, 43]

    def test_last_segment_gets_default(self):
        assert infer_end_times(derive_rows("[00:10] a")) == [13]

    def test_same_start_falls_back_to_default(self):
        segments = derive_rows("[00:00] A: hello\n[00:00] A: hi")
        assert infer_end_times(segments) == [3, 3]

    def test_zero_length_ends_get_minimum(self):
        segments = derive_rows("[00:00-00:00] A: hello\n[00:00-00:00] A: hi")
        assert infer_end_times(segments) == [1, 1]

    def test_earlier_next_start_is_ignored(self):
        segments = derive_rows("[00:30] a\n[00:10] b")
        assert infer_end_times(segments) == [33, 13]

    def test_explicit_end_used(self):
        segments = derive_rows("[00:10-00:30] a\n[00:12] b")
        assert infer_end_times(segments)[0] == 30

    def test_backwards_explicit_end_gets_minimum(self):
        segments = derive_rows("[00:10-00:05] a")
        assert infer_end_times(segments) == [11]

    def test_constants_are_configurable(self):
        segments = derive_rows("[00:10] a\n[00:40] b\n[00:40-00:40] c")
        ends = infer_end_times(
            segments, max_inferred_duration=20, default_duration=5, min_duration=2,
        )
        assert ends == [30, 45, 42]

    def test_every_end_after_start(self, sample_buffer):
        segments = sample_buffer.segments
        for segment, end in zip(segments, infer_end_times(segments)):
            assert end > segment.start_s


class TestExportSubtitle:

    def test_sample_transcript(self, sample_buffer):
        blocks = _srt_blocks(export_subtitle(sample_buffer.rows))
        assert blocks == [
            ("1", "00:00:00,000 --> 00:00:04,000", "Alice: Welcome to the show."),
            ("2", "00:00:05,000 --> 00:00:12,000", "Bob: Thanks for having me."),
            ("3", "00:00:40,000 --> 00:00:47,000", "Alice: Let's begin."),
            ("4", "00:01:40,000 --> 00:01:50,000", "Alice: Second part starts here."),
            ("5", "00:01:55,000 --> 00:01:58,000", "Closing words without a speaker"),
        ]

    def test_block_layout(self):
        assert export_subtitle(derive_rows("[00:01] A: hi")) == (
            "1\n00:00:01,000 --> 00:00:04,000\nA: hi\n\n"
        )

    def test_non_segment_rows_do_not_count(self):
        rows = derive_rows("intro\n\n[00:01] A: hi")
        assert export_subtitle(rows).startswith("1\n")

    def test_no_segments_raises(self):
        with pytest.raises(NoTimestampedSegmentsError):
            export_subtitle(derive_rows("just notes\n\n"))

    def test_no_segments_is_an_export_error(self):
        with pytest.raises(ExportError, match="No valid timestamped segments"):
            export_subtitle([])

    def test_formatter_constants(self):
        formatter = SRTSubtitleFormatter(default_duration=10)
        output = formatter.format(derive_rows("[00:01] A: hi"))[0]
        assert "00:00:01,000 --> 00:00:11,000" in output.content
        assert output.suffix == ".srt"
        assert output.media_type == "application/x-subrip"
