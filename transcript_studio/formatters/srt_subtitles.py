"""SRT subtitle formatter with end-time inference for open-ended segments.

WHY: Streaming transcripts often give only a start time per utterance
("[01:05] Alice: ..."). A subtitle file needs a start AND an end for
every cue, and cues must never run backwards. The end times that the
transcript leaves open are therefore inferred here, at export time —
never while parsing.

HOW: infer_end_times() walks the segment rows in buffer order:
  1. an explicit end time is used as-is
  2. otherwise the next segment's start bounds the cue, capped at
     start + max_inferred_duration (7s by default), but only when the
     next segment starts later than this one
  3. with no usable next segment, end = start + default_duration (3s)
  4. any end that is not after its start becomes start + min_duration (1s)
export_subtitle() renders each cue as index, time range, text, blank line.

RULES:
- Only segment rows become cues; "i" counts segments, not all rows
- Cue indices are 1-based
- Text line: "Speaker: content", speaker prefix omitted when empty
- Zero segments raises NoTimestampedSegmentsError instead of returning
  an empty file
- Output suffix: ".srt"; media type: "application/x-subrip"
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from transcript_studio import config
from transcript_studio.core.rows import Row, SegmentRow
from transcript_studio.core.timecode import format_seconds_to_subtitle_time
from transcript_studio.exceptions import NoTimestampedSegmentsError
from transcript_studio.formatters.base import BaseFormatter, FormatterOutput


def infer_end_times(
    segments: Sequence[SegmentRow],
    max_inferred_duration: Optional[float] = None,
    default_duration: Optional[float] = None,
    min_duration: Optional[float] = None,
) -> List[float]:
    """Return one end time per segment, filling in the missing ones.

    Args:
        segments: Segment rows in buffer order.
        max_inferred_duration: Cap when bounding by the next segment.
        default_duration: Duration when no next segment bounds the cue.
        min_duration: Duration forced when end would not be after start.

    Returns:
        End times in seconds, each strictly greater than its start.
    """
    if max_inferred_duration is None:
        max_inferred_duration = config.SUBTITLE_MAX_INFERRED_DURATION_S
    if default_duration is None:
        default_duration = config.SUBTITLE_DEFAULT_DURATION_S
    if min_duration is None:
        min_duration = config.SUBTITLE_MIN_DURATION_S

    ends: List[float] = []
    for i, segment in enumerate(segments):
        start = segment.start_s
        end = segment.end_s

        if end is None and i + 1 < len(segments):
            next_start = segments[i + 1].start_s
            if next_start > start:
                end = min(next_start, start + max_inferred_duration)

        if end is None:
            end = start + default_duration

        if end <= start:
            end = start + min_duration

        ends.append(end)
    return ends


def export_subtitle(
    rows: Sequence[Row],
    max_inferred_duration: Optional[float] = None,
    default_duration: Optional[float] = None,
    min_duration: Optional[float] = None,
) -> str:
    """Render the segment rows of ``rows`` as SRT text.

    Raises:
        NoTimestampedSegmentsError: If ``rows`` holds no segment rows.
    """
    segments = [row for row in rows if isinstance(row, SegmentRow)]
    if not segments:
        raise NoTimestampedSegmentsError()

    ends = infer_end_times(
        segments,
        max_inferred_duration=max_inferred_duration,
        default_duration=default_duration,
        min_duration=min_duration,
    )

    blocks: List[str] = []
    for counter, (segment, end) in enumerate(zip(segments, ends), 1):
        speaker_part = "{}: ".format(segment.speaker) if segment.speaker else ""
        blocks.append("{}\n{} --> {}\n{}{}\n\n".format(
            counter,
            format_seconds_to_subtitle_time(segment.start_s),
            format_seconds_to_subtitle_time(end),
            speaker_part,
            segment.content,
        ))
    return "".join(blocks)


class SRTSubtitleFormatter(BaseFormatter):
    """Formatter that produces one SRT file from the segment rows.

    The inference constants default to the values in config and can be
    overridden per instance.
    """

    def __init__(
        self,
        max_inferred_duration: Optional[float] = None,
        default_duration: Optional[float] = None,
        min_duration: Optional[float] = None,
    ) -> None:
        self.max_inferred_duration = max_inferred_duration
        self.default_duration = default_duration
        self.min_duration = min_duration

    @property
    def name(self) -> str:
        return "SRT Subtitles"

    @property
    def suffix(self) -> str:
        return ".srt"

    def format(self, rows: Sequence[Row]) -> List[FormatterOutput]:
        content = export_subtitle(
            rows,
            max_inferred_duration=self.max_inferred_duration,
            default_duration=self.default_duration,
            min_duration=self.min_duration,
        )
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=content,
                media_type="application/x-subrip",
                default_prefix="subtitle",
            )
        ]
