"""Shared test fixtures for the transcript_studio test suite.

WHY: Several test modules need the same realistic transcript: two
concatenated recordings, the second declaring its own start offset,
with open-ended and closed segments, blank lines, and free text.
Centralizing fixtures here avoids duplication and keeps every module
testing against the same buffer.

HOW: Pytest fixtures provide the raw transcript text, its lines, and a
TranscriptBuffer loaded with it.

RULES:
- SAMPLE_TRANSCRIPT is what a streaming producer writes, including the
  separator line the buffer inserts for a second recording.
- The second recording starts at 01:30, so its "[00:10-00:20]" segment
  derives as 100s-110s.
"""

from typing import List

import pytest

from transcript_studio.core.buffer import TranscriptBuffer


SAMPLE_LINES: List[str] = [
    "[00:00-00:04] Alice: Welcome to the show.",
    "[00:05] Bob: Thanks for having me.",
    "[00:40] Alice: Let's begin.",
    "",
    "Free text the producer wrote without a timestamp",
    "",
    "--- [Continued file: part2.mp3 | Start: 01:30] ---",
    "",
    "[00:10-00:20] Alice: Second part starts here.",
    "[00:25] Closing words without a speaker",
]

SAMPLE_TRANSCRIPT = "\n".join(SAMPLE_LINES)


@pytest.fixture
def sample_lines():
    """The sample transcript as buffer lines."""
    return list(SAMPLE_LINES)


@pytest.fixture
def sample_text():
    """The sample transcript as one string."""
    return SAMPLE_TRANSCRIPT


@pytest.fixture
def sample_buffer():
    """A finished (not streaming) buffer holding the sample transcript."""
    return TranscriptBuffer(SAMPLE_TRANSCRIPT)
