"""Exception hierarchy for the transcript engine.

Every error also subclasses ValueError so callers that only catch
ValueError (config errors, bad input) keep working.
"""


class TranscriptStudioError(ValueError):
    """Base class for errors raised by transcript_studio."""


class ExportError(TranscriptStudioError):
    """An export could not produce a meaningful file."""


class NoTimestampedSegmentsError(ExportError):
    """Subtitle export found no segment rows to turn into cues."""

    def __init__(self, message: str = "No valid timestamped segments found; cannot build a subtitle file.") -> None:
        super().__init__(message)


class BufferLockedError(TranscriptStudioError):
    """The buffer is streaming and only accepts appends."""
