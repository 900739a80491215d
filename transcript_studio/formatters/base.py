"""Abstract base formatter and output container.

WHY: Every export format consumes the same derived row list but produces
different file content. This base class enforces a consistent interface
so the CLI and the HTTP API can work with any formatter generically.

HOW: BaseFormatter is an ABC with two requirements — a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list so a format may produce several files;
  every current formatter returns exactly one
- ``suffix`` starts with a hyphen or dot, e.g. ``"-transcript.csv"``
- The caller is responsible for prepending the source filename stem
- Formatters never mutate rows
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from transcript_studio.core.rows import Row


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-transcript.csv"`` → ``"interview-transcript.csv"``.
        content: The file content as a string.
        media_type: MIME type for the content, e.g. ``"text/csv"``.
        default_prefix: Name prefix used when there is no source stem,
                        e.g. ``"transcription"`` → ``"transcription_2026-10-19.csv"``.
    """

    suffix: str
    content: str
    media_type: str
    default_prefix: str = "transcription"

    def default_filename(self, today: Optional[datetime.date] = None) -> str:
        """Dated download name used when the transcript has no source file."""
        day = (today or datetime.date.today()).isoformat()
        extension = self.suffix[self.suffix.rfind("."):] if "." in self.suffix else ""
        return "{}_{}{}".format(self.default_prefix, day, extension)


class BaseFormatter(ABC):
    """Abstract base for all export formatters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SRT Subtitles'."""

    @property
    @abstractmethod
    def suffix(self) -> str:
        """File suffix of the (first) output file."""

    @abstractmethod
    def format(self, rows: Sequence[Row]) -> List[FormatterOutput]:
        """Convert derived rows into one or more output files.

        Args:
            rows: The full row list in buffer order, as returned by
                  derive_rows().

        Returns:
            List of FormatterOutput objects.
        """
