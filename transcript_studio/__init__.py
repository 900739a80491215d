"""Transcript Studio — transcript normalization and subtitle export engine.

WHY: A streaming transcription service produces one growing, human-readable
transcript that may stitch several recordings together, each with its own
clock. Editors need that text as a clean, editable table with absolute
times, and as files other tools accept (plain text, CSV, SRT).

HOW: Three layers — the raw buffer (core.buffer), the row projection
derived from it (core.classifier), and pluggable formatters that turn
rows into files. The CLI and the HTTP API are thin shells around them.

RULES:
- The raw buffer is the single source of truth; rows are always re-derived
- All formatters consume the same row list
- Adding a new export format = one new formatter module, no core changes
"""

__version__ = "0.1.0"
