"""Core transcript model: time codec, rows, classifier, editor, buffer.

WHY: The core package is the stable heart of the engine — the raw
buffer, the row projection derived from it, and the edits that flow back
into it. Formatters and outer surfaces only consume what lives here.

HOW: timecode.py converts between time strings and seconds, rows.py
defines the row dataclasses, classifier.py derives rows from lines,
editor.py maps table edits onto single lines, importer.py reduces CSV
back to lines, and buffer.py owns the lines themselves.

RULES:
- Row dataclasses are the contract — change with care
- Nothing in core writes files or talks to the network
- The buffer is the only mutable state; everything else is derived
"""

from transcript_studio.core.buffer import TranscriptBuffer
from transcript_studio.core.classifier import derive_rows

__all__ = ["TranscriptBuffer", "derive_rows"]
