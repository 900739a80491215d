"""Configuration constants, marker strings, and .env loading.

WHY: Centralizes every tunable value of the engine so it is easy to find,
update, and override. The subtitle inference durations, the segment
boundary marker, and the server limits are plain data — not buried in
logic — so both humans and coding agents can modify them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with string defaults.
The _env_float/_env_int helpers fall back to the default when the
environment holds something that is not a number.

RULES:
- SEPARATOR_PREFIX marks the start of a new concatenated recording
- Subtitle durations are float seconds (7s cap, 3s default, 1s minimum)
- CSV_HEADER_SCAN_LINES bounds where a CSV header line is recognised
- SUPPORTED_INPUT_FORMATS lists accepted transcript file extensions
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Transcript line markers
# ---------------------------------------------------------------------------

SEPARATOR_PREFIX = os.getenv("TRANSCRIPT_SEPARATOR_PREFIX", "--- [")
"""A trimmed line starting with this text is a recording boundary."""

SEPARATOR_TEMPLATE = "--- [{label}: {name} | Start: {start}] ---"
"""Boundary line written by the buffer when a new source begins."""

CONTINUED_SOURCE_LABEL = "Continued file"
IMPORTED_SOURCE_LABEL = "Imported"

# ---------------------------------------------------------------------------
# Subtitle end-time inference
# ---------------------------------------------------------------------------

SUBTITLE_MAX_INFERRED_DURATION_S = _env_float("SUBTITLE_MAX_INFERRED_DURATION_S", 7.0)
"""Cap on an inferred duration when the next segment starts far away."""

SUBTITLE_DEFAULT_DURATION_S = _env_float("SUBTITLE_DEFAULT_DURATION_S", 3.0)
"""Duration used when no following segment can bound the end time."""

SUBTITLE_MIN_DURATION_S = _env_float("SUBTITLE_MIN_DURATION_S", 1.0)
"""Duration forced onto cues whose end would not be after their start."""

# ---------------------------------------------------------------------------
# CSV import / export
# ---------------------------------------------------------------------------

CSV_HEADER = ("Time", "Speaker", "Content")
CSV_HEADER_SCAN_LINES = _env_int("CSV_HEADER_SCAN_LINES", 5)
"""A header line is only recognised within this many leading lines."""

# ---------------------------------------------------------------------------
# Input files and server limits
# ---------------------------------------------------------------------------

SUPPORTED_INPUT_FORMATS: set[str] = {".txt", ".csv"}
"""Transcript file extensions accepted by the CLI (lowercase, with dot)."""

SESSION_TTL_SECONDS = _env_int("SESSION_TTL_SECONDS", 3600)
MAX_SESSIONS = _env_int("MAX_SESSIONS", 100)
API_HOST = os.getenv("TRANSCRIPT_API_HOST", "0.0.0.0")
API_PORT = _env_int("TRANSCRIPT_API_PORT", 8000)
