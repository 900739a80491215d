"""Command-line interface for Transcript Studio.

WHY: Users need a simple way to turn a saved transcript into subtitle,
table, and text files from the terminal, without the HTTP API. The CLI
wires together file validation, buffer loading (raw text or CSV import),
row derivation, pluggable formatter output, and file saving behind a
single command.

HOW: Uses argparse to accept an input file, an optional start time for
the recording, output format selection, and output directory. A .txt
input is streamed into a TranscriptBuffer as one source; a .csv input
goes through the CSV importer. Status messages go to stderr; output
files are saved next to the source (or to --output-dir).

RULES:
- Positional argument: input transcript path (.txt or .csv)
- --formats: comma-separated formatter keys (default: all registered)
- --start-time: absolute start of the recording (MM:SS or HH:MM:SS)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-transcript-2.csv)
- Status output goes to stderr (not stdout)
- A formatter that cannot export (e.g. SRT without segments) is reported,
  the remaining formats are still saved, and the exit code is 1
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from transcript_studio.config import SUPPORTED_INPUT_FORMATS
from transcript_studio.core.buffer import TranscriptBuffer
from transcript_studio.exceptions import ExportError
from transcript_studio.formatters import FORMATTERS
from transcript_studio.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the converter multiple times on the same file.
    Overwriting previous output would lose work. Numeric suffixes
    (-transcript-2.csv) prevent data loss.

    HOW: Check if {stem}{suffix} exists. If so, increment a counter
    and insert it before the file extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. interview-transcript.csv)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. interview-transcript-2.csv, interview-2.srt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk as UTF-8 and return its path."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def load_buffer(input_path: Path, start_time: str = "00:00") -> TranscriptBuffer:
    """Load a transcript file into a fresh buffer.

    A .csv file goes through the CSV importer; any other file is treated
    as raw transcript text recorded from ``start_time``.
    """
    text = input_path.read_text(encoding="utf-8", errors="replace")
    buffer = TranscriptBuffer()

    if input_path.suffix.lower() == ".csv":
        buffer.import_csv(text, source_name=input_path.name)
        return buffer

    if text.startswith("\ufeff"):
        text = text[1:]
    buffer.begin_source(input_path.name, start_time)
    buffer.append(text)
    buffer.end_stream()
    return buffer


def _parse_format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())

    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            print(
                "Error: Unknown format '{}'. Available formats: {}".format(key, available),
                file=sys.stderr,
            )
            sys.exit(1)
    return format_keys


def run(args: argparse.Namespace) -> int:
    """Execute the conversion and return the process exit code."""
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        return 1

    ext = input_path.suffix.lower()
    if ext not in SUPPORTED_INPUT_FORMATS:
        print(
            "Error: Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_INPUT_FORMATS))
            ),
            file=sys.stderr,
        )
        return 1

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
        return 1

    format_keys = _parse_format_keys(args.formats)

    _status("Loading {}...".format(input_path.name))
    buffer = load_buffer(input_path, args.start_time)
    rows = buffer.rows
    _status("  {} rows, {} timestamped segments".format(len(rows), len(buffer.segments)))

    _status("Formatting output...")
    saved_files: List[Path] = []
    failed = False
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        try:
            outputs = formatter.format(rows)
        except ExportError as e:
            print("Error: {}: {}".format(formatter.name, e), file=sys.stderr)
            failed = True
            continue
        for output in outputs:
            saved_path = _save_output(output, input_path.stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    for f in saved_files:
        _status("  {}".format(f.name))

    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="transcript_studio",
        description="Normalize a time-coded transcript and export it as "
                    "plain text, CSV, and SRT subtitles.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the transcript (.txt) or an exported table (.csv).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--start-time",
        default="00:00",
        help="Absolute start time of the recording, MM:SS or HH:MM:SS "
             "(default: %(default)s). Ignored for CSV input.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
