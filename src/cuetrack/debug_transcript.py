# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Debug tool for replaying a transcript through an alignment session.

This CLI tool takes a transcript file and a script file, feeds every
transcript update to a session, and outputs how the highlight moved to help
debug alignment issues.

Transcript file format: one full transcript update per line. Lines starting
with '===' are metadata and skipped, except '=== resume ===', which resumes
listening from the current highlight (the start of a new utterance).
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal, TextIO

from . import debug_log
from .config import get_alignment_settings, get_recognition_settings, load_config
from .session import AlignmentSession, SessionConfig

RESUME_MARKER: str = "=== resume ==="

EventType = Literal["advance", "no_change", "resume"]


@dataclass
class ReplayEvent:
    """A single event during transcript replay."""
    transcript_line: int
    transcript: str
    char_offset: int
    word_index: int
    script_word: str
    event_type: EventType
    details: str = ""


def load_transcript(path: Path) -> list[str]:
    """Load transcript file and extract transcript lines.

    Filters out metadata lines (starting with '===') and empty lines, but
    keeps resume markers.
    """
    lines: list[str] = []
    with open(path, encoding='utf-8') as f:
        for line in f:
            stripped_line: str = line.strip()
            if stripped_line.lower() == RESUME_MARKER:
                lines.append(RESUME_MARKER)
                continue
            if stripped_line.startswith('===') or not stripped_line:
                continue
            lines.append(stripped_line)
    return lines


def load_script(path: Path) -> str:
    """Load script file content."""
    with open(path, encoding='utf-8') as f:
        return f.read()


def _word_at(session: AlignmentSession, offset: int) -> tuple[int, str]:
    """Index and text of the word at an offset ("<END>" past the end)."""
    index: int = session.parsed_script.word_index_at(offset)
    if index < len(session.words):
        return index, session.words[index].text
    return index, "<END>"


def _write_header(output: TextIO, session: AlignmentSession, title: str,
                  line_count: int) -> None:
    output.write("=" * 80 + "\n")
    output.write(f"{title}\n")
    output.write(f"Generated: {datetime.now().isoformat()}\n")
    output.write(f"Script words: {len(session.words)}\n")
    output.write(f"Script characters: {session.script_length}\n")
    output.write(f"Transcript lines: {line_count}\n")
    output.write("=" * 80 + "\n\n")

    output.write("SCRIPT WORDS:\n")
    output.write("-" * 40 + "\n")
    for word in session.words:
        flag: str = " (annotation)" if word.is_annotation else ""
        output.write(f"  [{word.index:4d}] @{word.char_offset:<5d} {word.text}{flag}\n")
    output.write("\n" + "=" * 80 + "\n\n")

    output.write("ALIGNMENT LOG:\n")
    output.write("-" * 40 + "\n")


def _write_summary(output: TextIO, session: AlignmentSession,
                   events: list[ReplayEvent]) -> None:
    output.write("\n" + "=" * 80 + "\n")
    output.write("SUMMARY:\n")
    output.write("-" * 40 + "\n")

    advances: list[ReplayEvent] = [e for e in events if e.event_type == "advance"]
    no_changes: list[ReplayEvent] = [e for e in events if e.event_type == "no_change"]
    resumes: list[ReplayEvent] = [e for e in events if e.event_type == "resume"]

    output.write(f"Updates processed: {len(advances) + len(no_changes)}\n")
    output.write(
        f"Final position: {session.recognized_char_count} / {session.script_length} "
        f"({session.progress:.0%})\n")
    output.write(f"Advances: {len(advances)}\n")
    output.write(f"No change: {len(no_changes)}\n")
    output.write(f"Resumes: {len(resumes)}\n")
    output.write(f"Finished: {'yes' if session.is_done else 'no'}\n")


def _apply_update(
    session: AlignmentSession,
    line_num: int,
    transcript: str,
    output: TextIO,
    verbose: bool
) -> ReplayEvent:
    """Feed one update and describe what happened."""
    position_before: int = session.recognized_char_count
    advanced: bool = session.on_transcript_update(transcript)
    position_after: int = session.recognized_char_count

    event_type: EventType = "advance" if advanced else "no_change"
    word_index, script_word = _word_at(session, position_after)
    details: str = f"pos: {position_before} -> {position_after}"

    if verbose or advanced:
        marker: str = "*" if advanced else " "
        output.write(
            f"  {marker} [{position_after:5d}] \"{transcript[-40:]}\" -> "
            f"\"{script_word}\" ({event_type})\n")

    return ReplayEvent(
        transcript_line=line_num,
        transcript=transcript,
        char_offset=position_after,
        word_index=word_index,
        script_word=script_word,
        event_type=event_type,
        details=details
    )


def _apply_resume(session: AlignmentSession, line_num: int, output: TextIO) -> ReplayEvent:
    session.resume()
    word_index, script_word = _word_at(session, session.recognized_char_count)
    output.write(f"\n--- Resume at {session.recognized_char_count} (\"{script_word}\") ---\n")
    return ReplayEvent(
        transcript_line=line_num,
        transcript="",
        char_offset=session.recognized_char_count,
        word_index=word_index,
        script_word=script_word,
        event_type="resume"
    )


def replay_transcript(
    transcript_lines: list[str],
    script_text: str,
    output: TextIO,
    verbose: bool = False,
    config: SessionConfig | None = None
) -> list[ReplayEvent]:
    """Replay transcript updates through a session and log events.

    Each line is one full transcript update for the current utterance.

    Args:
        transcript_lines: Lines of transcript text (and resume markers)
        script_text: The script content
        output: File handle to write log output
        verbose: If True, log every update. If False, only log advances.
        config: Session tuning (defaults if None)

    Returns:
        List of all replay events
    """
    session = AlignmentSession(config)
    session.start(script_text)
    events: list[ReplayEvent] = []

    _write_header(output, session, "TRANSCRIPT DEBUG LOG", len(transcript_lines))

    for line_num, line in enumerate(transcript_lines, start=1):
        if line == RESUME_MARKER:
            events.append(_apply_resume(session, line_num, output))
            continue
        events.append(_apply_update(session, line_num, line, output, verbose))

    _write_summary(output, session, events)
    return events


def replay_transcript_word_by_word(
    transcript_lines: list[str],
    script_text: str,
    output: TextIO,
    verbose: bool = False,
    config: SessionConfig | None = None
) -> list[ReplayEvent]:
    """Replay transcript word-by-word (simulating partial results).

    Each line is treated as one utterance: partial transcripts grow one word
    at a time, and listening resumes between lines just as a recognizer
    restarts after a pause in speech.

    Args:
        transcript_lines: Lines of transcript text
        script_text: The script content
        output: File handle to write log output
        verbose: If True, log every update. If False, only log advances.
        config: Session tuning (defaults if None)

    Returns:
        List of all replay events
    """
    session = AlignmentSession(config)
    session.start(script_text)
    events: list[ReplayEvent] = []

    _write_header(output, session, "TRANSCRIPT DEBUG LOG (WORD-BY-WORD MODE)",
                  len(transcript_lines))

    first_utterance: bool = True
    for line_num, line in enumerate(transcript_lines, start=1):
        if line == RESUME_MARKER:
            continue
        words: list[str] = line.split()
        if not words:
            continue

        if not first_utterance:
            events.append(_apply_resume(session, line_num, output))
        first_utterance = False
        output.write(f"\n--- Line {line_num} ---\n")

        for word_idx in range(len(words)):
            partial_transcript: str = " ".join(words[:word_idx + 1])
            events.append(_apply_update(
                session, line_num, partial_transcript, output, verbose))

    _write_summary(output, session, events)
    return events


def main() -> None:
    """CLI entry point for debug transcript tool."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Debug speech alignment by replaying a transcript through a session"
    )

    parser.add_argument(
        "transcript",
        type=Path,
        help="Path to transcript file"
    )

    parser.add_argument(
        "script",
        type=Path,
        help="Path to script file"
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output log file path (default: stdout)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every update, not just advances"
    )

    parser.add_argument(
        "-w", "--word-by-word",
        action="store_true",
        help="Process transcript word-by-word (simulates partial results)"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: ./.cuetrack.yaml)"
    )

    parser.add_argument(
        "--debug-log",
        action="store_true",
        help="Enable debug logging to ./logs/"
    )

    args: argparse.Namespace = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    if args.debug_log:
        debug_log.enable()

    # Validate inputs
    if not args.transcript.exists():
        print(
            f"Error: Transcript file not found: {args.transcript}", file=sys.stderr)
        sys.exit(1)

    if not args.script.exists():
        print(f"Error: Script file not found: {args.script}", file=sys.stderr)
        sys.exit(1)

    try:
        transcript_lines: list[str] = load_transcript(args.transcript)
        script_text: str = load_script(args.script)
    except OSError as e:
        print(f"Error loading files: {e}", file=sys.stderr)
        sys.exit(1)

    if not transcript_lines:
        print("Error: No transcript lines found", file=sys.stderr)
        sys.exit(1)

    config = load_config(args.config)
    session_config = SessionConfig.from_settings(
        get_alignment_settings(config), get_recognition_settings(config))

    replay = replay_transcript_word_by_word if args.word_by_word else replay_transcript

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            replay(transcript_lines, script_text, f, args.verbose, session_config)
        print(f"Debug log written to: {args.output}")
    else:
        replay(transcript_lines, script_text, sys.stdout, args.verbose, session_config)


if __name__ == "__main__":
    main()
