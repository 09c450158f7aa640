#!/usr/bin/env python3
# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Example script showing how to profile the alignment engine.

Simulates a speaker reading a script in short utterances (growing partial
transcripts, with listening resumed between utterances), then runs the same
session under cProfile to show where matching time goes.
"""

import cProfile
import pstats
import sys
import time
from pathlib import Path

from cuetrack.session import AlignmentSession

SAMPLE_SCRIPT = """
This is a sample script for performance testing. [pause]
The quick brown fox jumps over the lazy dog.
She sells sea shells by the sea shore.
Peter Piper picked a peck of pickled peppers.
"""


def simulate_reading(session: AlignmentSession, chunk_size: int = 5) -> int:
    """Feed the whole script to the session as growing partials. Returns update count."""
    spoken = [w.text for w in session.words if not w.is_annotation]
    updates = 0
    for pos in range(0, len(spoken), chunk_size):
        if pos > 0:
            session.resume()
        chunk = spoken[pos:pos + chunk_size]
        for i in range(1, len(chunk) + 1):
            session.on_transcript_update(" ".join(chunk[:i]))
            updates += 1
    return updates


def main():
    """Run a profiled alignment session."""
    if len(sys.argv) > 1:
        script_path = Path(sys.argv[1])
        script_text = script_path.read_text(encoding="utf-8")
        source = str(script_path)
    else:
        script_text = SAMPLE_SCRIPT
        source = "inline"

    print("=" * 80)
    print("ALIGNMENT PERFORMANCE PROFILING")
    print("=" * 80)
    print(f"Script: {source}")

    session = AlignmentSession()
    session.start(script_text)
    print(f"Script loaded: {len(session.words)} words, {session.script_length} characters")
    print()

    start_time = time.perf_counter()
    updates = simulate_reading(session)
    elapsed = time.perf_counter() - start_time

    print(f"Updates: {updates}")
    print(f"Total time: {elapsed * 1000:.1f}ms ({elapsed * 1000 / max(1, updates):.3f}ms per update)")
    print(f"Final position: {session.recognized_char_count} / {session.script_length}")
    print(f"State: {session.state.value}")
    print()

    print("=" * 80)
    print("DETAILED cProfile ANALYSIS")
    print("=" * 80)

    session.start(script_text)
    profiler = cProfile.Profile()
    profiler.enable()
    simulate_reading(session)
    profiler.disable()

    stats = pstats.Stats(profiler)
    stats.sort_stats("cumulative").print_stats(20)


if __name__ == "__main__":
    main()
