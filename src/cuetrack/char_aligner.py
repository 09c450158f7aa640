# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Character-level alignment of a transcript against the remaining script.

Walks the script and the normalized transcript in lockstep, resynchronizing
over short runs of inserted or missing characters. A character that can't
be resynchronized is treated as a substitution so a single misheard
letter never stalls progress.
"""

from .normalizer import is_word_char, normalize

DEFAULT_LOOKAHEAD: int = 3


def _find_ahead(chars: str, start: int, target: str, lookahead: int) -> int | None:
    """Find target within lookahead positions after start (exclusive)."""
    max_skip: int = min(lookahead, len(chars) - start - 1)
    for skip in range(1, max_skip + 1):
        if chars[start + skip] == target:
            return start + skip
    return None


def char_level_match(source: str, spoken: str, lookahead: int = DEFAULT_LOOKAHEAD) -> int:
    """
    Count the script characters confidently matched by a transcript.

    Args:
        source: Remaining script text (from the match start offset)
        spoken: Raw transcript for the current utterance
        lookahead: How many characters to look ahead when resynchronizing

    Returns:
        Number of characters of source matched, relative to its start
    """
    src: str = source.lower()
    spk: str = normalize(spoken)

    si: int = 0
    ri: int = 0
    last_good: int = 0

    while si < len(src) and ri < len(spk):
        sc: str = src[si]
        rc: str = spk[ri]

        if not is_word_char(sc):
            si += 1
            continue
        if not is_word_char(rc):
            ri += 1
            continue

        if sc == rc:
            si += 1
            ri += 1
            last_good = si
            continue

        # Transcript has extra characters
        next_ri: int | None = _find_ahead(spk, ri, sc, lookahead)
        if next_ri is not None:
            ri = next_ri
            continue

        # Transcript dropped characters the script has
        next_si: int | None = _find_ahead(src, si, rc, lookahead)
        if next_si is not None:
            si = next_si
            continue

        # Substitution
        si += 1
        ri += 1
        last_good = si

    return last_good
