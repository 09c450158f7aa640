# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Fuzzy matching of single word tokens.

Speech recognition regularly truncates, extends or misspells words
("not" for "notch", "telepromter" for "teleprompter"). The matcher decides
whether two already-stripped tokens should be treated as the same word.
"""

from rapidfuzz.distance import Levenshtein


def shared_prefix_length(a: str, b: str) -> int:
    """Return the length of the common leading run of two strings."""
    count: int = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        count += 1
    return count


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance (insertions, deletions, substitutions all cost 1)."""
    return Levenshtein.distance(a, b)


def max_edit_distance(a: str, b: str) -> int:
    """Edit distance tolerated between two words, scaled by the shorter one."""
    shorter: int = min(len(a), len(b))
    if shorter <= 4:
        return 1
    if shorter <= 8:
        return 2
    return max(len(a), len(b)) // 3


def is_fuzzy_match(a: str, b: str) -> bool:
    """
    Decide whether two lowercased, alphanumeric-only tokens match.

    Rules are tried in order and the first one that applies wins:
    1. Identical strings match.
    2. An empty string never matches.
    3. One word is a prefix of the other ("not" ~ "notch").
    4. One word contains the other.
    5. A shared leading run of at least max(2, ceil(60% of the shorter
       word)), provided the shorter word has at least 2 characters.
    6. Edit distance within a tolerance that grows with word length.

    Args:
        a: First token
        b: Second token

    Returns:
        True if the tokens should be treated as the same spoken word
    """
    if a == b:
        return True
    if not a or not b:
        return False

    if a.startswith(b) or b.startswith(a):
        return True
    if a in b or b in a:
        return True

    shorter: int = min(len(a), len(b))
    # ceil(shorter * 3 / 5) without going through floats
    required_prefix: int = max(2, (3 * shorter + 4) // 5)
    if shorter >= 2 and shared_prefix_length(a, b) >= required_prefix:
        return True

    threshold: int = max_edit_distance(a, b)
    return Levenshtein.distance(a, b, score_cutoff=threshold) <= threshold


def tokens_match(a: str, b: str) -> bool:
    """Exact-or-fuzzy comparison used by the word aligner."""
    return a == b or is_fuzzy_match(a, b)
