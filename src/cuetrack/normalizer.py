# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Text normalization shared by the character and word aligners.

Both the script and each transcript update are reduced to lowercase
letters, digits and whitespace before they are compared.
"""


def is_word_char(ch: str) -> bool:
    """Return True for letters and digits (any script, not just ASCII)."""
    return ch.isalnum()


def normalize(text: str) -> str:
    """Lowercase text and keep only letters, digits and whitespace.

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    return ''.join(ch for ch in text.lower() if ch.isalnum() or ch.isspace())


def strip_word(word: str) -> str:
    """Lowercase a single token and drop everything but letters and digits.

    Examples:
        "Hello," -> "hello"
        "don't" -> "dont"
        "[pause]" -> "pause"
    """
    return ''.join(ch for ch in word.lower() if ch.isalnum())


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to a single space."""
    return ' '.join(text.split())


def is_annotation_word(word: str) -> bool:
    """Check whether a script token never needs to be spoken.

    Stage directions are written in square brackets ("[pause]"), and tokens
    with no letters or digits at all (emoji, a lone dash) can't be spoken
    either.
    """
    if word.startswith('[') and word.endswith(']'):
        return True
    return not any(ch.isalnum() for ch in word)
