# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Word-level alignment of a transcript against the remaining script.

Handles the failure modes the character aligner can't: whole-word
substitutions, hallucinated extra words, words the recognizer dropped,
and stage directions that are never spoken.
"""

from .fuzzy_matcher import tokens_match
from .normalizer import is_annotation_word, strip_word

DEFAULT_LOOKAHEAD: int = 3


def _split_on_spaces(text: str) -> list[str]:
    """Split on single spaces, dropping empty tokens."""
    return [w for w in text.split(' ') if w]


def _word_span(words: list[str], index: int) -> int:
    """Characters a word occupies, including the following space if any."""
    span: int = len(words[index])
    if index < len(words) - 1:
        span += 1
    return span


def word_level_match(source: str, spoken: str, lookahead: int = DEFAULT_LOOKAHEAD) -> int:
    """
    Count the script characters matched by a transcript, word by word.

    The returned count includes the original punctuation of matched script
    words and the spaces between them, so it can be added directly to a
    character offset.

    Args:
        source: Remaining script text (from the match start offset)
        spoken: Raw transcript for the current utterance
        lookahead: How many words to look ahead when resynchronizing

    Returns:
        Number of characters of source matched, relative to its start
    """
    source_words: list[str] = _split_on_spaces(source)
    spoken_words: list[str] = _split_on_spaces(spoken.lower())
    if not spoken_words:
        return 0

    si: int = 0
    ri: int = 0
    matched: int = 0

    while si < len(source_words) and ri < len(spoken_words):
        # Stage directions and emoji are never spoken
        if is_annotation_word(source_words[si]):
            matched += _word_span(source_words, si)
            si += 1
            continue

        src_word: str = strip_word(source_words[si])
        spk_word: str = strip_word(spoken_words[ri])

        if tokens_match(src_word, spk_word):
            matched += _word_span(source_words, si)
            si += 1
            ri += 1
            continue

        # Recognizer inserted extra words: look ahead in the transcript
        max_spoken_skip: int = min(lookahead, len(spoken_words) - ri - 1)
        found: bool = False
        for skip in range(1, max_spoken_skip + 1):
            if tokens_match(src_word, strip_word(spoken_words[ri + skip])):
                ri += skip
                found = True
                break
        if found:
            continue

        # Recognizer missed words the speaker said: look ahead in the script
        max_source_skip: int = min(lookahead, len(source_words) - si - 1)
        for skip in range(1, max_source_skip + 1):
            if tokens_match(strip_word(source_words[si + skip]), spk_word):
                for s in range(skip):
                    matched += len(source_words[si + s]) + 1
                si += skip
                found = True
                break
        if found:
            continue

        # Punctuation-only token
        if not src_word:
            matched += _word_span(source_words, si)
            si += 1
            continue

        # Nothing lines up yet; wait for more transcript
        ri += 1

    # Don't let a closing stage direction block the end of the script
    while si < len(source_words) and is_annotation_word(source_words[si]):
        matched += _word_span(source_words, si)
        si += 1

    return matched
