# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Script word table.

A script is reduced to single-space separated words so that every word has
a stable character offset. The rendering side uses these offsets to decide
which words to highlight and to turn a tap on a word into a jump target.
"""

from bisect import bisect_right
from dataclasses import dataclass, field

from .normalizer import collapse_whitespace, is_annotation_word, normalize


@dataclass(frozen=True)
class ScriptWord:
    """A single whitespace-delimited token of the script."""
    index: int  # Position in the word list
    text: str  # Raw text including punctuation (e.g. "world,")
    char_offset: int  # Offset of the first character in the collapsed script
    is_annotation: bool = False  # [stage direction] or emoji, never spoken

    @property
    def end_offset(self) -> int:
        """Offset one past the last character of the word."""
        return self.char_offset + len(self.text)

    def __repr__(self) -> str:
        flag: str = " annotation" if self.is_annotation else ""
        return f"ScriptWord({self.index}@{self.char_offset}: '{self.text}'{flag})"


def split_script_words(text: str) -> list[ScriptWord]:
    """Tokenize text into ScriptWords, counting one space between words."""
    words: list[ScriptWord] = []
    offset: int = 0
    for i, token in enumerate(text.split()):
        words.append(ScriptWord(
            index=i,
            text=token,
            char_offset=offset,
            is_annotation=is_annotation_word(token),
        ))
        offset += len(token) + 1
    return words


@dataclass(frozen=True)
class Script:
    """Immutable script for one reading session."""
    text: str  # Collapsed script text (single spaces, trimmed)
    normalized: str  # Lowercase alphanumerics + whitespace
    words: tuple[ScriptWord, ...] = field(default_factory=tuple)
    # Start offset of each word, for bisecting
    word_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "word_starts", tuple(w.char_offset for w in self.words))

    @property
    def length(self) -> int:
        """Number of characters in the collapsed script."""
        return len(self.text)

    @property
    def spoken_words(self) -> list[ScriptWord]:
        """Words the speaker is expected to say (annotations excluded)."""
        return [w for w in self.words if not w.is_annotation]

    def suffix(self, offset: int) -> str:
        """Remaining script text from a character offset."""
        return self.text[offset:]

    def word_index_at(self, offset: int) -> int:
        """
        Index of the word that contains a character offset.

        The separating space after a word belongs to that word. Offsets at or
        past the end of the script return len(words).
        """
        if offset >= self.length or not self.words:
            return len(self.words)
        if offset <= 0:
            return 0
        return bisect_right(self.word_starts, offset) - 1

    def offset_for_word(self, index: int) -> int | None:
        """Character offset of a word (e.g. when the user taps it)."""
        if index < 0 or index >= len(self.words):
            return None
        return self.words[index].char_offset

    def char_offset_for_word_progress(self, progress: float) -> int:
        """Convert a fractional word index into a character offset."""
        whole: int = int(progress)
        frac: float = progress - whole
        offset: int = 0
        for word in self.words[:max(0, whole)]:
            offset += len(word.text) + 1
        if 0 <= whole < len(self.words):
            offset += int(len(self.words[whole].text) * frac)
        return min(offset, self.length)

    def word_progress_for_char_offset(self, offset: int) -> float:
        """Convert a character offset back into a fractional word index."""
        for word in self.words:
            if offset <= word.end_offset:
                frac: float = (offset - word.char_offset) / max(1, len(word.text))
                return word.index + max(0.0, frac)
        return float(len(self.words))


def parse_script(text: str) -> Script:
    """Collapse whitespace, normalize and tokenize a script."""
    collapsed: str = collapse_whitespace(text)
    return Script(
        text=collapsed,
        normalized=normalize(collapsed),
        words=tuple(split_script_words(collapsed)),
    )
