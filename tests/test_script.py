"""
Tests for the script word table.
"""

from cuetrack.script import Script, ScriptWord, parse_script, split_script_words

SCRIPT = "Hello, world! [pause] Goodbye."


class TestParseScript:
    """Tests for parse_script()."""

    def test_collapses_whitespace(self) -> None:
        """Line breaks and runs of spaces become single spaces."""
        script = parse_script("  Hello,\n\nworld!   [pause]\tGoodbye. ")
        assert script.text == SCRIPT
        assert script.length == 30

    def test_normalized_form(self) -> None:
        script = parse_script(SCRIPT)
        assert script.normalized == "hello world pause goodbye"

    def test_word_offsets(self) -> None:
        script = parse_script(SCRIPT)
        assert [w.char_offset for w in script.words] == [0, 7, 14, 22]
        assert [w.text for w in script.words] == ["Hello,", "world!", "[pause]", "Goodbye."]

    def test_annotations_flagged(self) -> None:
        script = parse_script(SCRIPT)
        assert [w.is_annotation for w in script.words] == [False, False, True, False]
        assert [w.text for w in script.spoken_words] == ["Hello,", "world!", "Goodbye."]

    def test_empty_script(self) -> None:
        script = parse_script("")
        assert script.length == 0
        assert script.words == ()
        assert script.word_index_at(0) == 0

    def test_suffix(self) -> None:
        script = parse_script(SCRIPT)
        assert script.suffix(7) == "world! [pause] Goodbye."
        assert script.suffix(30) == ""


class TestOffsetLookup:
    """Mapping between character offsets and words."""

    def test_word_index_at(self) -> None:
        script = parse_script(SCRIPT)
        assert script.word_index_at(0) == 0
        assert script.word_index_at(3) == 0
        # The space after a word belongs to that word
        assert script.word_index_at(6) == 0
        assert script.word_index_at(7) == 1
        assert script.word_index_at(29) == 3

    def test_word_starts_cached(self) -> None:
        """Start offsets are computed once, also for a hand-built Script."""
        script = Script("one two", "one two", tuple(split_script_words("one two")))
        assert script.word_starts == (0, 4)
        assert script.word_index_at(5) == 1
        assert script == parse_script("one two")

    def test_word_index_past_end(self) -> None:
        script = parse_script(SCRIPT)
        assert script.word_index_at(30) == 4
        assert script.word_index_at(100) == 4

    def test_offset_for_word(self) -> None:
        script = parse_script(SCRIPT)
        assert script.offset_for_word(2) == 14
        assert script.offset_for_word(4) is None
        assert script.offset_for_word(-1) is None

    def test_word_progress_round_trip(self) -> None:
        """Half way through the second word is offset 10."""
        script = parse_script(SCRIPT)
        assert script.char_offset_for_word_progress(1.5) == 10
        assert script.word_progress_for_char_offset(10) == 1.5

    def test_word_progress_bounds(self) -> None:
        script = parse_script(SCRIPT)
        assert script.char_offset_for_word_progress(0) == 0
        assert script.char_offset_for_word_progress(10) == script.length
        assert script.word_progress_for_char_offset(0) == 0.0


def test_split_script_words() -> None:
    words = split_script_words("one two 👋")
    assert words == [
        ScriptWord(0, "one", 0, False),
        ScriptWord(1, "two", 4, False),
        ScriptWord(2, "👋", 8, True),
    ]
    assert words[1].end_offset == 7
