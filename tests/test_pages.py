"""
Tests for multi-page scripts.
"""

from cuetrack.pages import PageDeck
from cuetrack.session import AlignmentSession, SessionState
from cuetrack.transcription_provider import RecognitionBackend

PAGES = ["page one text", "   ", "page three"]


class RecordingBackend(RecognitionBackend):
    """Backend that only records what the session asked of it."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def begin(self, generation: int, delay: float = 0.0) -> None:
        self.calls.append(("begin", generation))

    def end(self) -> None:
        self.calls.append(("end",))


def make_deck(pages: list[str] = PAGES) -> PageDeck:
    return PageDeck(pages, AlignmentSession())


class TestPageDeck:
    """Page navigation starts a fresh session per page."""

    def test_read_current_page(self) -> None:
        deck = make_deck()
        assert deck.read_current_page()
        assert deck.session.script == "page one text"
        assert deck.session.is_listening
        assert deck.read_pages == {0}

    def test_advance_skips_blank_pages(self) -> None:
        deck = make_deck()
        deck.read_current_page()
        assert deck.has_next_page
        assert deck.advance_to_next_page()
        assert deck.current_index == 2
        assert deck.session.script == "page three"
        assert deck.read_pages == {0, 2}
        assert not deck.has_next_page
        assert not deck.advance_to_next_page()

    def test_new_page_resets_position(self) -> None:
        deck = make_deck()
        deck.read_current_page()
        deck.session.on_transcript_update("page one")
        assert deck.session.recognized_char_count > 0
        deck.advance_to_next_page()
        assert deck.session.recognized_char_count == 0
        assert deck.session.match_start_offset == 0

    def test_keeps_listening_across_pages(self) -> None:
        deck = make_deck()
        deck.read_current_page()
        deck.advance_to_next_page()
        assert deck.session.is_listening
        assert deck.session.state == SessionState.ACTIVE

    def test_stays_paused_across_pages(self) -> None:
        deck = make_deck()
        deck.read_current_page()
        deck.session.pause()
        deck.advance_to_next_page()
        assert deck.session.script == "page three"
        assert not deck.session.is_listening
        assert deck.session.state == SessionState.PAUSED

    def test_paused_page_switch_does_not_listen(self) -> None:
        """Switching pages with the mic muted never begins recognition."""
        backend = RecordingBackend()
        deck = PageDeck(PAGES, AlignmentSession(backend=backend))
        deck.read_current_page()
        deck.session.pause()
        backend.calls.clear()

        assert deck.jump_to_page(2)

        assert not any(call[0] == "begin" for call in backend.calls)
        assert deck.session.state == SessionState.PAUSED
        assert deck.session.recognized_char_count == 0

        deck.session.resume()
        assert backend.calls[-1] == ("begin", deck.session.session_generation)

    def test_listening_page_switch_restarts_recognition(self) -> None:
        backend = RecordingBackend()
        deck = PageDeck(PAGES, AlignmentSession(backend=backend))
        deck.read_current_page()
        backend.calls.clear()

        deck.advance_to_next_page()

        assert backend.calls[-1] == ("begin", deck.session.session_generation)

    def test_jump_to_invalid_page(self) -> None:
        deck = make_deck()
        assert not deck.jump_to_page(1)  # blank
        assert not deck.jump_to_page(3)
        assert not deck.jump_to_page(-1)
        assert deck.current_index == 0

    def test_blank_current_page_not_read(self) -> None:
        deck = make_deck(["", "text"])
        assert not deck.read_current_page()
        assert deck.session.state == SessionState.IDLE

    def test_no_pages(self) -> None:
        deck = make_deck([])
        assert deck.current_page_text == ""
        assert not deck.has_next_page
