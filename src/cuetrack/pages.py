# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Multi-page scripts.

Each page is read as its own alignment session: switching pages never
carries a match window across, it starts a new session on the new text.
"""

import logging
from collections.abc import Sequence

from .session import AlignmentSession

logger = logging.getLogger(__name__)


class PageDeck:
    """An ordered set of script pages driving one AlignmentSession."""

    def __init__(self, pages: Sequence[str], session: AlignmentSession) -> None:
        self.pages: list[str] = list(pages) or [""]
        self.session = session
        self.current_index: int = 0
        self.read_pages: set[int] = set()

    @property
    def current_page_text(self) -> str:
        """Text of the current page (untrimmed)."""
        if self.current_index < len(self.pages):
            return self.pages[self.current_index]
        return ""

    def _next_non_blank(self) -> int | None:
        for i in range(self.current_index + 1, len(self.pages)):
            if self.pages[i].strip():
                return i
        return None

    @property
    def has_next_page(self) -> bool:
        """True if a non-blank page follows the current one."""
        return self._next_non_blank() is not None

    def read_current_page(self) -> bool:
        """Start a session on the current page. Blank pages are ignored."""
        text = self.current_page_text.strip()
        if not text:
            return False
        self.read_pages.add(self.current_index)
        self.session.start(text)
        return True

    def advance_to_next_page(self) -> bool:
        """Move to the next non-blank page, if there is one."""
        next_index = self._next_non_blank()
        if next_index is None:
            return False
        return self.jump_to_page(next_index)

    def jump_to_page(self, index: int) -> bool:
        """
        Switch to another page and start a new session on it.

        If the session was listening it is paused while the script is
        swapped and resumes listening on the new page. Otherwise the new
        page is only loaded; no recognition pass is begun.

        Returns:
            False if index is out of range or the page is blank
        """
        if index < 0 or index >= len(self.pages):
            return False
        text = self.pages[index].strip()
        if not text:
            return False

        was_listening = self.session.is_listening
        if was_listening:
            self.session.pause()

        self.current_index = index
        self.read_pages.add(index)
        logger.info("Switched to page %d of %d", index + 1, len(self.pages))

        # A new script always means a new session
        self.session.start(text, listen=was_listening)
        return True
