# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Base interface for the speech recognition collaborator.

The alignment engine never touches audio. It asks a backend to begin or end
a recognition pass, and the backend delivers full-utterance transcripts
tagged with the session generation that requested them.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class TranscriptionResult:
    """A best-effort transcript of the utterance so far."""

    text: str
    generation: int
    is_final: bool = False

    def __repr__(self) -> str:
        status: str = "final" if self.is_final else "partial"
        return f"TranscriptionResult(gen={self.generation} {status}: '{self.text}')"


ResultCallback = Callable[[TranscriptionResult], None]
ErrorCallback = Callable[[int], None]


class RecognitionBackend(ABC):
    """Base interface for recognition backends driven by a session."""

    on_result: ResultCallback | None = None
    on_error: ErrorCallback | None = None
    # Language the recognizer listens for (set by the owning session)
    locale: str = "en-US"

    @abstractmethod
    def begin(self, generation: int, delay: float = 0.0) -> None:
        """
        Start a fresh recognition pass.

        Any pass already running is torn down, and a begin that is still
        waiting for its delay is replaced by this one.

        Args:
            generation: Session generation every result of this pass is tagged with
            delay: Seconds to wait before starting (used for retry backoff)
        """

    @abstractmethod
    def end(self) -> None:
        """Tear down the current pass and cancel any pending begin."""

    def connect(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """Register where transcripts and recognition failures are delivered."""
        self.on_result = on_result
        self.on_error = on_error
