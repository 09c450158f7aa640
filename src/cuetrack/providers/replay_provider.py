# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Replay backend that plays back recorded transcript updates.

Each entry of the recording is delivered as one transcript update from a
worker thread, exactly as a live recognizer would deliver partial results.
A None entry simulates the recognizer failing mid-utterance.
"""

import logging
import threading
from collections.abc import Sequence

from ..transcription_provider import RecognitionBackend, TranscriptionResult

logger = logging.getLogger(__name__)


class ReplayBackend(RecognitionBackend):
    """Recognition backend that replays a fixed list of transcripts."""

    updates: list[str | None]
    interval: float
    position: int

    def __init__(self, updates: Sequence[str | None], interval: float = 0.0) -> None:
        """
        Initialize the replay backend.

        Args:
            updates: Transcript strings to deliver in order (None = failure)
            interval: Seconds to wait between deliveries
        """
        self.updates = list(updates)
        self.interval = interval
        # Index of the next update; survives restarts so a retry carries on
        self.position = 0

        self._lock = threading.Lock()
        self._cancel: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self.finished = threading.Event()

    def begin(self, generation: int, delay: float = 0.0) -> None:
        """Start replaying from the current position after an optional delay."""
        self.end()
        cancel = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(generation, delay, cancel),
            name=f"ReplayBackend-{generation}",
            daemon=True
        )
        with self._lock:
            self._cancel = cancel
            self._thread = thread
            self.finished.clear()
        logger.debug("Replay pass %d (%s) starting in %.2fs", generation, self.locale, delay)
        thread.start()

    def end(self) -> None:
        """Cancel the running or pending pass."""
        with self._lock:
            cancel = self._cancel
            thread = self._thread
            self._cancel = None
            self._thread = None
        if cancel is not None:
            cancel.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the recording is exhausted."""
        return self.finished.wait(timeout)

    def _run(self, generation: int, delay: float, cancel: threading.Event) -> None:
        """Worker thread body for one recognition pass."""
        if delay > 0 and cancel.wait(delay):
            return

        while not cancel.is_set():
            with self._lock:
                if self.position >= len(self.updates):
                    self.finished.set()
                    return
                update = self.updates[self.position]
                self.position += 1

            if update is None:
                logger.debug("Replay pass %d: simulated recognition failure", generation)
                if self.on_error:
                    self.on_error(generation)
                return

            if self.on_result:
                is_final = self.position >= len(self.updates)
                self.on_result(TranscriptionResult(update, generation, is_final))

            if self.interval > 0 and cancel.wait(self.interval):
                return
