# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Tests for the replay recognition backend and the backend registry.
"""

import threading

import pytest

from cuetrack.providers import BACKEND_REGISTRY, ReplayBackend, create_backend, register_backend
from cuetrack.transcription_provider import RecognitionBackend, TranscriptionResult


class Collector:
    """Collects callbacks from a backend."""

    def __init__(self) -> None:
        self.results: list[TranscriptionResult] = []
        self.errors: list[int] = []
        self.error_event = threading.Event()

    def on_result(self, result: TranscriptionResult) -> None:
        self.results.append(result)

    def on_error(self, generation: int) -> None:
        self.errors.append(generation)
        self.error_event.set()


class TestReplayBackend:
    """Replay of recorded transcripts."""

    def test_results_tagged_with_generation(self) -> None:
        backend = ReplayBackend(["hello", "hello world"])
        collector = Collector()
        backend.connect(collector.on_result, collector.on_error)

        backend.begin(7)
        assert backend.wait(timeout=2.0)
        backend.end()

        assert [r.text for r in collector.results] == ["hello", "hello world"]
        assert all(r.generation == 7 for r in collector.results)
        assert [r.is_final for r in collector.results] == [False, True]

    def test_failure_reported_and_pass_stops(self) -> None:
        backend = ReplayBackend(["hello", None, "after retry"])
        collector = Collector()
        backend.connect(collector.on_result, collector.on_error)

        backend.begin(2)
        assert collector.error_event.wait(timeout=2.0)
        backend.end()

        assert collector.errors == [2]
        assert [r.text for r in collector.results] == ["hello"]
        assert not backend.finished.is_set()

    def test_restart_continues_from_position(self) -> None:
        backend = ReplayBackend(["hello", None, "after retry"])
        collector = Collector()
        backend.connect(collector.on_result, collector.on_error)

        backend.begin(1)
        assert collector.error_event.wait(timeout=2.0)
        backend.begin(1, delay=0.01)
        assert backend.wait(timeout=2.0)
        backend.end()

        assert [r.text for r in collector.results] == ["hello", "after retry"]

    def test_end_cancels_pending_begin(self) -> None:
        backend = ReplayBackend(["hello"])
        collector = Collector()
        backend.connect(collector.on_result, collector.on_error)

        backend.begin(1, delay=5.0)
        backend.end()

        assert collector.results == []
        assert backend.position == 0

    def test_without_callbacks(self) -> None:
        """A backend that isn't connected just runs through its recording."""
        backend = ReplayBackend(["hello"])
        backend.begin(1)
        assert backend.wait(timeout=2.0)
        backend.end()


class TestRegistry:
    """Backend factory."""

    def test_create_replay_backend(self) -> None:
        backend = create_backend("replay", updates=["hello"], interval=0.0)
        assert isinstance(backend, ReplayBackend)
        assert backend.updates == ["hello"]

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="Unknown backend"):
            create_backend("nonexistent")

    def test_register_backend(self) -> None:
        class SilentBackend(RecognitionBackend):
            def begin(self, generation: int, delay: float = 0.0) -> None:
                pass

            def end(self) -> None:
                pass

        register_backend("silent", SilentBackend)
        try:
            assert isinstance(create_backend("silent"), SilentBackend)
        finally:
            del BACKEND_REGISTRY["silent"]
