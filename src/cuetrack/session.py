# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Alignment session that turns transcript updates into a highlight position.

Owns the per-reading state: the script, the offset matching resumes from,
and the externally visible recognized offset. Each transcript update is run
through both the character and word aligners; the further of the two wins,
and the visible offset only ever moves forward (except on an explicit jump).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from . import debug_log
from .char_aligner import char_level_match
from .config import AlignmentSettings, RecognitionSettings
from .script import Script, ScriptWord, parse_script
from .transcription_provider import RecognitionBackend
from .word_aligner import word_level_match

logger = logging.getLogger(__name__)

RECOGNITION_UNAVAILABLE: str = "Speech recognition unavailable"


class ListeningMode(Enum):
    """Which source drives the visible position."""
    CLASSIC = "classic"  # Timer-driven scroll, no microphone
    SILENCE_PAUSED = "silence_paused"  # Timer-driven, paused while silent
    WORD_TRACKING = "word_tracking"  # Speech alignment drives the position


class SessionState(Enum):
    """Lifecycle of a reading session."""
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"


@dataclass(frozen=True)
class SessionConfig:
    """Tuning for an AlignmentSession."""
    char_lookahead: int = 3
    word_lookahead: int = 3
    max_retries: int = 10
    retry_delay_step: float = 0.5
    max_retry_delay: float = 1.5
    restart_delay: float = 0.5
    locale: str = "en-US"
    listening_mode: ListeningMode = ListeningMode.WORD_TRACKING

    @classmethod
    def from_settings(
        cls,
        alignment: AlignmentSettings,
        recognition: RecognitionSettings | None = None
    ) -> 'SessionConfig':
        """Build a config from the YAML settings sections."""
        defaults = cls()
        recognition = recognition or {}  # type: ignore[assignment]
        return cls(
            char_lookahead=alignment.get("char_lookahead", defaults.char_lookahead),
            word_lookahead=alignment.get("word_lookahead", defaults.word_lookahead),
            max_retries=alignment.get("max_retries", defaults.max_retries),
            retry_delay_step=alignment.get("retry_delay_step", defaults.retry_delay_step),
            max_retry_delay=alignment.get("max_retry_delay", defaults.max_retry_delay),
            restart_delay=alignment.get("restart_delay", defaults.restart_delay),
            locale=recognition.get("locale", defaults.locale),
            listening_mode=ListeningMode(
                recognition.get("listening_mode", defaults.listening_mode.value)),
        )


@dataclass
class PositionUpdate:
    """Snapshot sent to listeners after a visible change."""
    recognized_char_count: int
    match_start_offset: int
    generation: int
    state: SessionState
    reason: str  # start, match, jump, resume, pause, stop, recognition_unavailable


PositionListener = Callable[[PositionUpdate], None]


class AlignmentSession:
    """
    Tracks how far through a script the speaker has read.

    All methods must be called from a single thread. Use ThreadedSession
    when transcripts arrive on background threads.
    """

    config: SessionConfig
    backend: RecognitionBackend | None

    def __init__(
        self,
        config: SessionConfig | None = None,
        backend: RecognitionBackend | None = None
    ) -> None:
        """
        Initialize an idle session.

        Args:
            config: Alignment tuning (defaults if None)
            backend: Recognition collaborator to begin/end passes on, if any
        """
        self.config = config or SessionConfig()
        self.backend = backend
        if backend is not None:
            backend.locale = self.config.locale

        self._script: Script = parse_script("")
        self._match_start_offset: int = 0
        self._recognized_char_count: int = 0
        self._retry_count: int = 0
        self._session_generation: int = 0
        self._state: SessionState = SessionState.IDLE
        self._listening: bool = False

        self.error: str | None = None
        self.recognition_unavailable: bool = False
        self.last_spoken_text: str = ""

        self._listeners: list[PositionListener] = []

    # Read-only state for the rendering side

    @property
    def script(self) -> str:
        """The collapsed script text."""
        return self._script.text

    @property
    def parsed_script(self) -> Script:
        """The script with its word/offset table."""
        return self._script

    @property
    def normalized_script(self) -> str:
        """Lowercase alphanumeric form of the script."""
        return self._script.normalized

    @property
    def script_length(self) -> int:
        """Number of characters in the collapsed script."""
        return self._script.length

    @property
    def words(self) -> tuple[ScriptWord, ...]:
        """Word table used to map offsets to highlighted words."""
        return self._script.words

    @property
    def match_start_offset(self) -> int:
        """Offset the next transcript is matched from."""
        return self._match_start_offset

    @property
    def recognized_char_count(self) -> int:
        """Visible highlight position (never decreases except on jump_to)."""
        return self._recognized_char_count

    @property
    def retry_count(self) -> int:
        """Recognition restarts since the last successful transcript."""
        return self._retry_count

    @property
    def session_generation(self) -> int:
        """Tag of the current recognition pass."""
        return self._session_generation

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_listening(self) -> bool:
        """True while a recognition pass is wanted."""
        return self._listening

    @property
    def is_done(self) -> bool:
        """True once the whole (non-empty) script has been recognized."""
        return self.script_length > 0 and self._recognized_char_count >= self.script_length

    @property
    def progress(self) -> float:
        """Get overall progress through the script (0.0 to 1.0)."""
        if self.script_length == 0:
            return 0.0
        return self._recognized_char_count / self.script_length

    @property
    def current_word_index(self) -> int:
        """Index of the word the highlight is currently in."""
        return self._script.word_index_at(self._recognized_char_count)

    def recent_spoken_words(self, count: int = 3) -> str:
        """The last few words of the latest transcript (for a caption line)."""
        words: list[str] = [w for w in self.last_spoken_text.split(' ') if w]
        return ' '.join(words[-count:]) if count > 0 else ""

    # Listeners

    def add_listener(self, listener: PositionListener) -> None:
        """Call listener after every visible state change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: PositionListener) -> None:
        """Stop notifying a listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, reason: str) -> None:
        update = PositionUpdate(
            recognized_char_count=self._recognized_char_count,
            match_start_offset=self._match_start_offset,
            generation=self._session_generation,
            state=self._state,
            reason=reason
        )
        for listener in list(self._listeners):
            listener(update)

    # Lifecycle

    def start(self, script: str, listen: bool = True) -> None:
        """
        Begin a new reading session on a script.

        Resets both offsets and the retry count and bumps the generation so
        that results still in flight from an earlier pass are discarded.

        Args:
            script: Script text (whitespace is collapsed)
            listen: If False the session starts PAUSED and no recognition
                pass is begun (e.g. loading a page while the mic is muted)
        """
        self._script = parse_script(script)
        self._match_start_offset = 0
        self._recognized_char_count = 0
        self._retry_count = 0
        self.error = None
        self.recognition_unavailable = False
        self.last_spoken_text = ""
        self._state = SessionState.ACTIVE if listen else SessionState.PAUSED
        self._listening = listen

        debug_log.clear_logs()
        logger.info("Session started: %d words, %d characters",
                    len(self._script.words), self.script_length)

        if listen:
            self._begin_pass(0.0)
        else:
            self._session_generation += 1
        self._notify("start")

    def pause(self) -> None:
        """Stop listening without losing the position (microphone muted)."""
        if self._state == SessionState.IDLE:
            return
        self._listening = False
        if self._state == SessionState.ACTIVE:
            self._state = SessionState.PAUSED
        if self.backend:
            self.backend.end()
        logger.debug("Session paused at %d", self._recognized_char_count)
        self._notify("pause")

    def resume(self) -> bool:
        """
        Start listening again from where the highlight left off.

        Returns:
            False if there is no session to resume
        """
        if self._state == SessionState.IDLE:
            logger.warning("Resume ignored: no active session")
            return False

        self._match_start_offset = self._recognized_char_count
        self._retry_count = 0
        self.error = None
        self.recognition_unavailable = False
        self._listening = True
        self._state = SessionState.DONE if self.is_done else SessionState.ACTIVE

        debug_log.log_position_update(
            self._recognized_char_count, self._recognized_char_count, 0, 0, "resume")
        self._begin_pass(0.0)
        self._notify("resume")
        return True

    def stop(self) -> None:
        """End the session entirely; later transcripts are ignored."""
        self._listening = False
        self._state = SessionState.IDLE
        self._script = parse_script("")
        self._match_start_offset = 0
        self._recognized_char_count = 0
        if self.backend:
            self.backend.end()
        logger.info("Session stopped")
        self._notify("stop")

    def jump_to(self, offset: int) -> bool:
        """
        Move the highlight to a character offset (e.g. a tapped word).

        Both offsets are set to the target so matching restarts there. If
        listening, a fresh recognition pass is started so the transcript of
        the old window can't be matched against the new one.

        Args:
            offset: Target character offset, 0 <= offset <= script length

        Returns:
            True if the jump was applied, False if it was rejected
        """
        if self._state == SessionState.IDLE:
            logger.warning("Jump to %d ignored: no active session", offset)
            return False
        if offset < 0 or offset > self.script_length:
            logger.warning("Jump to %d rejected: script has %d characters",
                           offset, self.script_length)
            return False

        old_pos: int = self._recognized_char_count
        self._recognized_char_count = offset
        self._match_start_offset = offset
        self._retry_count = 0

        if self._state != SessionState.PAUSED:
            self._state = SessionState.DONE if self.is_done else SessionState.ACTIVE

        debug_log.log_position_update(old_pos, offset, 0, 0, "jump")
        logger.debug("Jumped from %d to %d", old_pos, offset)

        if self._listening:
            self._begin_pass(self.config.restart_delay)
        else:
            # No pass is running, but anything still queued is now stale
            self._session_generation += 1

        self._notify("jump")
        return True

    def _begin_pass(self, delay: float) -> None:
        """Invalidate the current pass and ask the backend for a new one."""
        self._session_generation += 1
        if self.backend:
            self.backend.end()
            self.backend.begin(self._session_generation, delay)

    # Recognition events

    def is_current(self, generation: int | None) -> bool:
        """Check whether a result belongs to the current recognition pass."""
        return generation is None or generation == self._session_generation

    def on_transcript_update(self, spoken: str, generation: int | None = None) -> bool:
        """
        Match a transcript update against the unconsumed script.

        Each update is a full restatement of the utterance since the last
        start/resume/jump, so it is always matched from match_start_offset.

        Args:
            spoken: Best transcript so far for the current utterance
            generation: Generation the result was tagged with (None = current)

        Returns:
            True if the recognized offset moved forward
        """
        if not self.is_current(generation):
            debug_log.log_transcript(generation or 0, spoken, stale=True)
            logger.debug("Dropping stale transcript (generation %s, current %d)",
                         generation, self._session_generation)
            return False
        if not self._listening or self._state in (SessionState.IDLE, SessionState.PAUSED):
            return False
        if not spoken.strip():
            return False

        self._retry_count = 0
        self.last_spoken_text = spoken
        debug_log.log_transcript(self._session_generation, spoken)

        remaining: str = self._script.suffix(self._match_start_offset)
        char_result: int = char_level_match(
            remaining, spoken, self.config.char_lookahead)
        word_result: int = word_level_match(
            remaining, spoken, self.config.word_lookahead)
        best: int = max(char_result, word_result)

        candidate: int = self._match_start_offset + best
        if candidate <= self._recognized_char_count:
            return False

        old_pos: int = self._recognized_char_count
        self._recognized_char_count = min(candidate, self.script_length)
        if self.is_done:
            self._state = SessionState.DONE

        debug_log.log_position_update(
            old_pos, self._recognized_char_count, char_result, word_result, "match")
        logger.debug("Position %d -> %d (char=%d, word=%d)",
                     old_pos, self._recognized_char_count, char_result, word_result)

        self._notify("match")
        return True

    def on_recognition_error(self, generation: int | None = None) -> float | None:
        """
        Handle a failure of the recognition collaborator.

        Restarts the pass with increasing backoff until max_retries is
        reached, then reports recognition as unavailable. The offsets are
        never changed.

        Args:
            generation: Generation of the pass that failed (None = current)

        Returns:
            Seconds until the retry, or None if no retry was scheduled
        """
        if not self.is_current(generation):
            return None
        if not self._listening or self._state in (SessionState.IDLE, SessionState.PAUSED):
            return None

        if self._retry_count < self.config.max_retries:
            self._retry_count += 1
            delay: float = min(self._retry_count * self.config.retry_delay_step,
                               self.config.max_retry_delay)
            logger.info("Recognition failed, retry %d/%d in %.1fs",
                        self._retry_count, self.config.max_retries, delay)
            if self.backend:
                self.backend.begin(self._session_generation, delay)
            return delay

        logger.warning("Recognition failed %d times, giving up", self._retry_count)
        self._listening = False
        self.recognition_unavailable = True
        self.error = RECOGNITION_UNAVAILABLE
        if self.backend:
            self.backend.end()
        self._notify("recognition_unavailable")
        return None
