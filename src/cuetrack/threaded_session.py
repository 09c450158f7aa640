# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Threaded wrapper for AlignmentSession.

Speech engines deliver transcripts on their own threads. This wrapper
marshals every transcript, recognition failure and control command onto a
single worker thread through a queue, so the session always has exactly
one writer and sees events in arrival order.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any

from .config import (
    Config,
    get_alignment_settings,
    get_recognition_settings,
    get_threading_settings,
)
from .session import AlignmentSession, ListeningMode, SessionConfig, SessionState
from .transcription_provider import RecognitionBackend, TranscriptionResult

logger = logging.getLogger(__name__)


@dataclass
class TranscriptRequest:
    """A transcript update waiting to be matched."""
    transcription: str
    generation: int | None
    timestamp: float
    request_id: int


@dataclass
class AlignmentResult:
    """Session state after processing one request."""
    recognized_char_count: int
    match_start_offset: int
    generation: int
    state: SessionState
    advanced: bool
    request_id: int
    processing_time: float


@dataclass
class ControlCommand:
    """Control command for the worker thread."""
    # 'start', 'jump_to', 'resume', 'pause', 'stop', 'recognition_error', 'shutdown'
    command: str
    param: Any = None


class ThreadedSession:
    """
    Thread-safe wrapper around AlignmentSession.

    Features:
    - Non-blocking submit_transcript() callable from any thread
    - Backpressure handling (drops the oldest queued transcripts, which the
      newest one supersedes anyway)
    - Worker thread owns the session; nothing else writes to it
    - Cached results for immediate access

    Usage:
        session = ThreadedSession(backend=backend)
        session.start(script_text)

        # From the recognizer thread
        session.submit_transcript(text, generation)

        # From the UI thread
        result = session.get_latest_result()
        if result:
            highlight_up_to(result.recognized_char_count)
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        backend: RecognitionBackend | None = None,
        max_queue_size: int = 10
    ):
        """
        Initialize the threaded session.

        Args:
            config: Alignment tuning passed to the wrapped session
            backend: Recognition backend; its callbacks are routed through the queue
            max_queue_size: Maximum queue size before backpressure kicks in (default: 10)
        """
        self.config = config or SessionConfig()
        self.backend = backend
        self.max_queue_size = max_queue_size

        # Queues for communication
        self.request_queue: queue.Queue[TranscriptRequest | ControlCommand] = queue.Queue(
            maxsize=max_queue_size
        )
        self.result_queue: queue.Queue[AlignmentResult] = queue.Queue(
            maxsize=max_queue_size
        )

        # Thread control
        self.worker_thread: threading.Thread | None = None
        self.shutdown_flag = threading.Event()
        self.started = threading.Event()

        # Serializes every producer put (and the backpressure drain)
        self.queue_lock = threading.Lock()

        # Cached state (thread-safe with lock)
        self.state_lock = threading.Lock()
        self.latest_result: AlignmentResult | None = None
        self.request_counter = 0

        self.session = AlignmentSession(self.config, backend)

        if backend is not None:
            backend.connect(self._on_backend_result, self._on_backend_error)

        self._start_worker()

        # Wait for worker to be ready
        self.started.wait(timeout=5.0)
        if not self.started.is_set():
            raise RuntimeError("Worker thread failed to start")

    @classmethod
    def from_config(
        cls,
        config: Config,
        backend: RecognitionBackend | None = None
    ) -> 'ThreadedSession':
        """Build a threaded session from a loaded .cuetrack.yaml config."""
        session_config = SessionConfig.from_settings(
            get_alignment_settings(config), get_recognition_settings(config))
        return cls(
            session_config,
            backend,
            max_queue_size=get_threading_settings(config)["max_queue_size"]
        )

    def _start_worker(self) -> None:
        """Start the worker thread."""
        self.worker_thread = threading.Thread(
            target=self._worker_loop,
            name="AlignmentWorker",
            daemon=True
        )
        self.worker_thread.start()

    def _worker_loop(self) -> None:
        """Main loop for the worker thread."""
        logger.info("ThreadedSession worker started")
        self.started.set()
        try:
            while not self.shutdown_flag.is_set():
                try:
                    item = self.request_queue.get(timeout=0.1)
                except queue.Empty:
                    continue

                try:
                    if isinstance(item, ControlCommand):
                        self._handle_control_command(item)
                    elif isinstance(item, TranscriptRequest):
                        self._handle_transcript_request(item)
                except Exception as e:
                    logger.error("Error in worker loop: %s", e, exc_info=True)
                finally:
                    self.request_queue.task_done()
        finally:
            logger.info("ThreadedSession worker stopped")

    def _handle_control_command(self, cmd: ControlCommand) -> None:
        """Handle control commands."""
        session = self.session
        if cmd.command == 'start':
            session.start(cmd.param)
        elif cmd.command == 'jump_to':
            session.jump_to(cmd.param)
        elif cmd.command == 'resume':
            session.resume()
        elif cmd.command == 'pause':
            session.pause()
        elif cmd.command == 'stop':
            session.stop()
        elif cmd.command == 'recognition_error':
            session.on_recognition_error(cmd.param)
        elif cmd.command == 'shutdown':
            self.shutdown_flag.set()
            return
        else:
            logger.warning("Unknown control command: %s", cmd.command)
            return

        self._publish(advanced=False, request_id=0, start_time=time.time())

    def _handle_transcript_request(self, req: TranscriptRequest) -> None:
        """Handle a transcript update."""
        start_time = time.time()
        advanced = self.session.on_transcript_update(req.transcription, req.generation)
        self._publish(advanced, req.request_id, start_time)

    def _publish(self, advanced: bool, request_id: int, start_time: float) -> None:
        """Cache and queue the session state after a request."""
        session = self.session
        result = AlignmentResult(
            recognized_char_count=session.recognized_char_count,
            match_start_offset=session.match_start_offset,
            generation=session.session_generation,
            state=session.state,
            advanced=advanced,
            request_id=request_id,
            processing_time=time.time() - start_time
        )

        with self.state_lock:
            self.latest_result = result

        # Put result in queue (non-blocking to avoid deadlock)
        try:
            self.result_queue.put_nowait(result)
        except queue.Full:
            # Drop oldest result and try again
            try:
                self.result_queue.get_nowait()
                self.result_queue.put_nowait(result)
            except (queue.Empty, queue.Full):
                pass

    # Producer side (any thread)

    def _on_backend_result(self, result: TranscriptionResult) -> None:
        self.submit_transcript(result.text, result.generation)

    def _on_backend_error(self, generation: int) -> None:
        self._enqueue(ControlCommand(command='recognition_error', param=generation))

    def _enqueue(self, item: TranscriptRequest | ControlCommand) -> bool:
        """
        Queue a request, making room by dropping superseded transcripts.

        All producers go through queue_lock, so the drain and put-back can't
        interleave with another thread's put. Control commands are never
        dropped and keep their arrival order.

        Returns:
            True if the item was queued
        """
        with self.queue_lock:
            try:
                self.request_queue.put_nowait(item)
                return True
            except queue.Full:
                pass

            # Queue is full - drop old transcripts, keep control commands in order
            kept: list[ControlCommand] = []
            dropped = 0
            while True:
                try:
                    old_item = self.request_queue.get_nowait()
                except queue.Empty:
                    break
                self.request_queue.task_done()
                if isinstance(old_item, TranscriptRequest):
                    dropped += 1
                else:
                    kept.append(old_item)

            # Only the worker removes items while the lock is held, so these fit
            for command in kept:
                self.request_queue.put_nowait(command)
            if dropped:
                logger.warning("Backpressure: dropped %d superseded transcripts", dropped)

            try:
                self.request_queue.put_nowait(item)
                return True
            except queue.Full:
                pass

            if isinstance(item, TranscriptRequest):
                logger.warning("Backpressure: dropping transcript update")
                return False

            # Queue holds nothing but commands; wait for the worker to take one
            try:
                self.request_queue.put(item, timeout=1.0)
                return True
            except queue.Full:
                logger.error("Failed to queue %s command (queue full)", item.command)
                return False

    def submit_transcript(self, transcription: str, generation: int | None = None) -> bool:
        """
        Submit a transcript update for matching (non-blocking).

        Args:
            transcription: Best transcript so far for the utterance
            generation: Generation the recognizer tagged the result with

        Returns:
            True if the update was queued, False if it was dropped
        """
        if self.config.listening_mode != ListeningMode.WORD_TRACKING:
            logger.debug("Transcript dropped: listening mode is %s",
                         self.config.listening_mode.value)
            return False

        with self.state_lock:
            self.request_counter += 1
            request_id = self.request_counter

        return self._enqueue(TranscriptRequest(
            transcription=transcription,
            generation=generation,
            timestamp=time.time(),
            request_id=request_id
        ))

    def _send_command(self, cmd: ControlCommand) -> None:
        """Queue a control command."""
        self._enqueue(cmd)

    def start(self, script: str) -> None:
        """Start a new reading session on a script."""
        self._send_command(ControlCommand(command='start', param=script))

    def jump_to(self, offset: int) -> None:
        """Move the highlight to a character offset."""
        self._send_command(ControlCommand(command='jump_to', param=offset))

    def resume(self) -> None:
        """Resume listening from the current highlight."""
        self._send_command(ControlCommand(command='resume'))

    def pause(self) -> None:
        """Pause listening."""
        self._send_command(ControlCommand(command='pause'))

    def stop(self) -> None:
        """End the session."""
        self._send_command(ControlCommand(command='stop'))

    # Consumer side

    def get_latest_result(self, timeout: float = 0) -> AlignmentResult | None:
        """
        Get the next queued result.

        Args:
            timeout: How long to wait for a result (0 = don't wait)
        """
        try:
            if timeout > 0:
                return self.result_queue.get(timeout=timeout)
            return self.result_queue.get_nowait()
        except queue.Empty:
            return None

    def get_cached_result(self) -> AlignmentResult | None:
        """Get the cached latest result without consuming from queue."""
        with self.state_lock:
            return self.latest_result

    def wait_until_idle(self, timeout: float = 2.0) -> bool:
        """Block until every queued request has been processed."""
        deadline = time.time() + timeout
        while time.time() < deadline:
            if self.request_queue.unfinished_tasks == 0:
                return True
            time.sleep(0.005)
        return False

    def shutdown(self) -> None:
        """Shutdown the worker thread and the backend."""
        if self.backend is not None:
            self.backend.end()

        self._enqueue(ControlCommand(command='shutdown'))

        self.shutdown_flag.set()

        if self.worker_thread and self.worker_thread.is_alive():
            self.worker_thread.join(timeout=2.0)
