"""Voice capture controller.

Drives one live recognition at a time: checks permissions, holds the
microphone, runs the recognizer on a worker thread and publishes partial
transcripts into a latest-value channel until the reader stops dictating.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from enum import Enum

from ..audio import AudioCapture, AudioChunk
from ..stt import Recognizer
from .channel import TranscriptChannel
from .errors import (
    AudioSessionFailed,
    CaptureError,
    NotAuthorized,
    NotAvailable,
    RecognitionFailed,
)
from .permissions import PermissionProvider, StaticPermissions

logger = logging.getLogger(__name__)

DEFAULT_VOCABULARY_HINTS = [
    "quote",
    "thought",
    "question",
    "note",
    "remember",
    "interesting",
    "why",
    "what for",
    "how",
]


class CaptureState(Enum):
    """Capture lifecycle state."""

    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    LISTENING = "listening"
    FINALIZING = "finalizing"
    ERROR = "error"


class CaptureController:
    """Controls live speech capture for note dictation.

    State machine:
        IDLE -> REQUESTING_PERMISSION -> LISTENING -> FINALIZING -> IDLE
        Failures pass through ERROR back to IDLE.

    Example:
        controller = CaptureController(audio, recognizer)
        controller.start()
        for text in controller.updates():
            show(text)
        final = controller.stop()
    """

    def __init__(
        self,
        audio: AudioCapture,
        recognizer: Recognizer,
        permissions: PermissionProvider | None = None,
        vocabulary_hints: list[str] | None = None,
        on_final: Callable[[str], None] | None = None,
        on_error: Callable[[CaptureError], None] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            audio: Microphone input
            recognizer: Streaming speech recognizer
            permissions: Permission provider (everything granted if None)
            vocabulary_hints: Words that bias recognition
            on_final: Called with the final transcript after stop()
            on_error: Called when recognition fails while listening
        """
        self._audio = audio
        self._recognizer = recognizer
        self._permissions = permissions or StaticPermissions()
        self._hints = list(
            vocabulary_hints if vocabulary_hints is not None else DEFAULT_VOCABULARY_HINTS
        )
        self.on_final = on_final
        self.on_error = on_error

        self._lock = threading.RLock()
        self._start_lock = threading.Lock()
        self._state = CaptureState.IDLE
        self._channel = TranscriptChannel()
        self._channel.close()
        self._cancel = threading.Event()
        self._worker: threading.Thread | None = None
        self._last_error: CaptureError | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state == CaptureState.LISTENING

    @property
    def last_error(self) -> CaptureError | None:
        """Error that ended the most recent capture attempt, if any."""
        return self._last_error

    @property
    def audio(self) -> AudioCapture:
        return self._audio

    @property
    def recognizer(self) -> Recognizer:
        return self._recognizer

    @property
    def vocabulary_hints(self) -> list[str]:
        return list(self._hints)

    @property
    def transcript(self) -> str:
        """Latest partial transcript of the current or last capture."""
        return self._channel.latest

    @property
    def channel(self) -> TranscriptChannel:
        """Channel of the current or last capture."""
        return self._channel

    def updates(self, timeout: float | None = None) -> Iterator[str]:
        """Iterate live transcripts of the current capture.

        Raises:
            CaptureError: If the capture ended in an error
        """
        return self._channel.updates(timeout)

    def _set_state(self, state: CaptureState) -> None:
        if state != self._state:
            logger.debug(f"Capture state: {self._state.value} -> {state.value}")
            self._state = state

    def _fail(self, error: CaptureError) -> CaptureError:
        """Pass through ERROR back to IDLE. Must hold self._lock."""
        self._set_state(CaptureState.ERROR)
        self._last_error = error
        self._set_state(CaptureState.IDLE)
        return error

    def _cancel_current(self) -> None:
        """Stop the running recognition without draining it. Must hold self._lock."""
        self._cancel.set()
        self._audio.stop()
        self._channel.close()

    def _join_worker(self, worker: threading.Thread | None) -> None:
        """Wait for a cancelled recognition to return. Must not hold self._lock."""
        if worker is None or worker is threading.current_thread():
            return
        worker.join()

    def start(self) -> None:
        """Begin listening.

        A recognition already in progress is cancelled silently first, and
        its worker has returned before the new recognition begins.

        Raises:
            NotAuthorized: If speech or microphone permission is missing
            NotAvailable: If the recognizer cannot be used
            AudioSessionFailed: If the audio input cannot be acquired
        """
        with self._start_lock:
            with self._lock:
                if self._state == CaptureState.LISTENING:
                    logger.debug("Restarting capture, cancelling current recognition")
                    self._cancel_current()
                self._set_state(CaptureState.REQUESTING_PERMISSION)
                self._last_error = None
                previous = self._worker

            self._join_worker(previous)

            with self._lock:
                self._begin()

    def _begin(self) -> None:
        """Check permissions, acquire audio and launch the worker. Must hold self._lock."""
        try:
            granted = self._permissions.speech_granted() and self._permissions.microphone_granted()
        except Exception as e:
            raise self._fail(NotAuthorized(f"Permission check failed: {e}")) from e
        if not granted:
            raise self._fail(NotAuthorized("Speech recognition or microphone access denied"))

        try:
            available = self._recognizer.is_available()
        except Exception as e:
            raise self._fail(NotAvailable(f"Speech recognizer check failed: {e}")) from e
        if not available:
            raise self._fail(NotAvailable("Speech recognizer is not available"))

        try:
            self._audio.start()
        except Exception as e:
            raise self._fail(AudioSessionFailed(f"Could not start audio input: {e}")) from e

        self._cancel = threading.Event()
        self._channel = TranscriptChannel()
        self._worker = threading.Thread(
            target=self._recognition_loop,
            args=(self._cancel, self._channel),
            daemon=True,
            name="capture-recognition",
        )
        self._set_state(CaptureState.LISTENING)
        self._worker.start()
        logger.info("Listening")

    def stop(self) -> str | None:
        """Stop listening and return the final transcript.

        The recognition is cancelled, not drained: the transcript held at
        this moment is final. Calling stop() while idle does nothing.

        Returns:
            Final transcript, or None if not listening
        """
        with self._lock:
            if self._state != CaptureState.LISTENING:
                return None

            self._set_state(CaptureState.FINALIZING)
            final = self._channel.latest
            self._cancel_current()
            self._set_state(CaptureState.IDLE)

        logger.info(f"Capture finished: '{final[:50]}'")
        if self.on_final:
            self.on_final(final)
        return final

    def _chunks(self, cancel: threading.Event) -> Iterator[AudioChunk]:
        for chunk in self._audio.stream():
            if cancel.is_set():
                return
            yield chunk

    def _recognition_loop(self, cancel: threading.Event, channel: TranscriptChannel) -> None:
        """Worker thread: feed audio to the recognizer and publish transcripts."""
        try:
            for update in self._recognizer.recognize(self._chunks(cancel), self._hints):
                if cancel.is_set():
                    return
                channel.publish(update.text)
        except Exception as e:
            self._recognition_failed(cancel, channel, e)

    def _recognition_failed(
        self, cancel: threading.Event, channel: TranscriptChannel, exc: Exception
    ) -> None:
        if cancel.is_set():
            logger.debug(f"Ignoring error from cancelled recognition: {exc}")
            return

        with self._lock:
            if cancel.is_set() or self._state != CaptureState.LISTENING:
                logger.debug(f"Ignoring error from cancelled recognition: {exc}")
                return

            logger.error(f"Speech recognition failed: {exc}")
            error = self._fail(RecognitionFailed(str(exc)))
            cancel.set()
            self._audio.stop()
            channel.close(error)

        if self.on_error:
            self.on_error(error)


__all__ = ["DEFAULT_VOCABULARY_HINTS", "CaptureController", "CaptureState"]
