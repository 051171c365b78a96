"""Mock microphone input for testing.

Feeds silence or scripted PCM data to the capture controller without
audio hardware.
"""

import threading
import time
from collections.abc import Iterator

from .capture import AudioChunk


class MockAudioCapture:
    """Mock audio input implementing the AudioCapture protocol.

    Streams silence (or data set with set_audio_data) until stopped. A start
    failure can be scripted to exercise audio session errors.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_size: int = 1024,
        realtime: bool = False,
    ) -> None:
        """Initialize mock capture.

        Args:
            sample_rate: Sample rate in Hz
            channels: Number of audio channels
            chunk_size: Frames per chunk when streaming
            realtime: Pace chunks at the real audio rate instead of a short tick
        """
        self._sample_rate = sample_rate
        self._channels = channels
        self._chunk_size = chunk_size
        self._realtime = realtime
        self._stopped = threading.Event()
        self._stopped.set()
        self._audio_source: bytes | None = None
        self._source_position = 0
        self._start_error: str | None = None
        self._start_count = 0
        self._start_time_ms = 0

    def set_audio_data(self, data: bytes) -> None:
        """Set raw PCM data to stream before falling back to silence."""
        self._audio_source = data
        self._source_position = 0

    def set_start_error(self, message: str | None) -> None:
        """Make the next start() calls raise RuntimeError (None clears)."""
        self._start_error = message

    def start(self) -> None:
        """Start mock capture."""
        self._start_count += 1
        if self._start_error:
            raise RuntimeError(self._start_error)
        self._source_position = 0
        self._start_time_ms = int(time.time() * 1000)
        self._stopped.clear()

    def stop(self) -> None:
        """Stop mock capture."""
        self._stopped.set()

    def _next_data(self) -> bytes:
        bytes_needed = self._chunk_size * 2 * self._channels
        if self._audio_source is None:
            return bytes(bytes_needed)

        data = self._audio_source[self._source_position : self._source_position + bytes_needed]
        self._source_position += len(data)
        if len(data) < bytes_needed:
            data += bytes(bytes_needed - len(data))
        return data

    def stream(self) -> Iterator[AudioChunk]:
        """Yield chunks until stop() is called."""
        tick = self._chunk_size / self._sample_rate if self._realtime else 0.005

        while not self._stopped.is_set():
            yield AudioChunk(
                data=self._next_data(),
                sample_rate=self._sample_rate,
                channels=self._channels,
                timestamp_ms=int(time.time() * 1000) - self._start_time_ms,
            )
            # Event.wait doubles as an interruptible sleep
            self._stopped.wait(tick)

    @property
    def is_active(self) -> bool:
        """Return True if capture is active."""
        return not self._stopped.is_set()

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def start_count(self) -> int:
        """Number of start() calls, failed ones included."""
        return self._start_count


__all__ = ["MockAudioCapture"]
