"""Microphone input backend using PyAudio.

Runs PortAudio in callback mode: the audio thread pushes raw buffers into a
queue and stream() hands them to the recognition worker. Used on macOS and
Linux.
"""

import logging
import queue
import time
from collections.abc import Iterator
from typing import Any

from ..capture import AudioChunk

# PyAudio import with fallback for type hints
try:
    import pyaudio

    PYAUDIO_AVAILABLE = True
except ImportError:
    PYAUDIO_AVAILABLE = False
    pyaudio = None

logger = logging.getLogger(__name__)

# Buffers kept while the consumer lags behind (about 6 s at 1024 frames / 16 kHz)
MAX_QUEUED_BUFFERS = 100

_END = b""


def find_input_device(pa: Any, name: str) -> int | None:
    """Index of the first input device whose name contains name.

    Returns:
        Device index, or None for the system default
    """
    if name == "default":
        return None

    wanted = name.lower()
    for index in range(pa.get_device_count()):
        info = pa.get_device_info_by_index(index)
        if info["maxInputChannels"] > 0 and wanted in info["name"].lower():
            return index

    logger.warning(f"Input device '{name}' not found, using default")
    return None


class PyAudioCapture:
    """Microphone capture through a PortAudio callback stream.

    Implements the AudioCapture protocol. stop() wakes a blocked stream()
    immediately, so the recognition worker never waits for the next buffer.
    """

    def __init__(
        self,
        device_name: str = "default",
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_size: int = 1024,
    ) -> None:
        """Initialize PyAudio capture.

        Args:
            device_name: Input device name (substring match) or "default"
            sample_rate: Sample rate in Hz
            channels: Number of channels (1 for mono)
            chunk_size: Frames per callback buffer

        Raises:
            RuntimeError: If PyAudio is not available
        """
        if not PYAUDIO_AVAILABLE:
            raise RuntimeError("PyAudio not available. Install with: pip install pyaudio")

        self._device_name = device_name
        self._sample_rate = sample_rate
        self._channels = channels
        self._chunk_size = chunk_size

        self._pa: Any = None
        self._stream: Any = None
        self._buffers: queue.Queue[bytes] = queue.Queue(maxsize=MAX_QUEUED_BUFFERS)
        self._dropped = 0
        self._started_at = 0.0

    def _on_audio(self, in_data: bytes, frame_count: int, time_info: Any, status: int) -> tuple:
        """PortAudio callback, runs on the audio thread."""
        try:
            self._buffers.put_nowait(in_data)
        except queue.Full:
            self._dropped += 1
        return (None, pyaudio.paContinue)

    def start(self) -> None:
        """Open the input stream.

        Raises:
            RuntimeError: If the device cannot be opened
        """
        if self._stream is not None:
            return

        self._buffers = queue.Queue(maxsize=MAX_QUEUED_BUFFERS)
        self._dropped = 0
        self._pa = pyaudio.PyAudio()
        try:
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self._channels,
                rate=self._sample_rate,
                input=True,
                input_device_index=find_input_device(self._pa, self._device_name),
                frames_per_buffer=self._chunk_size,
                stream_callback=self._on_audio,
            )
        except OSError as e:
            self._pa.terminate()
            self._pa = None
            raise RuntimeError(f"Could not open audio input: {e}") from e

        self._started_at = time.monotonic()
        logger.debug(f"Audio input open ({self._sample_rate} Hz, {self._channels} ch)")

    def stop(self) -> None:
        """Close the input stream and end stream()."""
        stream, self._stream = self._stream, None
        if stream is None:
            return

        stream.stop_stream()
        stream.close()
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None

        if self._dropped:
            logger.warning(f"Dropped {self._dropped} audio buffers, recognizer too slow")
        try:
            self._buffers.put_nowait(_END)
        except queue.Full:
            # Consumer is far behind; it exits on its next poll
            pass

    def stream(self) -> Iterator[AudioChunk]:
        """Yield audio chunks until stop() is called."""
        while True:
            try:
                data = self._buffers.get(timeout=0.5)
            except queue.Empty:
                if self._stream is None:
                    return
                continue

            if data == _END:
                return
            yield AudioChunk(
                data=data,
                sample_rate=self._sample_rate,
                channels=self._channels,
                timestamp_ms=int((time.monotonic() - self._started_at) * 1000),
            )

    @property
    def is_active(self) -> bool:
        return self._stream is not None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate


__all__ = ["PyAudioCapture", "find_input_device"]
