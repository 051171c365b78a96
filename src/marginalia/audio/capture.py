"""Microphone input protocol and data classes.

Defines the interface the capture controller uses to pull raw PCM audio
from an input device.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol


@dataclass
class AudioChunk:
    """Raw audio data chunk.

    Attributes:
        data: Raw PCM audio bytes (16-bit little endian)
        sample_rate: Sample rate in Hz (e.g., 16000)
        channels: Number of audio channels (1=mono)
        timestamp_ms: Milliseconds since capture started
    """

    data: bytes
    sample_rate: int
    channels: int = 1
    timestamp_ms: int = 0

    @property
    def duration_ms(self) -> float:
        """Duration of this chunk in milliseconds."""
        if self.sample_rate == 0 or self.channels == 0:
            return 0.0
        num_samples = len(self.data) / (2 * self.channels)
        return (num_samples / self.sample_rate) * 1000


class AudioCapture(Protocol):
    """Interface for microphone input.

    The capture controller calls start() when the reader begins dictating,
    iterates stream() on its worker thread and calls stop() to end input.
    """

    def start(self) -> None:
        """Acquire the input device.

        Raises:
            RuntimeError: If the device cannot be opened
        """
        ...

    def stop(self) -> None:
        """Release the input device.

        Safe to call when not capturing. Ends any running stream() iterator.
        """
        ...

    def stream(self) -> Iterator[AudioChunk]:
        """Yield audio chunks until stop() is called.

        This is a blocking iterator meant to run on a worker thread.
        """
        ...

    @property
    def is_active(self) -> bool:
        """Return True while the device is held."""
        ...

    @property
    def sample_rate(self) -> int:
        """Configured sample rate in Hz."""
        ...


__all__ = ["AudioCapture", "AudioChunk"]
