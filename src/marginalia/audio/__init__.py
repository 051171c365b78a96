"""Audio module for Marginalia.

Provides microphone input for voice capture.

Usage:
    capture = create_audio_capture(config.audio)

    # For testing, use the mock implementation
    from marginalia.audio.mock_capture import MockAudioCapture
"""

from typing import TYPE_CHECKING

from .capture import AudioCapture, AudioChunk

if TYPE_CHECKING:
    from ..config import AudioConfig


def create_audio_capture(
    config: "AudioConfig | None" = None,
    use_mock: bool = False,
) -> AudioCapture:
    """Create a microphone input instance.

    Args:
        config: Audio configuration (uses defaults if None)
        use_mock: If True, return mock implementation for testing

    Returns:
        AudioCapture implementation

    Raises:
        RuntimeError: If PyAudio is not installed
    """
    device_name = "default"
    sample_rate = 16000
    channels = 1
    chunk_size = 1024

    if config is not None:
        device_name = config.input_device
        sample_rate = config.sample_rate
        channels = config.channels
        chunk_size = config.chunk_size

    if use_mock:
        from .mock_capture import MockAudioCapture

        return MockAudioCapture(
            sample_rate=sample_rate,
            channels=channels,
            chunk_size=chunk_size,
        )

    from .backends.pyaudio_input import PyAudioCapture

    return PyAudioCapture(
        device_name=device_name,
        sample_rate=sample_rate,
        channels=channels,
        chunk_size=chunk_size,
    )


__all__ = [
    "AudioCapture",
    "AudioChunk",
    "create_audio_capture",
]
