"""Speech recognition module for Marginalia.

Provides streaming recognition using faster-whisper or a mock implementation.
"""

from typing import TYPE_CHECKING

from .mock import MockRecognizer
from .recognizer import Recognizer, TranscriptUpdate

if TYPE_CHECKING:
    from ..config import STTConfig


def create_recognizer(
    config: "STTConfig | None" = None,
    use_mock: bool = False,
) -> Recognizer:
    """Create a recognizer instance.

    Args:
        config: STT configuration
        use_mock: If True, return mock implementation for testing

    Returns:
        Recognizer implementation

    Raises:
        RuntimeError: If faster-whisper is not installed
    """
    if use_mock:
        return MockRecognizer()

    kwargs = {}
    if config is not None:
        kwargs = {
            "model_size": config.model,
            "device": config.device,
            "compute_type": config.compute_type,
            "language": config.language,
            "partial_interval_ms": config.partial_interval_ms,
        }

    from .whisper import WhisperRecognizer

    return WhisperRecognizer(**kwargs)


__all__ = [
    "MockRecognizer",
    "Recognizer",
    "TranscriptUpdate",
    "create_recognizer",
]
