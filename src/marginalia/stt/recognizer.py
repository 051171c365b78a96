"""Recognizer protocol and data classes.

Defines the interface for streaming speech recognition used by the
capture controller.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from ..audio import AudioChunk


@dataclass(frozen=True)
class TranscriptUpdate:
    """A transcript produced while recognizing a live utterance.

    Attributes:
        text: Full transcript of the utterance so far (not a delta)
        is_final: True if the recognizer will not revise this text
    """

    text: str
    is_final: bool = False


class Recognizer(Protocol):
    """Interface for streaming speech-to-text.

    Implementations consume audio chunks as they arrive and yield the
    current best transcript after each recognition pass.
    """

    def is_available(self) -> bool:
        """Return True if the engine can recognize speech right now."""
        ...

    def recognize(
        self, chunks: Iterable[AudioChunk], hints: list[str]
    ) -> Iterator[TranscriptUpdate]:
        """Recognize speech from a live chunk stream.

        Args:
            chunks: Audio chunks, ending when capture stops
            hints: Contextual vocabulary that biases recognition

        Yields:
            TranscriptUpdate for every revision of the transcript

        Raises:
            RuntimeError: If recognition fails
        """
        ...


__all__ = ["Recognizer", "TranscriptUpdate"]
