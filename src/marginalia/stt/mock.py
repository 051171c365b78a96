"""Mock recognizer for testing.

Provides a controllable recognizer for unit and integration testing.
"""

from collections.abc import Iterable, Iterator

from ..audio import AudioChunk
from .recognizer import TranscriptUpdate


class MockRecognizer:
    """Mock recognizer for testing.

    Publishes a preset response word by word as partial transcripts, then
    keeps consuming audio until the stream ends and yields the final text.
    """

    def __init__(self) -> None:
        """Initialize mock recognizer."""
        self._response_text: str = ""
        self._error_message: str | None = None
        self._available: bool = True
        self._call_count: int = 0
        self._last_hints: list[str] = []
        self._chunks_consumed: int = 0

    def set_response(self, text: str) -> None:
        """Set the transcript to produce on the next recognition."""
        self._response_text = text
        self._error_message = None

    def set_error(self, message: str) -> None:
        """Fail the next recognition after its partial transcripts."""
        self._error_message = message

    def set_available(self, available: bool) -> None:
        self._available = available

    def is_available(self) -> bool:
        return self._available

    def recognize(
        self, chunks: Iterable[AudioChunk], hints: list[str]
    ) -> Iterator[TranscriptUpdate]:
        """Yield preset partials, then the final transcript when audio ends."""
        self._call_count += 1
        self._last_hints = list(hints)

        words = self._response_text.split()
        for i in range(len(words)):
            yield TranscriptUpdate(text=" ".join(words[: i + 1]))

        if self._error_message:
            raise RuntimeError(self._error_message)

        for _ in chunks:
            self._chunks_consumed += 1

        if words:
            yield TranscriptUpdate(text=" ".join(words), is_final=True)

    @property
    def call_count(self) -> int:
        """Number of recognize calls."""
        return self._call_count

    @property
    def last_hints(self) -> list[str]:
        """Vocabulary hints passed to the last recognition."""
        return list(self._last_hints)

    @property
    def chunks_consumed(self) -> int:
        return self._chunks_consumed

    def clear(self) -> None:
        """Reset mock state."""
        self._response_text = ""
        self._error_message = None
        self._available = True
        self._call_count = 0
        self._last_hints = []
        self._chunks_consumed = 0


__all__ = ["MockRecognizer"]
