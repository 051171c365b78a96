"""Mock answer service for testing.

Provides a controllable AnswerService for unit and integration testing.
"""

import threading
import time
from typing import TYPE_CHECKING

from .errors import AIAPIError

if TYPE_CHECKING:
    from ..chat.models import ChatMessage
    from ..notes.models import Note


class MockAnswerService:
    """Mock answer service for testing.

    Returns a preset response and records every call. Safe to call from
    fan-out worker threads.
    """

    def __init__(self, response: str = "This is a mock answer.") -> None:
        """Initialize mock answer service."""
        self._lock = threading.Lock()
        self._response_text = response
        self._error_message: str | None = None
        self._latency_ms: int = 0
        self._calls: list[tuple[str, str]] = []

    def set_response(self, text: str) -> None:
        """Set the response to return on the next calls."""
        with self._lock:
            self._response_text = text
            self._error_message = None

    def set_error(self, message: str) -> None:
        """Raise AIAPIError with message on the next calls."""
        with self._lock:
            self._error_message = message

    def set_latency(self, latency_ms: int) -> None:
        """Set simulated latency."""
        self._latency_ms = latency_ms

    def _respond(self, method: str, prompt: str) -> str:
        with self._lock:
            self._calls.append((method, prompt))
            error = self._error_message
            text = self._response_text

        if self._latency_ms:
            time.sleep(self._latency_ms / 1000)
        if error:
            raise AIAPIError(error, status_code=500)
        return text

    def answer(self, question: str, book_context: str, note_context: str | None = None) -> str:
        return self._respond("answer", question)

    def reply(self, messages: list["ChatMessage"], book_context: str) -> str:
        last = messages[-1].content if messages else ""
        return self._respond("reply", last)

    def session_insight(self, book_context: str, notes: list["Note"]) -> str:
        return self._respond("session_insight", "\n".join(note.content for note in notes))

    @property
    def calls(self) -> list[tuple[str, str]]:
        """(method, prompt) pairs in call order."""
        with self._lock:
            return list(self._calls)

    def calls_to(self, method: str) -> list[str]:
        """Prompts passed to one method."""
        return [prompt for name, prompt in self.calls if name == method]

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self._calls)

    def clear(self) -> None:
        """Reset mock state."""
        with self._lock:
            self._response_text = "This is a mock answer."
            self._error_message = None
            self._calls.clear()


__all__ = ["MockAnswerService"]
