"""Answer service protocol.

The AI text service is opaque to the rest of the application: it takes
text plus book context and returns text, or raises AIServiceError.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..chat.models import ChatMessage
    from ..notes.models import Note


class AnswerService(Protocol):
    """Interface for AI text generation about a book."""

    def answer(self, question: str, book_context: str, note_context: str | None = None) -> str:
        """Answer a reader's question about a book.

        Raises:
            AIServiceError: If the service fails
        """
        ...

    def reply(self, messages: list["ChatMessage"], book_context: str) -> str:
        """Produce the next assistant message of a chat thread.

        Raises:
            AIServiceError: If the service fails
        """
        ...

    def session_insight(self, book_context: str, notes: list["Note"]) -> str:
        """Summarize the key insight of a reading session from its notes.

        Raises:
            AIServiceError: If the service fails
        """
        ...


__all__ = ["AnswerService"]
