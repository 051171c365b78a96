"""Claude answer service for Marginalia.

Answers reading questions, continues book chat threads and writes session
insights through the Claude API.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import anthropic

from .errors import AIAPIError, AIAuthError, AIConnectivityError, AITimeoutError

if TYPE_CHECKING:
    from ..chat.models import ChatMessage
    from ..notes.models import Note

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a reading companion helping someone who is reading a physical book.

GUIDELINES:
- Answer briefly but informatively, in a few sentences
- Ground your answers in the book described below when you can
- If the question is not about the book, answer it anyway and keep it short
- Do not invent quotes from the book

{book_context}"""

INSIGHT_PROMPT = """Here are the notes I took during a reading session:

{notes}

In two or three sentences, describe the key insight of this session."""


@dataclass
class ClaudeClientConfig:
    """Configuration for the Claude answer service."""

    api_key: str
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 500
    temperature: float = 0.7
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClaudeClientConfig":
        """Create config from environment variables.

        Args:
            **overrides: Values for the non-secret fields

        Returns:
            ClaudeClientConfig with API key from environment.

        Raises:
            ValueError: If ANTHROPIC_API_KEY is not set.
        """
        api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
        if not api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Set it to use AI answers, or use the mock provider."
            )
        return cls(api_key=api_key, **overrides)


def format_notes(notes: list["Note"]) -> str:
    """Render notes as a bullet list with their type label."""
    return "\n".join(f"- {note.type.display_name}: {note.content}" for note in notes)


def to_api_messages(messages: list["ChatMessage"]) -> list[dict[str, str]]:
    """Convert a chat thread to Claude API messages.

    System messages and failed messages are skipped. Consecutive messages
    of the same role are merged and the list always starts with a user turn.
    """
    from ..chat.models import ChatRole, MessageStatus

    api_messages: list[dict[str, str]] = []
    for message in messages:
        if message.role == ChatRole.SYSTEM or message.status == MessageStatus.ERROR:
            continue
        role = message.role.value
        if api_messages and api_messages[-1]["role"] == role:
            api_messages[-1]["content"] += "\n\n" + message.content
        elif not api_messages and role != "user":
            continue
        else:
            api_messages.append({"role": role, "content": message.content})
    return api_messages


class ClaudeAnswerService:
    """AnswerService implementation backed by the Claude API."""

    def __init__(self, config: ClaudeClientConfig) -> None:
        """Initialize Claude client.

        Args:
            config: Configuration for the client.
        """
        self._config = config
        self._client = anthropic.Anthropic(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
        )

    def _complete(self, messages: list[dict[str, str]], book_context: str) -> str:
        """Send messages to Claude and return the reply text.

        Raises:
            AITimeoutError: If the request times out.
            AIAPIError: If the API returns an error.
            AIAuthError: If authentication fails.
            AIConnectivityError: If network is unavailable.
        """
        start_time = time.time()

        try:
            response = self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=SYSTEM_PROMPT.format(book_context=book_context),
                messages=messages,
            )
        except anthropic.AuthenticationError as e:
            raise AIAuthError("Invalid API key. Please check your ANTHROPIC_API_KEY.") from e
        except anthropic.APITimeoutError as e:
            # Timeout first: it subclasses APIConnectionError
            raise AITimeoutError(
                f"Request timed out after {self._config.timeout_seconds} seconds."
            ) from e
        except anthropic.APIConnectionError as e:
            raise AIConnectivityError(f"Failed to connect to Claude API: {e}") from e
        except anthropic.APIStatusError as e:
            raise AIAPIError(f"API error: {e.message}", status_code=e.status_code) from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Claude replied in {latency_ms}ms "
            f"({response.usage.input_tokens + response.usage.output_tokens} tokens)"
        )

        text = ""
        if response.content:
            text = response.content[0].text
        return text.strip()

    def answer(self, question: str, book_context: str, note_context: str | None = None) -> str:
        """Answer a question about the book."""
        content = question
        if note_context:
            content = f"{note_context}\n\n{question}"
        return self._complete([{"role": "user", "content": content}], book_context)

    def reply(self, messages: list["ChatMessage"], book_context: str) -> str:
        """Continue a chat thread."""
        api_messages = to_api_messages(messages)
        if not api_messages:
            raise AIAPIError("Chat thread has no user message to reply to")
        return self._complete(api_messages, book_context)

    def session_insight(self, book_context: str, notes: list["Note"]) -> str:
        """Summarize a reading session from its notes."""
        prompt = INSIGHT_PROMPT.format(notes=format_notes(notes))
        return self._complete([{"role": "user", "content": prompt}], book_context)


__all__ = [
    "ClaudeAnswerService",
    "ClaudeClientConfig",
    "INSIGHT_PROMPT",
    "SYSTEM_PROMPT",
    "format_notes",
    "to_api_messages",
]
