"""Unit tests for the AI answer services.

Tests Claude error mapping and message conversion with the anthropic
client patched, and the mock service.
"""

import os
from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from marginalia.ai import (
    AIAPIError,
    AIAuthError,
    AIConnectivityError,
    AITimeoutError,
    MockAnswerService,
    create_answer_service,
)
from marginalia.ai.client import (
    ClaudeAnswerService,
    ClaudeClientConfig,
    format_notes,
    to_api_messages,
)
from marginalia.chat import ChatMessage, ChatRole, MessageStatus
from marginalia.config import AIConfig
from marginalia.notes import Note, NoteType

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def api_response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(text=text)]
    response.usage.input_tokens = 10
    response.usage.output_tokens = 5
    return response


class TestClaudeClientConfig:
    """Test configuration from the environment."""

    def test_from_env(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}):
            config = ClaudeClientConfig.from_env(model="claude-test", max_tokens=100)

        assert config.api_key == "sk-test"
        assert config.model == "claude-test"
        assert config.max_tokens == 100

    def test_missing_key(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": ""}):
            with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
                ClaudeClientConfig.from_env()


class TestToApiMessages:
    """Test chat thread conversion."""

    def test_skips_system_and_failed(self) -> None:
        messages = [
            ChatMessage(role=ChatRole.SYSTEM, content="setup"),
            ChatMessage(role=ChatRole.USER, content="lost", status=MessageStatus.ERROR),
            ChatMessage(role=ChatRole.USER, content="Hi"),
            ChatMessage(role=ChatRole.ASSISTANT, content="Hello"),
        ]

        assert to_api_messages(messages) == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
        ]

    def test_merges_consecutive_roles(self) -> None:
        """Test two user turns in a row become one."""
        messages = [
            ChatMessage(role=ChatRole.USER, content="Quote: a"),
            ChatMessage(role=ChatRole.USER, content="Quote: b"),
        ]

        assert to_api_messages(messages) == [{"role": "user", "content": "Quote: a\n\nQuote: b"}]

    def test_starts_with_user(self) -> None:
        messages = [
            ChatMessage(role=ChatRole.ASSISTANT, content="orphan"),
            ChatMessage(role=ChatRole.USER, content="Hi"),
        ]

        assert to_api_messages(messages)[0] == {"role": "user", "content": "Hi"}

    def test_format_notes(self) -> None:
        notes = [
            Note(book_id="b1", content="The sea", type=NoteType.QUOTE),
            Note(book_id="b1", content="Why?", type=NoteType.QUESTION),
        ]

        assert format_notes(notes) == "- Quote: The sea\n- Question: Why?"


class TestClaudeAnswerService:
    """Test the Claude service with the API client patched."""

    @pytest.fixture
    def client(self):
        with patch("marginalia.ai.client.anthropic.Anthropic") as anthropic_cls:
            yield anthropic_cls.return_value

    @pytest.fixture
    def service(self, client: MagicMock) -> ClaudeAnswerService:
        return ClaudeAnswerService(ClaudeClientConfig(api_key="sk-test", timeout_seconds=5.0))

    def test_answer(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        """Test a question is sent with the book context as system prompt."""
        client.messages.create.return_value = api_response("  Because of the spice.  ")

        answer = service.answer("Why Arrakis?", 'Book: "Dune".', "The reader is on page 40.")

        assert answer == "Because of the spice."
        kwargs = client.messages.create.call_args.kwargs
        assert 'Book: "Dune".' in kwargs["system"]
        assert kwargs["messages"] == [
            {"role": "user", "content": "The reader is on page 40.\n\nWhy Arrakis?"}
        ]

    def test_reply(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        client.messages.create.return_value = api_response("Sure.")

        reply = service.reply([ChatMessage(role=ChatRole.USER, content="Hi")], "")

        assert reply == "Sure."

    def test_reply_without_user_message(self, service: ClaudeAnswerService) -> None:
        with pytest.raises(AIAPIError):
            service.reply([ChatMessage(role=ChatRole.SYSTEM, content="setup")], "")

    def test_session_insight(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        """Test notes are listed in the insight prompt."""
        client.messages.create.return_value = api_response("Fear is central.")
        notes = [Note(book_id="b1", content="Fear is the mind-killer", type=NoteType.QUOTE)]

        assert service.session_insight("", notes) == "Fear is central."
        prompt = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "- Quote: Fear is the mind-killer" in prompt

    def test_empty_content(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        response = api_response("")
        response.content = []
        client.messages.create.return_value = response

        assert service.answer("?", "") == ""

    def test_auth_error(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        client.messages.create.side_effect = anthropic.AuthenticationError(
            "bad key", response=httpx.Response(401, request=REQUEST), body=None
        )

        with pytest.raises(AIAuthError):
            service.answer("?", "")

    def test_timeout(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        client.messages.create.side_effect = anthropic.APITimeoutError(request=REQUEST)

        with pytest.raises(AITimeoutError):
            service.answer("?", "")

    def test_connection_error(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        client.messages.create.side_effect = anthropic.APIConnectionError(request=REQUEST)

        with pytest.raises(AIConnectivityError):
            service.answer("?", "")

    def test_status_error(self, service: ClaudeAnswerService, client: MagicMock) -> None:
        """Test API status errors keep their status code."""
        client.messages.create.side_effect = anthropic.InternalServerError(
            "overloaded", response=httpx.Response(529, request=REQUEST), body=None
        )

        with pytest.raises(AIAPIError) as exc_info:
            service.answer("?", "")

        assert exc_info.value.status_code == 529


class TestMockAnswerService:
    """Test the mock answer service."""

    def test_records_calls(self) -> None:
        service = MockAnswerService(response="ok")

        assert service.answer("Why?", "") == "ok"
        assert service.session_insight("", [Note(book_id="b1", content="n")]) == "ok"

        assert service.calls == [("answer", "Why?"), ("session_insight", "n")]
        assert service.call_count == 2

    def test_error(self) -> None:
        service = MockAnswerService()
        service.set_error("down")

        with pytest.raises(AIAPIError, match="down") as exc_info:
            service.answer("Why?", "")

        assert exc_info.value.status_code == 500

    def test_set_response_clears_error(self) -> None:
        service = MockAnswerService()
        service.set_error("down")
        service.set_response("back")

        assert service.answer("?", "") == "back"


class TestCreateAnswerService:
    """Test answer service factory."""

    def test_mock_flag(self) -> None:
        assert isinstance(create_answer_service(AIConfig(), use_mock=True), MockAnswerService)

    def test_mock_provider(self) -> None:
        assert isinstance(create_answer_service(AIConfig(provider="mock")), MockAnswerService)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown AI provider"):
            create_answer_service(AIConfig(provider="other"))

    def test_claude(self) -> None:
        with (
            patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-test"}),
            patch("marginalia.ai.client.anthropic.Anthropic"),
        ):
            service = create_answer_service(AIConfig(model="claude-test"))

        assert isinstance(service, ClaudeAnswerService)
