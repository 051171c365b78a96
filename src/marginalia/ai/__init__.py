"""AI text service module for Marginalia.

Provides the AnswerService protocol with a Claude implementation and a mock.
"""

from typing import TYPE_CHECKING

from .errors import (
    AIAPIError,
    AIAuthError,
    AIConnectivityError,
    AIServiceError,
    AITimeoutError,
)
from .mock import MockAnswerService
from .service import AnswerService

if TYPE_CHECKING:
    from ..config import AIConfig


def create_answer_service(
    config: "AIConfig | None" = None,
    use_mock: bool = False,
) -> AnswerService:
    """Create an answer service instance.

    Args:
        config: AI configuration
        use_mock: If True, return mock implementation for testing

    Returns:
        AnswerService implementation

    Raises:
        ValueError: If the provider is unknown or ANTHROPIC_API_KEY is missing
    """
    provider = config.provider if config is not None else "claude"
    if use_mock or provider == "mock":
        return MockAnswerService()

    if provider != "claude":
        raise ValueError(f"Unknown AI provider: {provider}")

    from .client import ClaudeAnswerService, ClaudeClientConfig

    overrides = {}
    if config is not None:
        overrides = {
            "model": config.model,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "timeout_seconds": config.timeout_seconds,
        }
    return ClaudeAnswerService(ClaudeClientConfig.from_env(**overrides))


__all__ = [
    "AIAPIError",
    "AIAuthError",
    "AIConnectivityError",
    "AIServiceError",
    "AITimeoutError",
    "AnswerService",
    "MockAnswerService",
    "create_answer_service",
]
