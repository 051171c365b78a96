"""Error types for the AI text service.

Exceptions raised by answer service implementations.
"""


class AIServiceError(Exception):
    """Base exception for AI service errors."""

    pass


class AITimeoutError(AIServiceError):
    """Raised when an AI request times out."""

    pass


class AIAPIError(AIServiceError):
    """Raised when the AI API returns an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize API error.

        Args:
            message: Error message.
            status_code: HTTP status code if available.
        """
        super().__init__(message)
        self.status_code = status_code


class AIAuthError(AIServiceError):
    """Raised when authentication fails."""

    pass


class AIConnectivityError(AIServiceError):
    """Raised when the AI API cannot be reached."""

    pass


__all__ = [
    "AIAPIError",
    "AIAuthError",
    "AIConnectivityError",
    "AIServiceError",
    "AITimeoutError",
]
