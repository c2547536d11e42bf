from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional


SETUP_HELP = (
    "Set OPENAI_API_KEY in your environment or .env file. "
    "Run `commit-pilot --help` for the full list of settings."
)


class ErrorKind(str, Enum):
    """Categories a failed generation is reported under."""

    TOO_MUCH_TOKENS = "too_much_tokens"
    AUTH_ERROR = "auth_error"
    UNKNOWN_ERROR = "unknown_error"


class CommitPilotError(Exception):
    """Base exception for commit-pilot errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class TokenLimitExceededError(CommitPilotError):
    """Raised when the prompt does not fit the input token budget."""

    kind = ErrorKind.TOO_MUCH_TOKENS

    def __init__(self, request_tokens: int, allowed_tokens: int) -> None:
        super().__init__(
            f"Prompt is too long. Request tokens: {request_tokens}, "
            f"allowed: {allowed_tokens}"
        )
        self.request_tokens = request_tokens
        self.allowed_tokens = allowed_tokens


class AuthenticationFailedError(CommitPilotError):
    """Raised when the completion service rejects the credentials."""

    kind = ErrorKind.AUTH_ERROR

    def __init__(self, detail: str, provider_message: Optional[str] = None) -> None:
        super().__init__(detail)
        self.provider_message = provider_message


class CompletionFailedError(CommitPilotError):
    """Raised for any other network or service failure."""

    kind = ErrorKind.UNKNOWN_ERROR


class ApiKeyMissingError(CommitPilotError):
    """Raised when OPENAI_API_KEY is not found."""


class ConfigurationError(CommitPilotError):
    """Raised when a configuration value is missing or malformed."""


def provider_error_message(error: BaseException) -> Optional[str]:
    """Return the provider-supplied message carried by an HTTP error body, if any.

    Accepts both the unwrapped ``{"message": ...}`` shape and the raw
    ``{"error": {"message": ...}}`` response body.
    """

    body: Any = getattr(error, "body", None)
    if not isinstance(body, Mapping):
        return None

    inner = body.get("error", body)
    if not isinstance(inner, Mapping):
        return None

    message = inner.get("message")
    return message if isinstance(message, str) and message else None


def classify_error(error: BaseException) -> CommitPilotError:
    """Map a failed completion call onto the categorized error hierarchy.

    The decision is made on capabilities (an HTTP ``status_code`` and a
    structured ``body``) rather than on the concrete client exception type.
    """

    if isinstance(error, CommitPilotError):
        return error

    detail = str(error) or error.__class__.__name__
    if getattr(error, "status_code", None) == 401:
        return AuthenticationFailedError(detail, provider_error_message(error))

    return CompletionFailedError(detail)
