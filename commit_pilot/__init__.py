"""Token-budget-aware commit message generation."""

from commit_pilot.config import AppConfig, TokenBudget, load_config
from commit_pilot.engine import EngineConfig, Provider, resolve_engine_config
from commit_pilot.errors import (
    ApiKeyMissingError,
    AuthenticationFailedError,
    CommitPilotError,
    CompletionFailedError,
    ConfigurationError,
    ErrorKind,
    TokenLimitExceededError,
)
from commit_pilot.llm import ChatCommitPilot
from commit_pilot.schemas import ChatMessage, CompletionResult, RequestParams

__all__ = [
    "ApiKeyMissingError",
    "AppConfig",
    "AuthenticationFailedError",
    "ChatCommitPilot",
    "ChatMessage",
    "CommitPilotError",
    "CompletionFailedError",
    "CompletionResult",
    "ConfigurationError",
    "EngineConfig",
    "ErrorKind",
    "Provider",
    "RequestParams",
    "TokenBudget",
    "TokenLimitExceededError",
    "load_config",
    "resolve_engine_config",
]
