import os
from typing import Callable, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, PositiveInt, SecretStr, ValidationError

from commit_pilot.engine import (
    DEFAULT_MODEL,
    EngineConfig,
    Provider,
    resolve_engine_config,
)
from commit_pilot.errors import ApiKeyMissingError, ConfigurationError


DEFAULT_MAX_TOKENS_INPUT = 4096
DEFAULT_MAX_TOKENS_OUTPUT = 500

API_KEY_ENV_VAR = "OPENAI_API_KEY"
PROVIDER_ENV_VAR = "COMMIT_PILOT_PROVIDER"
BASE_PATH_ENV_VAR = "COMMIT_PILOT_BASE_PATH"
AZURE_API_VERSION_ENV_VAR = "COMMIT_PILOT_AZURE_API_VERSION"
MODEL_ENV_VAR = "COMMIT_PILOT_MODEL"
MAX_TOKENS_INPUT_ENV_VAR = "COMMIT_PILOT_TOKENS_MAX_INPUT"
MAX_TOKENS_OUTPUT_ENV_VAR = "COMMIT_PILOT_TOKENS_MAX_OUTPUT"

SYSTEM_PROMPT = """
You are a commit message generator. Write a **Conventional Commit** message for the git diff the user provides.

## RULES
- Use the format `<type>[optional scope]: <description>`, optionally followed by a blank line and a body.
- Allowed types: feat, fix, build, chore, ci, docs, style, refactor, perf, test.
- Mark breaking changes with `!` after the type/scope and a `BREAKING CHANGE:` footer.
- Use the imperative mood in the description ("add", not "added").
- Keep every line at 100 characters or fewer.
- Reply with the commit message only: no code fences, no commentary.

## EXAMPLES
docs: correct spelling of CHANGELOG

feat(lang): add Polish language

fix: prevent racing of requests

- Introduce a request id and a reference to latest request.
- Dismiss incoming responses other than from latest request.
"""


class TokenBudget(BaseModel):
    """Input/output token ceilings for a single completion request."""

    model_config = ConfigDict(frozen=True)

    max_input_tokens: PositiveInt = DEFAULT_MAX_TOKENS_INPUT
    max_output_tokens: PositiveInt = DEFAULT_MAX_TOKENS_OUTPUT

    @property
    def max_request_tokens(self) -> int:
        """Tokens left for the prompt once the output allowance is reserved."""
        return self.max_input_tokens - self.max_output_tokens


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    provider: Provider = Provider.OPENAI
    base_path: Optional[str] = None
    azure_api_version: Optional[str] = None
    model: str = DEFAULT_MODEL
    budget: TokenBudget = TokenBudget()

    def engine(self) -> EngineConfig:
        return resolve_engine_config(
            self.provider,
            self.api_key.get_secret_value(),
            self.base_path,
            self.azure_api_version,
            model=self.model,
        )


def _read_int(get_env: Callable[[str], Optional[str]], name: str, default: int) -> int:
    raw = get_env(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def load_config(
    get_env: Callable[[str], Optional[str]] = os.getenv,
    use_dotenv: bool = True,
) -> AppConfig:
    """Read the application configuration from the environment.

    Args:
        get_env: Function to retrieve environment variables.
        use_dotenv: Whether to load a ``.env`` file into the environment first.

    Returns:
        The validated, immutable configuration.

    Raises:
        ApiKeyMissingError: If OPENAI_API_KEY is not set.
        ConfigurationError: If a token limit is not a positive integer or the
            provider settings are incomplete.
    """
    if use_dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    api_key = get_env(API_KEY_ENV_VAR)
    if not api_key:
        raise ApiKeyMissingError(f"Missing {API_KEY_ENV_VAR}. Set it in your .env file.")

    try:
        budget = TokenBudget(
            max_input_tokens=_read_int(
                get_env, MAX_TOKENS_INPUT_ENV_VAR, DEFAULT_MAX_TOKENS_INPUT
            ),
            max_output_tokens=_read_int(
                get_env, MAX_TOKENS_OUTPUT_ENV_VAR, DEFAULT_MAX_TOKENS_OUTPUT
            ),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid token limits: {e}") from e

    config = AppConfig(
        api_key=api_key,
        provider=Provider.parse(get_env(PROVIDER_ENV_VAR)),
        base_path=get_env(BASE_PATH_ENV_VAR) or None,
        azure_api_version=get_env(AZURE_API_VERSION_ENV_VAR) or None,
        model=get_env(MODEL_ENV_VAR) or DEFAULT_MODEL,
        budget=budget,
    )
    # Surface provider misconfiguration at startup rather than on first request.
    config.engine()
    if config.provider is Provider.AZURE and not config.base_path:
        raise ConfigurationError(
            f"{BASE_PATH_ENV_VAR} is required for the azure provider"
        )
    return config
