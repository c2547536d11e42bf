"""Resolution of provider-specific client settings."""

from __future__ import annotations

from enum import Enum
from typing import Optional, assert_never

import httpx
from openai import AsyncAzureOpenAI, AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from commit_pilot.errors import ConfigurationError
from commit_pilot.settings import commit_pilot_logger

logger = commit_pilot_logger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
AZURE_DEPLOYMENTS_PREFIX = "openai/deployments/"


class Provider(str, Enum):
    OPENAI = "openai"
    AZURE = "azure"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Provider":
        """Return the provider named by *value*, falling back to OpenAI."""

        if isinstance(value, Provider):
            return value

        normalized = (value or "").strip().lower()
        if not normalized:
            return cls.OPENAI

        try:
            return cls(normalized)
        except ValueError:
            logger.warning(
                "Unknown provider %r, falling back to %s", value, cls.OPENAI.value
            )
            return cls.OPENAI


class EngineConfig(BaseModel):
    """Immutable client settings for the completion service."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    api_key: SecretStr
    model: str
    base_url: Optional[str] = None
    azure_api_version: Optional[str] = None
    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)

    def build_client(self, http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
        """Create an async client that performs a single attempt per call.

        Azure gets an ``AsyncAzureOpenAI`` client, which authenticates with the
        ``api-key`` header only and adds the ``api-version`` query parameter.
        """

        logger.debug(
            "Building %s client (base_url=%s)", self.provider.value, self.base_url
        )
        if self.provider is Provider.AZURE:
            return AsyncAzureOpenAI(
                api_key=self.api_key.get_secret_value(),
                api_version=self.azure_api_version,
                base_url=self.base_url,
                max_retries=0,
                http_client=http_client,
            )

        return AsyncOpenAI(
            api_key=self.api_key.get_secret_value(),
            base_url=self.base_url,
            default_headers=self.headers or None,
            default_query=self.query or None,
            max_retries=0,
            http_client=http_client,
        )


def resolve_engine_config(
    provider: Provider | str | None,
    api_key: str,
    base_path: Optional[str] = None,
    azure_api_version: Optional[str] = None,
    *,
    model: str = DEFAULT_MODEL,
) -> EngineConfig:
    """Derive the client settings for *provider*. No network access happens here.

    Azure authenticates with a raw ``api-key`` header and an ``api-version``
    query parameter; a supplied base path is extended with the deployment
    segment for *model*. Every other provider uses *base_path* verbatim with
    plain bearer authentication.
    """

    selected = Provider.parse(provider)

    if selected is Provider.AZURE:
        if not azure_api_version:
            raise ConfigurationError(
                "COMMIT_PILOT_AZURE_API_VERSION is required for the azure provider"
            )
        return EngineConfig(
            provider=selected,
            api_key=api_key,
            model=model,
            base_url=base_path + AZURE_DEPLOYMENTS_PREFIX + model if base_path else None,
            azure_api_version=azure_api_version,
            headers={"api-key": api_key},
            query={"api-version": azure_api_version},
        )
    elif selected is Provider.OPENAI:
        return EngineConfig(
            provider=selected,
            api_key=api_key,
            model=model,
            base_url=base_path or None,
        )
    else:
        assert_never(selected)
