"""Module for generating commit messages through a chat completion service."""

import logging
from typing import Any, List, Optional, Sequence, Union

import httpx
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from openai import AsyncOpenAI

from commit_pilot.config import SYSTEM_PROMPT, AppConfig, TokenBudget
from commit_pilot.engine import EngineConfig
from commit_pilot.errors import (
    SETUP_HELP,
    AuthenticationFailedError,
    CommitPilotError,
    ErrorKind,
    TokenLimitExceededError,
    classify_error,
)
from commit_pilot.schemas import ChatMessage, CompletionResult, RequestParams
from commit_pilot.settings import commit_pilot_logger
from commit_pilot.tokens import TokenCounter, count_request_tokens, count_tokens


MessageLike = Union[ChatMessage, BaseMessage]


class ChatCommitPilot:
    """Turn a prompt into a commit message with a single completion call.

    Every call counts the prompt tokens first and rejects prompts that do not
    fit the input budget before anything is sent over the network. Failures
    are logged together with the full request and re-raised as categorized
    ``CommitPilotError`` subclasses chained to the original exception.

    Attributes:
        engine (EngineConfig): Resolved client settings.
        budget (TokenBudget): Input/output token limits.
        client (AsyncOpenAI): Client used for the completion call.
    """

    DEFAULT_TEMPERATURE = 0
    DEFAULT_TOP_P = 0.1

    # --- Initialization ---
    def __init__(
        self,
        engine: EngineConfig,
        budget: Optional[TokenBudget] = None,
        client: Optional[AsyncOpenAI] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        token_counter: TokenCounter = count_tokens,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize ChatCommitPilot with configuration and dependencies.

        Args:
            engine: Resolved client settings.
            budget: Token limits; defaults apply when omitted.
            client: Pre-configured OpenAI client.
            http_client: HTTP client handed to the OpenAI client when one is built.
            token_counter: Function returning the token count of a text.
            logger: Logger used as the diagnostic channel.
        """
        self._logger = logger or commit_pilot_logger(__name__)
        self._logger.debug("Initializing ChatCommitPilot with model: %s", engine.model)

        self.engine = engine
        self.budget = budget or TokenBudget()
        self._token_counter = token_counter
        self._http_client = http_client

        self.client = client or self._build_client()

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "ChatCommitPilot":
        return cls(config.engine(), budget=config.budget, **kwargs)

    @property
    def model(self) -> str:
        return self.engine.model

    # --- Public methods ---
    async def generate_commit_message(
        self, messages: Sequence[MessageLike]
    ) -> Optional[str]:
        """Generate a commit message for the given prompt.

        Args:
            messages: Ordered conversation, usually a system and a user message.

        Returns:
            The generated text, or None when the service returned no content.

        Raises:
            TokenLimitExceededError: If the prompt exceeds the input budget.
            AuthenticationFailedError: If the service rejected the credentials.
            CompletionFailedError: If the completion call failed otherwise.
        """
        params = self._build_params(messages)
        self._logger.debug("Starting commit message generation")

        try:
            self._validate_num_tokens(params)
            completion = await self.client.chat.completions.create(
                **params.to_payload()
            )
            content = self._extract_content(completion)
        except Exception as error:
            categorized = self._report_failure(params, error)
            if categorized is error:
                raise
            raise categorized from error

        self._logger.debug("Commit message generation completed")
        return content

    async def complete(self, messages: Sequence[MessageLike]) -> CompletionResult:
        """Like ``generate_commit_message`` but reports failures as a result value."""

        try:
            return CompletionResult.ok(await self.generate_commit_message(messages))
        except CommitPilotError as error:
            return CompletionResult.err(
                error.kind or ErrorKind.UNKNOWN_ERROR, error.detail
            )

    async def aclose(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "ChatCommitPilot":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @staticmethod
    def build_messages(
        diff: str, system_prompt: str = SYSTEM_PROMPT
    ) -> List[BaseMessage]:
        """Build the message list for a git diff.

        Args:
            diff: Git diff content.
            system_prompt: System prompt for the model.

        Returns:
            System and human messages for the completion call.
        """
        return [
            SystemMessage(content=system_prompt),
            HumanMessage(content=f"Write a commit message for this git diff:\n{diff}"),
        ]

    # --- Private methods ---
    def _build_client(self) -> AsyncOpenAI:
        self._logger.debug("Building client for provider: %s", self.engine.provider.value)
        return self.engine.build_client(self._http_client)

    def _build_params(self, messages: Sequence[MessageLike]) -> RequestParams:
        return RequestParams(
            model=self.model,
            messages=tuple(ChatMessage.from_message(message) for message in messages),
            temperature=self.DEFAULT_TEMPERATURE,
            top_p=self.DEFAULT_TOP_P,
            max_tokens=self.budget.max_output_tokens,
        )

    def _validate_num_tokens(self, params: RequestParams) -> int:
        """Validate that the prompt fits the input budget.

        Raises:
            TokenLimitExceededError: If the prompt is too long.
        """
        request_tokens = count_request_tokens(params.messages, self._token_counter)
        allowed = self.budget.max_request_tokens
        self._logger.debug(
            "Request token count: %d (max allowed: %d)", request_tokens, allowed
        )

        if request_tokens > allowed:
            raise TokenLimitExceededError(request_tokens, allowed)

        return request_tokens

    @staticmethod
    def _extract_content(completion: Any) -> Optional[str]:
        message = getattr(completion.choices[0], "message", None)
        if message is None:
            return None
        return getattr(message, "content", None)

    def _report_failure(
        self, params: RequestParams, error: Exception
    ) -> CommitPilotError:
        """Log the failed request and return its categorized error."""

        self._logger.error("Request failed: %s", params.model_dump_json())
        self._logger.error("%s", str(error) or error.__class__.__name__)

        categorized = classify_error(error)
        if isinstance(categorized, AuthenticationFailedError):
            if categorized.provider_message:
                self._logger.error("%s", categorized.provider_message)
            self._logger.error("%s", SETUP_HELP)

        return categorized

    # --- Dunder methods ---
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(model={self.model!r}, "
            f"provider={self.engine.provider.value!r}, "
            f"max_input_tokens={self.budget.max_input_tokens}, "
            f"max_output_tokens={self.budget.max_output_tokens})"
        )

    def __str__(self) -> str:
        return (
            f"ChatCommitPilot using {self.model} with "
            f"{self.budget.max_input_tokens} max input tokens"
        )
