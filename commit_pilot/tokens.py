"""Token accounting for chat completion requests."""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Iterable

import tiktoken

from commit_pilot.schemas import ChatMessage


TokenCounter = Callable[[str], int]

ENCODING_NAME = "cl100k_base"

# Fixed per-message overhead charged by the chat completion endpoint.
MESSAGE_OVERHEAD_TOKENS = 4


@lru_cache(maxsize=1)
def _encoding() -> tiktoken.Encoding:
    return tiktoken.get_encoding(ENCODING_NAME)


def count_tokens(text: str) -> int:
    """Return the number of tokens in *text*."""

    return len(_encoding().encode(text, disallowed_special=()))


def count_request_tokens(
    messages: Iterable[ChatMessage], token_counter: TokenCounter = count_tokens
) -> int:
    """Return the input cost of *messages*, including per-message overhead."""

    return sum(
        token_counter(message.content) + MESSAGE_OVERHEAD_TOKENS
        for message in messages
    )
