from typing import Any, Literal, Optional, Union

from langchain_core.messages import BaseMessage
from pydantic import BaseModel, ConfigDict, Field

from commit_pilot.errors import ErrorKind


Role = Literal["system", "user", "assistant"]

_LANGCHAIN_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @classmethod
    def from_message(cls, message: Union["ChatMessage", BaseMessage]) -> "ChatMessage":
        """Coerce a LangChain message (or an existing ChatMessage) into a ChatMessage."""

        if isinstance(message, ChatMessage):
            return message

        role = _LANGCHAIN_ROLES.get(message.type)
        if role is None:
            raise ValueError(f"Unsupported message type: {message.type!r}")
        if not isinstance(message.content, str):
            raise ValueError("Only plain text message content is supported")

        return cls(role=role, content=message.content)


class RequestParams(BaseModel):
    """Body of a single chat completion request."""

    model_config = ConfigDict(frozen=True)

    model: str
    messages: tuple[ChatMessage, ...]
    temperature: float = 0
    top_p: float = 0.1
    max_tokens: int = Field(gt=0)

    def to_payload(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [message.model_dump() for message in self.messages],
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
        }


class CompletionResult:
    def __init__(
        self,
        value: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
        error_message: Optional[str] = None,
    ):
        self.value = value
        self.kind = kind
        self.error_message = error_message

    @staticmethod
    def ok(value: Optional[str]) -> "CompletionResult":
        return CompletionResult(value=value)

    @staticmethod
    def err(kind: ErrorKind, msg: str) -> "CompletionResult":
        return CompletionResult(kind=kind, error_message=msg)

    def is_ok(self) -> bool:
        return self.kind is None

    def is_err(self) -> bool:
        return not self.is_ok()

    def __repr__(self) -> str:
        if self.is_ok():
            return f"CompletionResult.ok({self.value!r})"
        return f"CompletionResult.err({self.kind.value!r}, {self.error_message!r})"
