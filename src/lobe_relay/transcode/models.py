"""Request and response models for the chat-completions surface."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One message of the caller's conversation. Any role string is accepted."""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: Any = None


class ChatCompletionRequest(BaseModel):
    """Inbound chat-completion request body."""

    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    messages: list[ChatMessage]
    stream: bool = False


class AssistantMessage(BaseModel):
    role: str = "assistant"
    content: str


class CompletionChoice(BaseModel):
    index: int = 0
    finish_reason: str = "stop"
    message: AssistantMessage


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    """Aggregated response: the whole reply in one object."""

    id: str
    created: int
    model: str
    object: Literal["chat.completion"] = "chat.completion"
    choices: list[CompletionChoice]
    usage: Usage = Field(default_factory=Usage)


class ChunkDelta(BaseModel):
    content: str
    role: str = "assistant"
    finish_reason: str | None = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChunkDelta


class ChatCompletionChunk(BaseModel):
    """One incremental frame of a streamed response."""

    id: str
    created: int
    model: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    choices: list[ChunkChoice]
