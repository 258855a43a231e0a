"""Build caller-facing chat-completion envelopes from text deltas."""

from __future__ import annotations

import random
import string
import time
from collections.abc import AsyncGenerator, AsyncIterable

import structlog

from lobe_relay.transcode.models import (
    AssistantMessage,
    ChatCompletion,
    ChatCompletionChunk,
    ChunkChoice,
    ChunkDelta,
    CompletionChoice,
)

logger = structlog.get_logger()

_ID_ALPHABET = string.ascii_letters + string.digits
_ID_LENGTH = 28


def generate_completion_id(prefix: str = "chatcmpl-") -> str:
    """Return ``prefix`` followed by 28 random alphanumerics."""
    return prefix + "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


def format_sse_event(payload: str) -> bytes:
    """Frame one JSON payload as a server-sent event."""
    return f"data: {payload}\n\n".encode("utf-8")


class ResponseSynthesizer:
    """Turns one request's deltas into either one envelope or a frame stream.

    The completion id and ``created`` timestamp are fixed at construction and
    shared by every envelope produced for the request.

    Args:
        model: Model name echoed back to the caller.
        forward_empty: Emit a frame even for empty deltas (streaming only).
    """

    def __init__(self, model: str, forward_empty: bool = False) -> None:
        self.model = model
        self.forward_empty = forward_empty
        self.completion_id = generate_completion_id()
        self.created = int(time.time())

    async def aggregate(self, deltas: AsyncIterable[str]) -> ChatCompletion:
        """Collect every delta and return the complete response."""
        parts: list[str] = []
        async for delta in deltas:
            parts.append(delta)

        content = "".join(parts)
        logger.info(
            "completion_aggregated",
            completion_id=self.completion_id,
            delta_count=len(parts),
            content_length=len(content),
        )
        return ChatCompletion(
            id=self.completion_id,
            created=self.created,
            model=self.model,
            choices=[CompletionChoice(message=AssistantMessage(content=content))],
        )

    def chunk(self, delta: str) -> ChatCompletionChunk:
        """Wrap a single delta in an incremental envelope."""
        return ChatCompletionChunk(
            id=self.completion_id,
            created=self.created,
            model=self.model,
            choices=[ChunkChoice(delta=ChunkDelta(content=delta))],
        )

    async def frames(self, deltas: AsyncIterable[str]) -> AsyncGenerator[bytes, None]:
        """Yield one ``data: <json>\\n\\n`` frame per delta as it arrives.

        Empty deltas are skipped unless ``forward_empty`` is set. No terminal
        frame is emitted; the caller ends the stream by closing it.
        """
        frame_count = 0
        async for delta in deltas:
            if not delta and not self.forward_empty:
                continue
            frame_count += 1
            yield format_sse_event(self.chunk(delta).model_dump_json())

        logger.info(
            "completion_streamed",
            completion_id=self.completion_id,
            frame_count=frame_count,
        )
