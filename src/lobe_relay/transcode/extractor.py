"""Pick payload fragments out of upstream protocol lines."""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable

PAYLOAD_PREFIX = "data: "
DEFAULT_SENTINEL = "[DONE]"


async def iter_payloads(
    lines: AsyncIterable[str],
    sentinel: str = DEFAULT_SENTINEL,
    prefix: str = PAYLOAD_PREFIX,
) -> AsyncGenerator[str, None]:
    """Yield the payload of every ``data: `` line.

    Lines without the prefix (comments, ``event:`` fields, blank keep-alive
    lines) are skipped. A payload equal to ``sentinel`` ends the sequence
    without being yielded; an empty sentinel never matches.
    """
    async for line in lines:
        if not line.startswith(prefix):
            continue
        payload = line[len(prefix):]
        if sentinel and payload == sentinel:
            return
        yield payload
