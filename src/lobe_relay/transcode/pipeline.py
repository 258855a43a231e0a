"""Compose the transcoding stages for one upstream byte stream."""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable

import structlog

from lobe_relay.transcode.decoder import ContentDecoder, DecodeMode
from lobe_relay.transcode.extractor import DEFAULT_SENTINEL, PAYLOAD_PREFIX, iter_payloads
from lobe_relay.transcode.lines import iter_lines
from lobe_relay.transcode.synthesizer import ResponseSynthesizer

logger = structlog.get_logger()


class Transcoder:
    """Deployment-wide transcoding policy.

    Holds no per-request state: ``deltas`` builds a fresh reassembler and
    generator chain for every stream it is given, so one instance is shared
    by all concurrent requests.
    """

    def __init__(
        self,
        decode_mode: DecodeMode = DecodeMode.JSON,
        sentinel: str = DEFAULT_SENTINEL,
    ) -> None:
        self.decoder = ContentDecoder(decode_mode)
        self.sentinel = sentinel

    @property
    def forward_empty(self) -> bool:
        # The raw-text upstream contract forwards every fragment, even empty ones.
        return self.decoder.mode is DecodeMode.RAW

    async def deltas(self, chunks: AsyncIterable[bytes]) -> AsyncGenerator[str, None]:
        """Yield the text deltas carried by an upstream byte stream, in order."""
        stop_line = f"{PAYLOAD_PREFIX}{self.sentinel}" if self.sentinel else None
        lines = iter_lines(chunks, stop_line=stop_line)
        fragment_count = 0
        dropped = 0
        async for fragment in iter_payloads(lines, sentinel=self.sentinel):
            fragment_count += 1
            delta = self.decoder.decode(fragment)
            if delta is None:
                dropped += 1
                continue
            yield delta

        logger.debug(
            "transcode_complete",
            fragment_count=fragment_count,
            dropped_fragments=dropped,
        )

    def synthesizer(self, model: str) -> ResponseSynthesizer:
        """Create the per-request synthesizer matching this policy."""
        return ResponseSynthesizer(model, forward_empty=self.forward_empty)
