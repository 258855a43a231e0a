"""HTTP client for the upstream chat service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog

from lobe_relay.config import Settings
from lobe_relay.transcode.models import ChatCompletionRequest
from lobe_relay.upstream.token import create_auth_token

logger = structlog.get_logger()

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)

# Fixed sampling parameters; the upstream ignores the caller's.
SAMPLING_PARAMS = {
    "frequency_penalty": 0,
    "presence_penalty": 0,
    "temperature": 0.6,
    "top_p": 1,
}


def remap_role(role: str) -> str:
    """The upstream has no system role; system prompts are sent as user turns."""
    return "user" if role == "system" else role


class UpstreamClient:
    """Opens streaming chat calls against ``{BASE_URL}/api/chat/openai``.

    The upstream always streams, whatever the caller asked for; the body is
    forced to ``stream: true`` and the caller's mode only affects how the
    reply is re-emitted.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self._settings.upstream_timeout,
                verify=self._settings.upstream_verify_tls,
                headers=self._default_headers(),
            )
        return self._http_client

    def _default_headers(self) -> dict[str, str]:
        base_url = self._settings.base_url
        return {
            "accept": "*/*",
            "accept-language": "en-US,en;q=0.9",
            "cache-control": "no-cache",
            "content-type": "application/json",
            "oai-language": "en-US",
            "origin": base_url,
            "pragma": "no-cache",
            "referer": base_url,
            "user-agent": _USER_AGENT,
        }

    def build_body(self, request: ChatCompletionRequest) -> dict:
        """Reshape the caller's request into the upstream body."""
        return {
            "model": request.model or self._settings.default_model,
            "stream": True,
            **SAMPLING_PARAMS,
            "messages": [
                {"content": message.content, "role": remap_role(message.role)}
                for message in request.messages
            ],
        }

    @asynccontextmanager
    async def open_stream(
        self, request: ChatCompletionRequest
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Send the request and yield the upstream body as raw chunks.

        Raises ``httpx.HTTPStatusError`` for a non-2xx upstream status and
        ``httpx.TransportError`` if the connection fails; both before any
        chunk is produced.
        """
        client = await self._get_http_client()
        body = self.build_body(request)
        headers = {"x-lobe-chat-auth": create_auth_token(self._settings.access_code)}

        logger.info(
            "upstream_stream_open",
            url=self._settings.upstream_url,
            model=body["model"],
            message_count=len(body["messages"]),
        )

        async with client.stream(
            "POST", self._settings.upstream_url, json=body, headers=headers
        ) as response:
            response.raise_for_status()
            yield response.aiter_bytes()

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
