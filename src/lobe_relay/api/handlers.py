"""Request handlers for the OpenAI-compatible surface."""

import structlog
from aiohttp import web
from pydantic import ValidationError

from lobe_relay.api.errors import error_response, server_error_response
from lobe_relay.config import Settings
from lobe_relay.transcode.models import ChatCompletionRequest
from lobe_relay.transcode.pipeline import Transcoder
from lobe_relay.transcode.synthesizer import ResponseSynthesizer
from lobe_relay.upstream.client import UpstreamClient

logger = structlog.get_logger()

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

BANNER = (
    "lobe-relay: OpenAI-compatible proxy\n"
    "Base URL: /v1\n"
    "ChatCompletion endpoint: POST /v1/chat/completions\n"
)


async def index(request: web.Request) -> web.Response:
    return web.Response(text=BANNER)


async def health(request: web.Request) -> web.Response:
    """Health check endpoint - no authentication required."""
    return web.json_response({"status": "healthy"})


def _describe_validation_error(error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
        for err in error.errors()
    )
    return f"Invalid request body: {details}"


async def chat_completions(request: web.Request) -> web.StreamResponse:
    """Relay one chat completion through the upstream and transcode the reply."""
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("invalid_request_body", reason="not_json")
        return error_response(
            "Request body must be valid JSON.", "invalid_request_error", 400
        )

    try:
        completion_request = ChatCompletionRequest.model_validate(payload)
    except ValidationError as e:
        logger.warning("invalid_request_body", reason="validation", error_count=e.error_count())
        return error_response(
            _describe_validation_error(e), "invalid_request_error", 400
        )

    settings: Settings = request.app["settings"]
    transcoder: Transcoder = request.app["transcoder"]
    model = completion_request.model or settings.default_model
    synthesizer = transcoder.synthesizer(model)

    logger.info(
        "chat_completion_request",
        method=request.method,
        path=request.path,
        message_count=len(completion_request.messages),
        stream=completion_request.stream,
        completion_id=synthesizer.completion_id,
    )

    if completion_request.stream:
        return await _stream_completion(request, completion_request, synthesizer)
    return await _aggregate_completion(request, completion_request, synthesizer)


async def _aggregate_completion(
    request: web.Request,
    completion_request: ChatCompletionRequest,
    synthesizer: ResponseSynthesizer,
) -> web.Response:
    upstream: UpstreamClient = request.app["upstream"]
    transcoder: Transcoder = request.app["transcoder"]

    try:
        async with upstream.open_stream(completion_request) as chunks:
            completion = await synthesizer.aggregate(transcoder.deltas(chunks))
    except Exception:
        logger.exception(
            "chat_completion_failed",
            completion_id=synthesizer.completion_id,
            stream=False,
        )
        return server_error_response()

    return web.json_response(completion.model_dump())


async def _stream_completion(
    request: web.Request,
    completion_request: ChatCompletionRequest,
    synthesizer: ResponseSynthesizer,
) -> web.StreamResponse:
    """Stream frames to the caller as deltas arrive.

    Headers are only sent with the first frame, so a failure before any
    frame still gets a JSON error. After that the stream is just ended.
    """
    upstream: UpstreamClient = request.app["upstream"]
    transcoder: Transcoder = request.app["transcoder"]
    response = web.StreamResponse(status=200, headers=SSE_HEADERS)

    try:
        async with upstream.open_stream(completion_request) as chunks:
            async for frame in synthesizer.frames(transcoder.deltas(chunks)):
                if not response.prepared:
                    await response.prepare(request)
                await response.write(frame)
    except Exception:
        logger.exception(
            "chat_completion_failed",
            completion_id=synthesizer.completion_id,
            stream=True,
            headers_sent=response.prepared,
        )
        if not response.prepared:
            return server_error_response()
        return response

    if not response.prepared:
        await response.prepare(request)
    return response
