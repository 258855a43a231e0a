"""aiohttp middlewares and signals: CORS, JSON 404s and bearer-token auth."""

import structlog
from aiohttp import web
from aiohttp.typedefs import Handler

from lobe_relay.api.errors import not_found_response
from lobe_relay.config import Settings

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

PROTECTED_PREFIX = "/v1/"


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Answer every pre-flight request directly."""
    if request.method == "OPTIONS":
        return web.Response(status=200)
    return await handler(request)


async def add_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    """on_response_prepare hook; also covers streamed responses."""
    response.headers.update(CORS_HEADERS)


@web.middleware
async def not_found_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Render unmatched routes as a JSON error instead of aiohttp's text page."""
    try:
        return await handler(request)
    except (web.HTTPNotFound, web.HTTPMethodNotAllowed):
        logger.info("route_not_found", method=request.method, path=request.path)
        return not_found_response()


@web.middleware
async def auth_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Require ``Authorization: Bearer <AUTH_TOKEN>`` on matched /v1/ routes.

    Disabled when AUTH_TOKEN is empty.
    """
    settings: Settings = request.app["settings"]
    if (
        settings.auth_token
        and request.path.startswith(PROTECTED_PREFIX)
        and request.match_info.http_exception is None
    ):
        presented = request.headers.get("Authorization")
        if presented != f"Bearer {settings.auth_token}":
            logger.warning("auth_rejected", path=request.path, has_header=presented is not None)
            return web.Response(status=401, text="Unauthorized")
    return await handler(request)
