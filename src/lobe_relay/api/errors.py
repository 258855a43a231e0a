"""Caller-facing error envelopes."""

from aiohttp import web

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request."


def error_response(message: str, error_type: str, status: int) -> web.Response:
    """Build a ``{"status": false, "error": {...}}`` JSON response."""
    return web.json_response(
        {
            "status": False,
            "error": {
                "message": message,
                "type": error_type,
            },
        },
        status=status,
    )


def server_error_response() -> web.Response:
    return error_response(GENERIC_ERROR_MESSAGE, "server_error", 500)


def not_found_response() -> web.Response:
    return error_response(
        "The requested endpoint was not found.", "invalid_request_error", 404
    )
