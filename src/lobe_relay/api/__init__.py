"""HTTP API module."""

from lobe_relay.api.handlers import chat_completions, health, index
from lobe_relay.api.middleware import (
    add_cors_headers,
    auth_middleware,
    cors_middleware,
    not_found_middleware,
)

__all__ = [
    "add_cors_headers",
    "auth_middleware",
    "chat_completions",
    "cors_middleware",
    "health",
    "index",
    "not_found_middleware",
]
