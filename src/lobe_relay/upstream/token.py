"""Short-lived credential for the upstream's x-lobe-chat-auth header."""

import base64
import json
import time

TOKEN_PREFIX = "http_nosafe."
TOKEN_LIFETIME = 100


def create_auth_token(access_code: str = "", now: int | None = None) -> str:
    """Build the unsigned auth token the upstream expects.

    The token is ``http_nosafe.`` followed by the base64 of a compact JSON
    payload carrying the access code and a 100 second validity window.
    """
    issued_at = int(time.time()) if now is None else now
    payload = {
        "accessCode": access_code,
        "apiKey": "",
        "endpoint": "",
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME,
    }
    encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return TOKEN_PREFIX + base64.b64encode(encoded).decode("ascii")
