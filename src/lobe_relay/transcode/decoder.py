"""Decode upstream payload fragments into plain text deltas."""

from __future__ import annotations

import json
from enum import Enum

import structlog

logger = structlog.get_logger()


class DecodeMode(str, Enum):
    """Fragment decoding policy, fixed per deployment by the upstream's contract."""

    JSON = "json"
    RAW = "raw"


class ContentDecoder:
    """Normalizes one payload fragment into a text delta.

    ``JSON`` mode expects each fragment to be a JSON string literal
    (``"Hi"`` -> ``Hi``). Fragments that fail to parse, or parse to anything
    other than a string, are logged and dropped.

    ``RAW`` mode passes the fragment through, removing one pair of
    surrounding double quotes if present. It never drops a fragment.

    ``decode`` never raises; a bad fragment only costs its own delta.
    """

    def __init__(self, mode: DecodeMode = DecodeMode.JSON) -> None:
        self.mode = DecodeMode(mode)

    def decode(self, fragment: str) -> str | None:
        """Return the delta for ``fragment``, or None if it yields nothing."""
        if self.mode is DecodeMode.RAW:
            return _unquote(fragment)
        return _decode_json(fragment)


def _unquote(fragment: str) -> str:
    if len(fragment) >= 2 and fragment.startswith('"') and fragment.endswith('"'):
        return fragment[1:-1]
    return fragment


def _decode_json(fragment: str) -> str | None:
    try:
        value = json.loads(fragment)
    except (ValueError, RecursionError) as e:
        logger.warning(
            "fragment_decode_failed",
            reason=str(e),
            fragment_preview=fragment[:50],
        )
        return None

    if not isinstance(value, str):
        logger.warning(
            "fragment_not_string",
            value_type=type(value).__name__,
            fragment_preview=fragment[:50],
        )
        return None
    return value
