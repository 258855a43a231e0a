"""Pytest fixtures for lobe-relay tests."""

import os
from unittest.mock import patch

import httpx
import pytest

from lobe_relay.config import Settings


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "BASE_URL": "http://upstream.test",
        "ACCESS_CODE": "test-access-code",
        "HOST": "127.0.0.1",
        "PORT": "3000",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def settings(mock_env_vars) -> Settings:
    """Create Settings instance with mocked environment."""
    return Settings(_env_file=None)


def make_chunk_stream(chunks):
    """Async iterable yielding the given byte chunks in order."""
    async def _stream():
        for chunk in chunks:
            yield chunk

    return _stream()


async def collect(gen):
    """Collect all items from an async iterable into a list."""
    result = []
    async for item in gen:
        result.append(item)
    return result


def upstream_transport(chunks=None, status=200, error=None, captured=None):
    """httpx MockTransport standing in for the upstream chat service.

    Streams ``chunks`` as the response body, answers with ``status``, or
    raises ``error`` instead of responding. Requests are appended to
    ``captured`` when given.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if error is not None:
            raise error
        return httpx.Response(status, content=make_chunk_stream(chunks or []))

    return httpx.MockTransport(handler)
