"""Upstream chat service client."""

from lobe_relay.upstream.client import UpstreamClient
from lobe_relay.upstream.token import create_auth_token

__all__ = ["UpstreamClient", "create_auth_token"]
