"""lobe-relay: OpenAI-compatible chat-completions proxy for data-line streaming upstreams."""

__version__ = "0.1.0"
