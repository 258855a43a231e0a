"""Streaming transcoder: upstream data lines to chat-completion envelopes."""

from lobe_relay.transcode.decoder import ContentDecoder, DecodeMode
from lobe_relay.transcode.extractor import iter_payloads
from lobe_relay.transcode.lines import LineReassembler, iter_lines
from lobe_relay.transcode.models import ChatCompletion, ChatCompletionChunk, ChatCompletionRequest
from lobe_relay.transcode.pipeline import Transcoder
from lobe_relay.transcode.synthesizer import ResponseSynthesizer

__all__ = [
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ContentDecoder",
    "DecodeMode",
    "LineReassembler",
    "ResponseSynthesizer",
    "Transcoder",
    "iter_lines",
    "iter_payloads",
]
