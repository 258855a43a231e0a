"""Tests for response envelopes and SSE framing."""

import json
import re

import pytest

from conftest import collect
from lobe_relay.transcode.synthesizer import (
    ResponseSynthesizer,
    format_sse_event,
    generate_completion_id,
)


async def _deltas(*deltas):
    for delta in deltas:
        yield delta


def _parse_frame(frame: bytes) -> dict:
    text = frame.decode("utf-8")
    assert text.startswith("data: ")
    assert text.endswith("\n\n")
    return json.loads(text[len("data: "):-2])


def test_completion_id_format():
    completion_id = generate_completion_id()
    assert re.fullmatch(r"chatcmpl-[A-Za-z0-9]{28}", completion_id)
    assert generate_completion_id("cmpl-").startswith("cmpl-")


def test_format_sse_event():
    assert format_sse_event('{"a":1}') == b'data: {"a":1}\n\n'


class TestAggregate:
    @pytest.mark.asyncio
    async def test_concatenates_deltas(self):
        synthesizer = ResponseSynthesizer("gpt-3.5-turbo")
        completion = await synthesizer.aggregate(_deltas("Hi", "", " there"))
        body = completion.model_dump()

        assert body["id"] == synthesizer.completion_id
        assert body["created"] == synthesizer.created
        assert body["model"] == "gpt-3.5-turbo"
        assert body["object"] == "chat.completion"
        assert body["choices"] == [{
            "index": 0,
            "finish_reason": "stop",
            "message": {"role": "assistant", "content": "Hi there"},
        }]
        assert body["usage"] == {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        }

    @pytest.mark.asyncio
    async def test_no_deltas_gives_empty_content(self):
        completion = await ResponseSynthesizer("m").aggregate(_deltas())
        assert completion.choices[0].message.content == ""


class TestFrames:
    @pytest.mark.asyncio
    async def test_one_frame_per_delta(self):
        synthesizer = ResponseSynthesizer("gpt-4")
        frames = await collect(synthesizer.frames(_deltas("Hi", " there")))

        assert len(frames) == 2
        payloads = [_parse_frame(f) for f in frames]
        assert [p["choices"][0]["delta"]["content"] for p in payloads] == ["Hi", " there"]
        for payload in payloads:
            assert payload["id"] == synthesizer.completion_id
            assert payload["created"] == synthesizer.created
            assert payload["model"] == "gpt-4"
            assert payload["object"] == "chat.completion.chunk"
            assert payload["choices"][0]["index"] == 0
            assert payload["choices"][0]["delta"]["role"] == "assistant"
            assert payload["choices"][0]["delta"]["finish_reason"] is None

    @pytest.mark.asyncio
    async def test_empty_deltas_skipped_by_default(self):
        frames = await collect(ResponseSynthesizer("m").frames(_deltas("", "a", "")))
        assert [_parse_frame(f)["choices"][0]["delta"]["content"] for f in frames] == ["a"]

    @pytest.mark.asyncio
    async def test_empty_deltas_forwarded_when_enabled(self):
        synthesizer = ResponseSynthesizer("m", forward_empty=True)
        frames = await collect(synthesizer.frames(_deltas("", "a")))
        assert [_parse_frame(f)["choices"][0]["delta"]["content"] for f in frames] == ["", "a"]

    @pytest.mark.asyncio
    async def test_no_terminal_frame(self):
        frames = await collect(ResponseSynthesizer("m").frames(_deltas()))
        assert frames == []

    @pytest.mark.asyncio
    async def test_non_ascii_content(self):
        frames = await collect(ResponseSynthesizer("m").frames(_deltas("héllo 世界")))
        assert _parse_frame(frames[0])["choices"][0]["delta"]["content"] == "héllo 世界"


def test_each_request_gets_its_own_id():
    assert ResponseSynthesizer("m").completion_id != ResponseSynthesizer("m").completion_id
