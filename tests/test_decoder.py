"""Tests for fragment decoding policies."""

import pytest

from lobe_relay.transcode.decoder import ContentDecoder, DecodeMode


class TestJsonMode:
    @pytest.fixture
    def decoder(self):
        return ContentDecoder(DecodeMode.JSON)

    def test_decodes_string_literal(self, decoder):
        assert decoder.decode('"hello"') == "hello"

    def test_unescapes_sequences(self, decoder):
        assert decoder.decode(r'"line\nbreak \"quoted\" 世"') == 'line\nbreak "quoted" 世'

    def test_empty_string_literal_is_a_delta(self, decoder):
        assert decoder.decode('""') == ""

    def test_not_json_yields_nothing(self, decoder):
        assert decoder.decode("not-json") is None

    def test_unterminated_literal_yields_nothing(self, decoder):
        assert decoder.decode('"half') is None

    def test_non_string_value_yields_nothing(self, decoder):
        assert decoder.decode("42") is None
        assert decoder.decode('{"content": "x"}') is None
        assert decoder.decode("null") is None

    def test_deeply_nested_value_does_not_raise(self, decoder):
        assert decoder.decode("[" * 100_000 + "]" * 100_000) is None


class TestRawMode:
    @pytest.fixture
    def decoder(self):
        return ContentDecoder(DecodeMode.RAW)

    def test_strips_surrounding_quotes(self, decoder):
        assert decoder.decode('"hello"') == "hello"

    def test_keeps_escapes_verbatim(self, decoder):
        assert decoder.decode(r'"a\nb"') == r"a\nb"

    def test_only_one_pair_removed(self, decoder):
        assert decoder.decode('""quoted""') == '"quoted"'

    def test_unbalanced_quote_kept(self, decoder):
        assert decoder.decode('"open') == '"open'
        assert decoder.decode('close"') == 'close"'
        assert decoder.decode('"') == '"'

    def test_unquoted_text_passes_through(self, decoder):
        assert decoder.decode("not-json") == "not-json"

    def test_empty_fragment(self, decoder):
        assert decoder.decode("") == ""
        assert decoder.decode('""') == ""


def test_mode_accepts_plain_string():
    assert ContentDecoder("raw").mode is DecodeMode.RAW


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        ContentDecoder("xml")
