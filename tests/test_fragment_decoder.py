"""Tests for the incremental NDJSON fragment decoder."""

import json
import random

import pytest

from saudai_relay.domain.entities import StreamFragment
from saudai_relay.services.fragment_decoder import NdjsonDecoder, decode_fragment


def _line(content, done=False, **extra):
    message = {"role": "assistant", "content": content, **extra}
    return json.dumps({"model": "deepseek-r1:8b", "message": message, "done": done}, ensure_ascii=False) + "\n"


PAYLOAD = (
    _line("I am ")
    + _line("a Technical ", thinking="scratch pad")
    + _line("Marketing Manager at ✈️ NASTP.", done=True)
).encode("utf-8")


def _decode_in_chunks(data: bytes, cuts: list[int]) -> str:
    decoder = NdjsonDecoder()
    fragments: list[StreamFragment] = []
    start = 0
    for cut in cuts + [len(data)]:
        fragments.extend(decoder.feed(data[start:cut]))
        start = cut
    fragments.extend(decoder.flush())
    return "".join(f.text_delta for f in fragments if f.text_delta is not None)


class TestDecodeFragment:
    def test_message_content(self):
        fragment = decode_fragment('{"message": {"content": "Hi"}, "done": false}')
        assert fragment == StreamFragment(text_delta="Hi", is_final=False)

    def test_done_flag(self):
        fragment = decode_fragment('{"message": {"content": ""}, "done": true}')
        assert fragment is not None
        assert fragment.is_final is True

    def test_thinking_is_ignored(self):
        fragment = decode_fragment('{"message": {"content": "", "thinking": "hmm"}}')
        assert fragment is not None
        assert fragment.text_delta == ""

    def test_thinking_only_fragment_has_no_text(self):
        fragment = decode_fragment('{"message": {"thinking": "hmm"}}')
        assert fragment is not None
        assert fragment.text_delta is None

    def test_generate_style_response_field(self):
        fragment = decode_fragment('{"response": "chunk", "done": false}')
        assert fragment is not None
        assert fragment.text_delta == "chunk"

    def test_non_string_content_is_ignored(self):
        fragment = decode_fragment('{"message": {"content": 42}}')
        assert fragment is not None
        assert fragment.text_delta is None

    @pytest.mark.parametrize("line", ["", "   ", "not json", '{"message": ', "[1, 2]", '"text"'])
    def test_malformed_or_non_object_is_dropped(self, line):
        assert decode_fragment(line) is None

    def test_carriage_return_is_tolerated(self):
        fragment = decode_fragment('{"message": {"content": "x"}}\r')
        assert fragment is not None
        assert fragment.text_delta == "x"


class TestNdjsonDecoder:
    def test_whole_payload_in_one_chunk(self):
        assert _decode_in_chunks(PAYLOAD, []) == "I am a Technical Marketing Manager at ✈️ NASTP."

    def test_partial_line_stays_buffered(self):
        decoder = NdjsonDecoder()
        head, tail = PAYLOAD[:10], PAYLOAD[10:]
        assert decoder.feed(head) == []
        fragments = decoder.feed(tail)
        assert [f.text_delta for f in fragments] == [
            "I am ",
            "a Technical ",
            "Marketing Manager at ✈️ NASTP.",
        ]
        assert fragments[-1].is_final

    def test_every_single_split_point(self):
        expected = _decode_in_chunks(PAYLOAD, [])
        for cut in range(1, len(PAYLOAD)):
            assert _decode_in_chunks(PAYLOAD, [cut]) == expected, f"split at byte {cut}"

    def test_byte_at_a_time(self):
        cuts = list(range(1, len(PAYLOAD)))
        assert _decode_in_chunks(PAYLOAD, cuts) == "I am a Technical Marketing Manager at ✈️ NASTP."

    @pytest.mark.parametrize("seed", range(20))
    def test_random_fragmentation(self, seed):
        rng = random.Random(seed)
        cuts = sorted(rng.sample(range(1, len(PAYLOAD)), k=rng.randint(1, 12)))
        assert _decode_in_chunks(PAYLOAD, cuts) == _decode_in_chunks(PAYLOAD, [])

    def test_malformed_line_between_good_lines(self):
        data = (_line("first ") + "{garbage\n" + _line("second")).encode()
        assert _decode_in_chunks(data, [7, 30]) == "first second"

    def test_residual_without_trailing_newline_is_flushed(self):
        decoder = NdjsonDecoder()
        assert decoder.feed(_line("a").encode() + b'{"message": {"content": "b"}}') != []
        assert [f.text_delta for f in decoder.flush()] == ["b"]

    def test_truncated_residual_is_not_fatal(self):
        decoder = NdjsonDecoder()
        decoder.feed(_line("a").encode() + b'{"message": {"cont')
        assert decoder.flush() == []

    def test_flush_empties_the_buffer(self):
        decoder = NdjsonDecoder()
        decoder.feed(b'{"message": {"content": "x"}}')
        assert len(decoder.flush()) == 1
        assert decoder.flush() == []

    def test_accepts_text_chunks(self):
        decoder = NdjsonDecoder()
        fragments = decoder.feed(_line("text"))
        assert [f.text_delta for f in fragments] == ["text"]
