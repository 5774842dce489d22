"""Tests for patchnotes.stream.codec: framing, incremental decode, skipping."""

import json

import pytest

from patchnotes.enrichment.types import Contributor, ToolsInfo
from patchnotes.stream.codec import FrameDecoder, encode_frame, iter_frames
from patchnotes.stream.types import (
    ChannelName,
    ContentFrame,
    DoneFrame,
    ErrorFrame,
    ToolsFrame,
)

FRAMES = [
    ContentFrame(pr_id="42", section=ChannelName.DEVELOPER, content=""),
    ContentFrame(pr_id="42", section=ChannelName.DEVELOPER, content="Caches résumé lookups "),
    ContentFrame(pr_id="42", section=ChannelName.DEVELOPER, content="with an LRU 🚀\n\nmap."),
    DoneFrame(pr_id="42", section=ChannelName.DEVELOPER),
    ContentFrame(pr_id="42", section=ChannelName.MARKETING, content="Search is faster."),
    DoneFrame(pr_id="42", section=ChannelName.MARKETING),
    ToolsFrame(
        pr_id="42",
        tools=ToolsInfo(
            related_issues=["Slow search"],
            contributors=[Contributor(name="ada", avatar="https://a/ada.png", contributions=7)],
        ),
    ),
    ErrorFrame(message="Error processing PR 43: boom"),
]


def _stream_bytes() -> bytes:
    return b"".join(encode_frame(frame) for frame in FRAMES)


def _decode_all(chunks: list[bytes]) -> list:
    decoder = FrameDecoder()
    frames = []
    for chunk in chunks:
        frames.extend(o.frame for o in decoder.feed(chunk) if o.ok)
    frames.extend(o.frame for o in decoder.flush() if o.ok)
    return frames


class TestEncodeFrame:
    def test_content_frame_wire_format(self):
        frame = ContentFrame(pr_id="7", section=ChannelName.DEVELOPER, content="Hi")
        raw = encode_frame(frame)
        assert raw.startswith(b"data: ")
        assert raw.endswith(b"\n\n")
        assert json.loads(raw[len(b"data: "):]) == {
            "prId": "7",
            "section": "developer",
            "content": "Hi",
        }

    def test_done_frame_carries_no_content(self):
        payload = json.loads(encode_frame(DoneFrame(pr_id="7", section=ChannelName.MARKETING))[6:])
        assert payload == {"prId": "7", "section": "marketing", "done": True}

    def test_tools_frame_uses_camel_case(self):
        payload = json.loads(encode_frame(FRAMES[6])[6:])
        assert payload["type"] == "tools"
        assert payload["tools"]["relatedIssues"] == ["Slow search"]
        assert payload["tools"]["contributors"][0]["contributions"] == 7

    def test_error_frame_has_no_pr_id(self):
        payload = json.loads(encode_frame(ErrorFrame(message="boom"))[6:])
        assert payload == {"type": "error", "message": "boom"}

    def test_newlines_in_content_are_escaped(self):
        raw = encode_frame(FRAMES[2])
        assert raw.count(b"\n\n") == 1


class TestFrameDecoder:
    def test_round_trip_single_chunk(self):
        assert _decode_all([_stream_bytes()]) == FRAMES

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 64])
    def test_round_trip_fixed_chunk_sizes(self, size):
        data = _stream_bytes()
        chunks = [data[i : i + size] for i in range(0, len(data), size)]
        assert _decode_all(chunks) == FRAMES

    def test_split_inside_multibyte_character(self):
        data = encode_frame(FRAMES[2])
        cut = data.index("🚀".encode()) + 2
        assert _decode_all([data[:cut], data[cut:]]) == [FRAMES[2]]

    def test_incomplete_record_stays_buffered(self):
        decoder = FrameDecoder()
        data = encode_frame(FRAMES[1])
        assert decoder.feed(data[:-1]) == []
        assert decoder.pending
        outcomes = decoder.feed(data[-1:])
        assert [o.frame for o in outcomes] == [FRAMES[1]]
        assert decoder.pending == ""

    def test_malformed_record_is_skipped_and_counted(self):
        decoder = FrameDecoder()
        data = encode_frame(FRAMES[1]) + b"data: {not json}\n\n" + encode_frame(FRAMES[3])
        outcomes = decoder.feed(data)
        assert [o.ok for o in outcomes] == [True, False, True]
        assert outcomes[1].error
        assert outcomes[1].raw == "{not json}"
        assert decoder.skipped == 1
        assert decoder.decoded == 2

    def test_unknown_frame_shape_is_skipped(self):
        decoder = FrameDecoder()
        outcomes = decoder.feed(b'data: {"prId": "1", "section": "legal", "content": "x"}\n\n')
        assert len(outcomes) == 1
        assert not outcomes[0].ok
        assert decoder.skipped == 1

    def test_heartbeats_and_comments_are_ignored(self):
        decoder = FrameDecoder()
        data = b": ping - 2024-01-01\n\n" + b"data:\n\n" + encode_frame(FRAMES[4])
        outcomes = decoder.feed(data)
        assert [o.frame for o in outcomes] == [FRAMES[4]]
        assert decoder.ignored == 2
        assert decoder.skipped == 0

    def test_crlf_separated_records(self):
        data = encode_frame(FRAMES[4]).replace(b"\n", b"\r\n")
        assert _decode_all([data[:-1], data[-1:]]) == [FRAMES[4]]

    def test_flush_decodes_unterminated_trailing_record(self):
        decoder = FrameDecoder()
        assert decoder.feed(encode_frame(FRAMES[5]).rstrip(b"\n")) == []
        assert [o.frame for o in decoder.flush()] == [FRAMES[5]]


class TestIterFrames:
    async def test_yields_frames_from_async_chunks(self):
        data = _stream_bytes()

        async def chunks():
            for i in range(0, len(data), 5):
                yield data[i : i + 5]

        frames = [frame async for frame in iter_frames(chunks())]
        assert frames == FRAMES

    async def test_skips_malformed_records(self):
        decoder = FrameDecoder()

        async def chunks():
            yield encode_frame(FRAMES[1])
            yield b"data: [1, 2]\n\n"
            yield encode_frame(FRAMES[3])

        frames = [frame async for frame in iter_frames(chunks(), decoder)]
        assert frames == [FRAMES[1], FRAMES[3]]
        assert decoder.skipped == 1
