"""Event-stream codec for note frames.

Each frame travels as one Server-Sent-Events record::

    data: {"prId": "42", "section": "developer", "content": "Adds"}\\n\\n

The decoder is incremental: bytes arrive in arbitrarily sized chunks
(possibly splitting a record, or a multi-byte character) and complete
records are parsed as soon as their blank-line terminator shows up.
A record that fails to parse is reported as a skipped
:class:`DecodeOutcome` and the stream carries on.
"""

import codecs
import logging
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

from pydantic import ValidationError

from patchnotes.stream.types import STREAM_FRAME_ADAPTER, StreamFrame

logger = logging.getLogger(__name__)

DATA_MARKER = "data:"
LINE_TERMINATOR = "\n"
RECORD_SEPARATOR = LINE_TERMINATOR * 2


def encode_frame(frame: StreamFrame) -> bytes:
    """Serialize *frame* as a single ``data:`` record terminated by a blank line."""
    payload = frame.model_dump_json(by_alias=True)
    return f"{DATA_MARKER} {payload}{RECORD_SEPARATOR}".encode("utf-8")


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of decoding one record: either a frame or the reason it was skipped."""

    raw: str
    frame: StreamFrame | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.frame is not None


class FrameDecoder:
    """Incremental decoder turning a byte stream into :class:`DecodeOutcome` values.

    One instance serves exactly one stream.  Records without a ``data:``
    line (SSE comments such as keep-alive pings) or with an empty payload
    are heartbeats and produce no outcome at all.
    """

    def __init__(self) -> None:
        self._text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer: str = ""
        self.decoded: int = 0
        self.skipped: int = 0
        self.ignored: int = 0

    @property
    def pending(self) -> str:
        """Text received but not yet terminated by a record separator."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[DecodeOutcome]:
        """Append *chunk* and return outcomes for every record it completes."""
        self._append(self._text_decoder.decode(chunk))
        outcomes: list[DecodeOutcome] = []
        while True:
            index = self._buffer.find(RECORD_SEPARATOR)
            if index == -1:
                break
            record = self._buffer[:index]
            self._buffer = self._buffer[index + len(RECORD_SEPARATOR):]
            outcome = self._decode_record(record)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def flush(self) -> list[DecodeOutcome]:
        """Decode whatever is left once the byte stream has ended."""
        self._append(self._text_decoder.decode(b"", final=True))
        outcomes = self.feed(b"")
        if self._buffer.strip():
            record, self._buffer = self._buffer, ""
            outcome = self._decode_record(record)
            if outcome is not None:
                outcomes.append(outcome)
        self._buffer = ""
        return outcomes

    def _append(self, text: str) -> None:
        # CRLF-delimited streams are folded into the LF form.
        self._buffer = (self._buffer + text).replace("\r\n", "\n")

    def _decode_record(self, record: str) -> DecodeOutcome | None:
        data_lines = [
            line[len(DATA_MARKER):].strip()
            for line in record.strip().split("\n")
            if line.startswith(DATA_MARKER)
        ]
        payload = "\n".join(data_lines).strip()
        if not payload:
            self.ignored += 1
            return None

        try:
            frame = STREAM_FRAME_ADAPTER.validate_json(payload)
        except ValidationError as exc:
            self.skipped += 1
            logger.warning(
                "Skipping malformed stream record (%d errors): %.200s",
                exc.error_count(),
                payload,
            )
            return DecodeOutcome(raw=payload, error=str(exc))

        self.decoded += 1
        return DecodeOutcome(raw=payload, frame=frame)


async def iter_frames(
    chunks: AsyncIterable[bytes], decoder: FrameDecoder | None = None
) -> AsyncIterator[StreamFrame]:
    """Yield frames decoded from an async byte iterator, in arrival order.

    Malformed records are skipped (the decoder logs and counts them).
    Pass your own *decoder* to inspect the counters afterwards.
    """
    decoder = decoder or FrameDecoder()
    async for chunk in chunks:
        for outcome in decoder.feed(chunk):
            if outcome.frame is not None:
                yield outcome.frame
    for outcome in decoder.flush():
        if outcome.frame is not None:
            yield outcome.frame
