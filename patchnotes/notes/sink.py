"""Frame sinks: where the orchestrator writes its multiplexed stream."""

import asyncio
import logging
from collections.abc import AsyncIterator

from patchnotes.config import SINK_QUEUE_SIZE
from patchnotes.errors import SinkClosedError
from patchnotes.stream.types import StreamFrame

logger = logging.getLogger(__name__)

_CLOSED = object()


class QueueFrameSink:
    """Bounded queue between the orchestrator and one HTTP response.

    ``send`` waits while the queue is full, so generation is throttled
    to the pace of the reader.  When the reader goes away it calls
    :meth:`detach`; any later ``send`` raises :class:`SinkClosedError`.
    ``close`` is idempotent and ends the reader's iteration.
    """

    def __init__(self, maxsize: int = SINK_QUEUE_SIZE) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._detached = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, frame: StreamFrame) -> None:
        if self._closed:
            raise SinkClosedError("Sink is already closed")
        if self._detached:
            raise SinkClosedError("Stream reader disconnected")
        await self._queue.put(frame)
        if self._detached:
            raise SinkClosedError("Stream reader disconnected")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._detached:
            return
        await self._queue.put(_CLOSED)
        logger.debug("Frame sink closed")

    def detach(self) -> None:
        """Called by the reader when it stops consuming.

        Drains buffered frames so a writer blocked on a full queue wakes up
        and sees the detached state on its next write.
        """
        self._detached = True
        while not self._queue.empty():
            self._queue.get_nowait()
        logger.debug("Frame sink reader detached")

    def __aiter__(self) -> AsyncIterator[StreamFrame]:
        return self._frames()

    async def _frames(self) -> AsyncIterator[StreamFrame]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item


class ListFrameSink:
    """Collects frames in memory.  Handy for tests and offline runs."""

    def __init__(self) -> None:
        self.frames: list[StreamFrame] = []
        self.close_count: int = 0

    async def send(self, frame: StreamFrame) -> None:
        if self.close_count:
            raise SinkClosedError("Sink is already closed")
        self.frames.append(frame)

    async def close(self) -> None:
        self.close_count += 1
