"""Drives developer and marketing note generation for accepted diff items.

Items are processed one at a time.  For each item the developer channel
is opened, streamed and closed before the marketing channel opens, and
the next item only starts once the marketing channel has closed.  The
consumer can therefore rebuild the notes from a single ordered stream
without any item-level completion index.

The first failure (generation error, sink write failure) produces a
single :class:`ErrorFrame` naming the item and ends the whole run.  The
sink is closed exactly once, whatever happens.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from patchnotes.enrichment.types import ToolsInfo
from patchnotes.filters.types import DiffItem
from patchnotes.notes.prompts import build_request
from patchnotes.notes.types import FrameSink, ItemPhase, ItemProgress, TextGenerator
from patchnotes.stream.types import (
    ChannelName,
    ContentFrame,
    DoneFrame,
    ErrorFrame,
    ToolsFrame,
)

logger = logging.getLogger(__name__)


class ToolsProvider(Protocol):
    """Enrichment lookup.  Must return an empty ToolsInfo rather than raise."""

    async def get_tools(self, item: DiffItem) -> ToolsInfo: ...


class NoteOrchestrator:
    """Sequential producer of the multiplexed note stream."""

    def __init__(
        self,
        generator: TextGenerator,
        tools_provider: ToolsProvider | None = None,
    ) -> None:
        self._generator = generator
        self._tools_provider = tools_provider
        self.progress: dict[str, ItemProgress] = {}

    async def run(self, items: Iterable[DiffItem], sink: FrameSink) -> bool:
        """Generate notes for *items*, writing frames to *sink*.

        Returns ``True`` if every item completed, ``False`` if the run
        was aborted by an error frame.
        """
        try:
            for item in items:
                progress = ItemProgress(item.id)
                self.progress[item.id] = progress
                try:
                    await self._process_item(item, progress, sink)
                except Exception as exc:
                    if not progress.is_terminal:
                        progress.fail(str(exc))
                    logger.error("Note generation failed for PR %s", item.id, exc_info=True)
                    await self._send_error(sink, f"Error processing PR {item.id}: {exc}")
                    return False
            return True
        finally:
            await sink.close()

    async def _process_item(
        self, item: DiffItem, progress: ItemProgress, sink: FrameSink
    ) -> None:
        logger.info("Generating notes for PR %s", item.id)

        while progress.channel is not None:
            await self._stream_channel(item, progress.channel, sink)
            progress.advance()

        if self._tools_provider is not None:
            try:
                tools = await self._tools_provider.get_tools(item)
            except Exception:
                logger.warning("Enrichment lookup failed for PR %s", item.id, exc_info=True)
                tools = ToolsInfo()
            await sink.send(ToolsFrame(pr_id=item.id, tools=tools))

        logger.info("Notes complete for PR %s", item.id)

    async def _stream_channel(
        self, item: DiffItem, channel: ChannelName, sink: FrameSink
    ) -> None:
        await sink.send(ContentFrame(pr_id=item.id, section=channel, content=""))

        fragments = 0
        async for fragment in self._generator.stream(build_request(channel, item)):
            if fragment:
                await sink.send(ContentFrame(pr_id=item.id, section=channel, content=fragment))
                fragments += 1

        await sink.send(DoneFrame(pr_id=item.id, section=channel))
        logger.debug("PR %s %s channel closed after %d fragments", item.id, channel.value, fragments)

    async def _send_error(self, sink: FrameSink, message: str) -> None:
        try:
            await sink.send(ErrorFrame(message=message))
        except Exception:
            logger.warning("Could not deliver error frame: %s", message, exc_info=True)

    def phase(self, pr_id: str) -> ItemPhase | None:
        """Return the current phase of *pr_id*, or ``None`` if it never started."""
        progress = self.progress.get(pr_id)
        return progress.phase if progress is not None else None
