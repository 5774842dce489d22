"""Types shared by the note-generation pipeline."""

import time
from collections.abc import AsyncIterator
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from patchnotes.errors import InvalidTransitionError
from patchnotes.stream.types import ChannelName, StreamFrame


class ItemPhase(str, Enum):
    """Where one diff item stands in its developer-then-marketing run."""

    PENDING_DEVELOPER = "pending_developer"
    PENDING_MARKETING = "pending_marketing"
    COMPLETE = "complete"
    FAILED = "failed"


_NEXT_PHASE: dict[ItemPhase, ItemPhase] = {
    ItemPhase.PENDING_DEVELOPER: ItemPhase.PENDING_MARKETING,
    ItemPhase.PENDING_MARKETING: ItemPhase.COMPLETE,
}


class ItemProgress:
    """Small state machine tracking a single item's note generation.

    The only legal paths are ``PENDING_DEVELOPER -> PENDING_MARKETING ->
    COMPLETE`` and a jump to ``FAILED`` from either pending phase.
    Every transition is recorded in :attr:`history`.
    """

    def __init__(self, pr_id: str) -> None:
        self.pr_id = pr_id
        self.phase = ItemPhase.PENDING_DEVELOPER
        self.history: list[ItemPhase] = [self.phase]
        self.error: str | None = None
        self.started_at: float = time.monotonic()
        self.finished_at: float | None = None

    @property
    def channel(self) -> ChannelName | None:
        """The channel currently being generated, if any."""
        if self.phase is ItemPhase.PENDING_DEVELOPER:
            return ChannelName.DEVELOPER
        if self.phase is ItemPhase.PENDING_MARKETING:
            return ChannelName.MARKETING
        return None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (ItemPhase.COMPLETE, ItemPhase.FAILED)

    def advance(self) -> ItemPhase:
        """Move to the next phase after the current channel has closed."""
        try:
            next_phase = _NEXT_PHASE[self.phase]
        except KeyError:
            raise InvalidTransitionError(
                f"Item {self.pr_id} cannot advance from {self.phase.value}"
            ) from None
        self._enter(next_phase)
        return next_phase

    def fail(self, reason: str) -> None:
        """Mark the item failed.  Only legal while a channel is pending."""
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Item {self.pr_id} cannot fail from {self.phase.value}"
            )
        self.error = reason
        self._enter(ItemPhase.FAILED)

    def _enter(self, phase: ItemPhase) -> None:
        self.phase = phase
        self.history.append(phase)
        if self.is_terminal:
            self.finished_at = time.monotonic()


class ChatMessage(BaseModel):
    """One role-tagged message of a generation prompt."""

    role: str
    content: str


class GenerationRequest(BaseModel):
    """Everything the generation capability needs for one channel of one item."""

    channel: ChannelName
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)
    temperature: float | None = None


class TextGenerator(Protocol):
    """A capability that streams text fragments for a prompt.

    The returned iterator ends by plain exhaustion.  Failures are raised
    from the iterator at whatever point they happen.
    """

    def stream(self, request: GenerationRequest) -> AsyncIterator[str]: ...


class FrameSink(Protocol):
    """Single-writer destination for outgoing stream frames."""

    async def send(self, frame: StreamFrame) -> None: ...

    async def close(self) -> None: ...
