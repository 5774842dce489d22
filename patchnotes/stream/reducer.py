"""Client-side reconstruction of note text from decoded stream frames.

The reducer is a pure function over an explicit ``{item id: NoteState}``
mapping, so a recorded frame sequence can be replayed deterministically.
:class:`NoteReconstructor` wraps it for consumers reading raw bytes.
"""

import logging
from collections.abc import Mapping

from patchnotes.errors import StreamAbortedError
from patchnotes.stream.codec import FrameDecoder
from patchnotes.stream.types import (
    ChannelName,
    ContentFrame,
    DoneFrame,
    ErrorFrame,
    NoteState,
    StreamFrame,
    ToolsFrame,
)

logger = logging.getLogger(__name__)


def merge_with_overlap(prev: str, fragment: str) -> str:
    """Append *fragment* to *prev*, dropping text *fragment* repeats.

    The longest suffix of *prev* that is also a prefix of *fragment* is
    written only once.  With no overlap this is plain concatenation.
    Worst case is quadratic in the fragment length.
    """
    if not prev:
        return fragment
    if not fragment:
        return prev

    for k in range(min(len(prev), len(fragment)), 0, -1):
        if prev.endswith(fragment[:k]):
            return prev + fragment[k:]
    return prev + fragment


def apply_frame(
    state: Mapping[str, NoteState], frame: StreamFrame
) -> dict[str, NoteState]:
    """Return a new state mapping with *frame* applied.

    *state* itself is never modified.  An :class:`ErrorFrame` raises
    :class:`StreamAbortedError`; the caller still holds the state it
    passed in.
    """
    if isinstance(frame, ErrorFrame):
        raise StreamAbortedError(frame.message)

    current = state.get(frame.pr_id, NoteState())

    if isinstance(frame, ContentFrame):
        field = frame.section.value
        merged = merge_with_overlap(getattr(current, field), frame.content)
        updated = current.model_copy(update={field: merged})
    elif isinstance(frame, ToolsFrame):
        updated = current.model_copy(update={"tools": frame.tools})
    elif isinstance(frame, DoneFrame):
        updated = current
    else:
        raise TypeError(f"Unsupported frame type: {type(frame).__name__}")

    return {**state, frame.pr_id: updated}


def apply_frames(
    state: Mapping[str, NoteState], frames: list[StreamFrame]
) -> dict[str, NoteState]:
    """Fold :func:`apply_frame` over *frames*."""
    result = dict(state)
    for frame in frames:
        result = apply_frame(result, frame)
    return result


class NoteReconstructor:
    """Rebuilds per-item notes from the raw bytes of a note stream.

    Feed it response chunks as they arrive; read :attr:`notes` at any
    point for the text accumulated so far.  Channel closure is tracked
    here rather than in the reducer so that a UI can tell which notes
    are final.
    """

    def __init__(self) -> None:
        self._decoder = FrameDecoder()
        self.notes: dict[str, NoteState] = {}
        self.closed: set[tuple[str, ChannelName]] = set()
        self.error: str | None = None

    @property
    def skipped(self) -> int:
        """Number of malformed records dropped so far."""
        return self._decoder.skipped

    @property
    def aborted(self) -> bool:
        return self.error is not None

    def feed(self, chunk: bytes) -> None:
        """Decode *chunk* and apply every complete frame it yields."""
        for outcome in self._decoder.feed(chunk):
            if outcome.frame is not None:
                self.apply(outcome.frame)

    def close(self) -> None:
        """Process any trailing record once the byte stream has ended."""
        for outcome in self._decoder.flush():
            if outcome.frame is not None:
                self.apply(outcome.frame)

    def apply(self, frame: StreamFrame) -> None:
        if self.aborted:
            logger.warning("Ignoring frame received after a fatal stream error")
            return
        try:
            self.notes = apply_frame(self.notes, frame)
        except StreamAbortedError as exc:
            self.error = exc.message
            logger.error("Note stream aborted: %s", exc.message)
            return
        if isinstance(frame, DoneFrame):
            self.closed.add((frame.pr_id, frame.section))

    def finished(self, pr_id: str) -> bool:
        """Return ``True`` once both channels of *pr_id* have completed."""
        return all((pr_id, channel) in self.closed for channel in ChannelName)
