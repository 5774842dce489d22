"""Wire frames and reconstructed note state for the multiplexed note stream."""

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from patchnotes.enrichment.types import ToolsInfo


class ChannelName(str, Enum):
    """The two independent note kinds generated for every diff item."""

    DEVELOPER = "developer"
    MARKETING = "marketing"


class _Frame(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class ContentFrame(_Frame):
    """A text fragment to append to one channel of one item.

    An empty ``content`` opens the channel.
    """

    pr_id: str = Field(alias="prId")
    section: ChannelName
    content: str


class DoneFrame(_Frame):
    """Completion marker for one channel of one item.  Carries no text."""

    pr_id: str = Field(alias="prId")
    section: ChannelName
    done: Literal[True] = True


class ToolsFrame(_Frame):
    """One-shot enrichment delivery for an item, outside both channels."""

    pr_id: str = Field(alias="prId")
    type: Literal["tools"] = "tools"
    tools: ToolsInfo


class ErrorFrame(_Frame):
    """Fatal signal for the whole stream; nothing follows it."""

    type: Literal["error"] = "error"
    message: str


StreamFrame = Union[ContentFrame, DoneFrame, ToolsFrame, ErrorFrame]

STREAM_FRAME_ADAPTER: TypeAdapter[StreamFrame] = TypeAdapter(StreamFrame)


class NoteState(BaseModel):
    """Accumulated text for one diff item on the consumer side.

    Channel strings only ever grow.  ``tools`` is replaced wholesale when
    an enrichment frame arrives.
    """

    model_config = ConfigDict(frozen=True)

    developer: str = ""
    marketing: str = ""
    tools: ToolsInfo | None = None