"""Stage 3: the wire format of the note stream and its client-side reconstruction."""

from patchnotes.stream.codec import DecodeOutcome, FrameDecoder, encode_frame, iter_frames
from patchnotes.stream.reducer import (
    NoteReconstructor,
    apply_frame,
    apply_frames,
    merge_with_overlap,
)
from patchnotes.stream.types import (
    ChannelName,
    ContentFrame,
    DoneFrame,
    ErrorFrame,
    NoteState,
    StreamFrame,
    ToolsFrame,
)

__all__ = [
    "ChannelName",
    "ContentFrame",
    "DecodeOutcome",
    "DoneFrame",
    "ErrorFrame",
    "FrameDecoder",
    "NoteReconstructor",
    "NoteState",
    "StreamFrame",
    "ToolsFrame",
    "apply_frame",
    "apply_frames",
    "encode_frame",
    "iter_frames",
    "merge_with_overlap",
]
