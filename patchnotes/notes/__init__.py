"""Stage 2: stream developer and marketing notes for accepted diff items."""

from patchnotes.notes.generation_client import ChatCompletionsClient
from patchnotes.notes.orchestrator import NoteOrchestrator
from patchnotes.notes.sink import ListFrameSink, QueueFrameSink
from patchnotes.notes.types import (
    GenerationRequest,
    ItemPhase,
    ItemProgress,
    TextGenerator,
)

__all__ = [
    "ChatCompletionsClient",
    "GenerationRequest",
    "ItemPhase",
    "ItemProgress",
    "ListFrameSink",
    "NoteOrchestrator",
    "QueueFrameSink",
    "TextGenerator",
]
