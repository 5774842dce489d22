"""Exception types raised by Patchnotes components."""


class PatchnotesError(Exception):
    """Base class for all Patchnotes errors."""


class UnknownPolicyError(PatchnotesError, KeyError):
    """Raised when a filter preset name does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown filter policy: {self.name!r}"


class GenerationError(PatchnotesError):
    """The text-generation capability failed mid-stream or could not start."""


class SinkClosedError(PatchnotesError):
    """A frame was written to a sink whose reader has gone away."""


class InvalidTransitionError(PatchnotesError):
    """An item's note-generation state machine was driven out of order."""


class StreamAbortedError(PatchnotesError):
    """The producer reported a fatal error frame; no more frames will follow."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
