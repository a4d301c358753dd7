"""Error hierarchy raised by the planner and the image engine."""

from typing import override


class VimgError(Exception):
    """Base error for every failure surfaced by vimg.

    `stage` is filled in by the planner with the name of the stage that
    failed, so a caller gets one error describing where processing stopped.
    """

    def __init__(self, message: str = "An unknown image processing error occurred.", stage: str | None = None):
        self.message: str = message
        self.stage: str | None = stage
        super().__init__(self.message)

    @override
    def __str__(self):
        if self.stage:
            return f"{type(self).__name__}: [{self.stage}] {self.message}"
        return f"{type(self).__name__}: {self.message}"


class InvalidHandleError(VimgError):
    """Operation attempted on a null or already released image handle."""


class UnsupportedFormatError(VimgError):
    """Input or requested output format cannot be loaded/saved by the engine."""


class SizeLimitExceededError(VimgError):
    """Requested crop/extract/smart-crop dimensions exceed the configured maximum."""


class MissingParameterError(VimgError):
    """A required option is missing, e.g. extract width/height."""


class EngineFailureError(VimgError):
    """The image engine reported an error; the message is passed through verbatim."""


class EmptyInputError(VimgError):
    """Zero-length source buffer."""
