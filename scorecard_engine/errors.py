"""Error kinds raised inside the compositing and export pipeline."""

from __future__ import annotations

GENERIC_FAILURE_MESSAGE = "Failed to save image. Please try again."


class PipelineError(Exception):
    """Base for failures that abort a composite or export operation."""

    def __init__(self, message: str, *, user_message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)
        self.user_message = user_message


class AssetLoadFailure(PipelineError):
    """A base photo, overlay or watermark could not be fetched or decoded."""


class EncodingFailure(PipelineError):
    """Flattening a drawing surface produced no output."""


class ShareFailure(PipelineError):
    """The native share channel failed for a reason other than cancellation."""


class ShareCancelled(Exception):
    """The user dismissed the share sheet. Not an error."""


__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "PipelineError",
    "AssetLoadFailure",
    "EncodingFailure",
    "ShareFailure",
    "ShareCancelled",
]
