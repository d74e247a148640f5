"""Error types raised by the rendering pipeline."""

from __future__ import annotations


class InitialRenderingError(Exception):
    """Base class for every failure surfaced by a rendering run."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDeviceError(InitialRenderingError):
    """The requested device profile is unknown."""


class InvalidUrlError(InitialRenderingError):
    """The URL is not an absolute http(s) URL."""


class CaptureFailure(InitialRenderingError):
    """A stage's browser launch, navigation or screenshot decode failed."""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class DimensionMismatchError(CaptureFailure):
    """Stage screenshots do not share the same dimensions."""


class EncodingFailure(InitialRenderingError):
    """Re-encoding or compressing a raster failed."""
