"""Error kinds raised by the moonrip pipeline.

Each stage raises its own subclass so the CLI can report a failure without
knowing which step produced it.
"""

from __future__ import annotations


class MoonripError(Exception):
    """Base class for every failure the pipeline reports to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingDependencyError(MoonripError):
    def __init__(self, dependency: str, install_instructions: str):
        super().__init__(f"{dependency} is not installed")
        self.dependency = dependency
        self.install_instructions = install_instructions


class InvalidArgumentsError(MoonripError):
    pass


class DownloadError(MoonripError):
    pass


class ConversionError(MoonripError):
    pass


class FrameExtractionError(MoonripError):
    pass


class CoverArtSelectionError(MoonripError):
    pass


class EmbedError(MoonripError):
    pass


class VisionServiceError(MoonripError):
    """A request to the vision service failed (transport or HTTP status)."""
