"""
Exceptions raised by the lip tracking services.
"""


class LipTrackError(Exception):
    """Base class for lip tracking failures surfaced to the caller."""


class MissingFrameError(LipTrackError):
    """Raised when a frame arrives without an image or a frame size."""

    def __init__(self, timestamp_ms: int):
        self.timestamp_ms = timestamp_ms
        super().__init__(f"No video frame at time {timestamp_ms / 1000:.3f}s")


class InvalidFrameError(LipTrackError):
    """Raised when detections and landmark lists cannot be paired by index."""
