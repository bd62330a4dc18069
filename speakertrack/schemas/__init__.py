"""
Pydantic schemas for request/response models.
"""

from speakertrack.schemas.requests import (
    FaceInput,
    FrameInput,
    LipTrackOptionsOverride,
    RelativeBoundingBox,
    SpeakerTrackRequest,
)
from speakertrack.schemas.responses import (
    SceneSummary,
    ShotBoundary,
    SpeakerFrameResult,
    SpeakerTrackResponse,
)

__all__ = [
    "SpeakerTrackRequest",
    "SpeakerTrackResponse",
    "FrameInput",
    "FaceInput",
    "LipTrackOptionsOverride",
    "RelativeBoundingBox",
    "SpeakerFrameResult",
    "ShotBoundary",
    "SceneSummary",
]
