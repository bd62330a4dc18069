"""
Response schemas for the speaker tracking API.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from speakertrack.schemas.requests import RelativeBoundingBox


class SpeakerFrameResult(BaseModel):
    """Active speaker for a single frame."""

    timestamp_ms: int = Field(..., description="Timestamp in milliseconds from video start")
    speakers: List[RelativeBoundingBox] = Field(
        default_factory=list,
        description="Zero or one active speaker box",
    )
    carried_forward: bool = Field(
        default=False,
        description="True when the speaker was not detected and its last box is reused",
    )


class ShotBoundary(BaseModel):
    """Speaker change signal for a resolved scene."""

    timestamp_ms: int = Field(..., description="Timestamp of the scene's first frame")
    is_speaker_change: bool = Field(..., description="Whether the camera should cut")


class SceneSummary(BaseModel):
    """Summary of one resolved scene."""

    start_timestamp_ms: int
    end_timestamp_ms: int
    frame_count: int
    face_count: int = Field(..., description="Number of face identities found in the scene")
    dominant_speaker_id: Optional[int] = Field(
        default=None, description="Scene-local id of the dominant speaker"
    )
    votes: Dict[int, int] = Field(
        default_factory=dict, description="Speaking frames per scene-local face id"
    )


class SpeakerTrackResponse(BaseModel):
    """Response for the /speakers/track endpoint."""

    frames: List[SpeakerFrameResult] = Field(default_factory=list)
    shot_boundaries: List[ShotBoundary] = Field(default_factory=list)
    scenes: List[SceneSummary] = Field(default_factory=list)
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(..., description="Whether service is ready to accept requests")
    max_concurrent_jobs: int = Field(..., description="Concurrent tracking requests allowed")
