"""
Request schemas for the speaker tracking API.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class RelativeBoundingBox(BaseModel):
    """Face bounding box in normalized frame coordinates."""

    xmin: float = Field(..., ge=0.0, le=1.0, description="Left edge, fraction of frame width")
    ymin: float = Field(..., ge=0.0, le=1.0, description="Top edge, fraction of frame height")
    width: float = Field(..., ge=0.0, le=1.0, description="Width, fraction of frame width")
    height: float = Field(..., ge=0.0, le=1.0, description="Height, fraction of frame height")


class FaceInput(BaseModel):
    """A detected face with its face mesh landmarks."""

    bbox: RelativeBoundingBox = Field(..., description="Face detection box")
    landmarks: List[Tuple[float, float]] = Field(
        default_factory=list,
        description="Face mesh landmarks as normalized (x, y); 468 points when complete",
    )


class FrameInput(BaseModel):
    """Detections for a single frame."""

    timestamp_ms: int = Field(..., ge=0, description="Timestamp in milliseconds from video start")
    faces: List[FaceInput] = Field(default_factory=list, description="Faces in this frame")


class LipTrackOptionsOverride(BaseModel):
    """Per-request overrides of the tracker defaults."""

    min_speaker_span: Optional[int] = Field(default=None, ge=0)
    iou_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    variance_history: Optional[int] = Field(default=None, ge=1)
    mean_history: Optional[int] = Field(default=None, ge=1)
    lip_mean_threshold_big_mouth: Optional[float] = Field(default=None, ge=0.0)
    lip_variance_threshold_big_mouth: Optional[float] = Field(default=None, ge=0.0)
    lip_mean_threshold_small_mouth: Optional[float] = Field(default=None, ge=0.0)
    lip_variance_threshold_small_mouth: Optional[float] = Field(default=None, ge=0.0)
    min_shot_span: Optional[float] = Field(default=None, ge=0.0)
    output_shot_boundary: Optional[bool] = None
    output_shot_boundary_only_on_change: Optional[bool] = None


class SpeakerTrackRequest(BaseModel):
    """Request body for the /speakers/track endpoint."""

    frame_width: int = Field(..., gt=0, description="Source frame width in pixels")
    frame_height: int = Field(..., gt=0, description="Source frame height in pixels")
    frames: List[FrameInput] = Field(
        default_factory=list, description="Frames in presentation order"
    )
    options: Optional[LipTrackOptionsOverride] = Field(
        default=None, description="Overrides of the tracker defaults"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "frame_width": 1280,
                "frame_height": 720,
                "frames": [
                    {
                        "timestamp_ms": 0,
                        "faces": [
                            {
                                "bbox": {"xmin": 0.4, "ymin": 0.2, "width": 0.2, "height": 0.3},
                                "landmarks": [[0.5, 0.4]],
                            }
                        ],
                    }
                ],
                "options": {"min_speaker_span": 1000, "iou_threshold": 0.3},
            }
        }
    )
