"""
Speaker tracking API endpoints.
"""

import asyncio
import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from speakertrack.auth import verify_api_key
from speakertrack.config import LipTrackOptions, get_settings
from speakertrack.schemas.requests import FrameInput, RelativeBoundingBox, SpeakerTrackRequest
from speakertrack.schemas.responses import (
    SceneSummary,
    ShotBoundary,
    SpeakerFrameResult,
    SpeakerTrackResponse,
)
from speakertrack.services.errors import LipTrackError
from speakertrack.services.geometry import RelativeBox
from speakertrack.services.lip_tracker import LipTracker, LipTrackOutput
from speakertrack.services.scene_aggregator import FrameObservation

logger = logging.getLogger(__name__)

router = APIRouter()


def get_semaphore(request: Request) -> asyncio.Semaphore:
    """Get job semaphore from app state."""
    semaphore = getattr(request.app.state, "job_semaphore", None)
    if semaphore is None:
        settings = get_settings()
        semaphore = asyncio.Semaphore(settings.max_concurrent_jobs)
        request.app.state.job_semaphore = semaphore
    return semaphore


def to_observation(frame: FrameInput, frame_width: int, frame_height: int) -> FrameObservation:
    """Convert an API frame into a FrameObservation."""
    return FrameObservation(
        timestamp_ms=frame.timestamp_ms,
        detections=tuple(
            RelativeBox(face.bbox.xmin, face.bbox.ymin, face.bbox.width, face.bbox.height)
            for face in frame.faces
        ),
        landmarks=tuple(tuple(face.landmarks) for face in frame.faces),
        frame_size=(frame_width, frame_height),
    )


def to_schema_box(box: RelativeBox) -> RelativeBoundingBox:
    return RelativeBoundingBox(xmin=box.xmin, ymin=box.ymin, width=box.width, height=box.height)


def build_response(outputs: list[LipTrackOutput], processing_time_ms: int) -> SpeakerTrackResponse:
    response = SpeakerTrackResponse(processing_time_ms=processing_time_ms)

    for output in outputs:
        scene = output.scene
        for frame in output.frames:
            response.frames.append(
                SpeakerFrameResult(
                    timestamp_ms=frame.timestamp_ms,
                    speakers=[to_schema_box(box) for box in frame.detections],
                    carried_forward=frame.carried_forward,
                )
            )
        if output.shot_boundary is not None:
            response.shot_boundaries.append(
                ShotBoundary(
                    timestamp_ms=output.shot_boundary.timestamp_ms,
                    is_speaker_change=output.shot_boundary.is_speaker_change,
                )
            )
        response.scenes.append(
            SceneSummary(
                start_timestamp_ms=scene.start_timestamp_ms,
                end_timestamp_ms=scene.end_timestamp_ms,
                frame_count=len(scene.frames),
                face_count=len(scene.chains),
                dominant_speaker_id=scene.dominant_meta_face_id,
                votes=scene.votes,
            )
        )

    return response


def run_tracking(request: SpeakerTrackRequest, options: LipTrackOptions) -> SpeakerTrackResponse:
    """Run the tracker over all frames of a request (blocking)."""
    start = time.time()
    tracker = LipTracker(options)
    observations = [
        to_observation(frame, request.frame_width, request.frame_height)
        for frame in request.frames
    ]
    outputs = tracker.run(observations)
    processing_time_ms = int((time.time() - start) * 1000)

    logger.info(
        f"Tracked {len(observations)} frames in {len(outputs)} scenes "
        f"({processing_time_ms}ms)"
    )
    return build_response(outputs, processing_time_ms)


@router.post(
    "/track",
    response_model=SpeakerTrackResponse,
    dependencies=[Depends(verify_api_key)],
)
async def track_speakers(body: SpeakerTrackRequest, request: Request) -> SpeakerTrackResponse:
    """
    Find the active speaker in each frame of a clip.

    Frames must be sorted by timestamp. Each frame gets zero or one speaker
    box; each resolved scene contributes one shot boundary signal unless the
    signal is disabled.
    """
    overrides = body.options.model_dump(exclude_none=True) if body.options else {}
    try:
        options = get_settings().get_lip_track_options(**overrides)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid tracker options: {e}")

    timestamps = [frame.timestamp_ms for frame in body.frames]
    if timestamps != sorted(timestamps):
        raise HTTPException(status_code=422, detail="Frames must be sorted by timestamp")

    semaphore = get_semaphore(request)
    try:
        async with semaphore:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, run_tracking, body, options)
    except LipTrackError as e:
        logger.warning(f"Speaker tracking failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))
