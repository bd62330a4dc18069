"""
Services for active speaker tracking.

Includes:
- Geometry, face matching and lip statistics
- Active speaker classification and scene aggregation
- Shot boundary debouncing and the streaming LipTracker
"""

from speakertrack.services.errors import InvalidFrameError, LipTrackError, MissingFrameError
from speakertrack.services.face_matcher import FaceMatcher
from speakertrack.services.geometry import RelativeBox, iou, landmark_distance
from speakertrack.services.lip_statistics import LipStatisticsEngine
from speakertrack.services.lip_tracker import LipTracker, LipTrackOutput
from speakertrack.services.scene_aggregator import (
    FrameObservation,
    MetaFaceChain,
    SceneAggregator,
    SceneResolution,
    SpeakerFrame,
)
from speakertrack.services.shot_boundary import ShotBoundaryDebouncer, ShotBoundarySignal
from speakertrack.services.speaker_classifier import ActiveSpeakerClassifier, SpeakerSession

__all__ = [
    # Geometry and matching
    "RelativeBox",
    "iou",
    "landmark_distance",
    "FaceMatcher",
    # Lip activity
    "LipStatisticsEngine",
    "ActiveSpeakerClassifier",
    "SpeakerSession",
    # Scenes
    "FrameObservation",
    "MetaFaceChain",
    "SceneAggregator",
    "SceneResolution",
    "SpeakerFrame",
    "ShotBoundaryDebouncer",
    "ShotBoundarySignal",
    "LipTracker",
    "LipTrackOutput",
    # Errors
    "LipTrackError",
    "MissingFrameError",
    "InvalidFrameError",
]
