"""
Lip Tracker - streaming active speaker detection over face mesh landmarks.

This is the entry point used by the API and by embedding applications:

    tracker = LipTracker(options)
    for frame in frames:
        output = tracker.process(frame)
        if output:
            handle(output)
    final = tracker.close()

`process` buffers frames and returns output only when a scene is resolved.
`close` flushes the remaining (possibly short) scene at the end of the stream.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from speakertrack.config import LipTrackOptions
from speakertrack.services.errors import MissingFrameError
from speakertrack.services.lip_statistics import LipStatisticsEngine
from speakertrack.services.scene_aggregator import (
    FrameObservation,
    SceneAggregator,
    SceneResolution,
    SpeakerFrame,
)
from speakertrack.services.shot_boundary import ShotBoundaryDebouncer, ShotBoundarySignal
from speakertrack.services.speaker_classifier import ActiveSpeakerClassifier
from speakertrack.services.visualization import frame_overlay

logger = logging.getLogger(__name__)


@dataclass
class LipTrackOutput:
    """Output of one resolved scene."""

    scene: SceneResolution
    shot_boundary: Optional[ShotBoundarySignal] = None

    @property
    def frames(self) -> list[SpeakerFrame]:
        return self.scene.frames


class LipTracker:
    """Wires the scene aggregator and the shot boundary debouncer together."""

    def __init__(self, options: Optional[LipTrackOptions] = None):
        self.options = options or LipTrackOptions()
        self.lip_statistics = LipStatisticsEngine(self.options.variance_history)
        self.aggregator = SceneAggregator(
            self.options,
            lip_statistics=self.lip_statistics,
            classifier=ActiveSpeakerClassifier.from_options(self.options),
        )
        self.debouncer = ShotBoundaryDebouncer.from_options(self.options)
        self._closed = False

    def process(self, frame: FrameObservation) -> Optional[LipTrackOutput]:
        """
        Admit one frame.

        Raises:
            MissingFrameError: If the frame has neither an image nor a frame size
        """
        if self._closed:
            raise RuntimeError("LipTracker is closed")

        if frame.dimensions is None:
            raise MissingFrameError(frame.timestamp_ms)

        scene = self.aggregator.add_frame(frame)
        if scene is None:
            return None
        return self._emit(scene)

    def close(self) -> Optional[LipTrackOutput]:
        """Flush the last scene and end the stream."""
        if self._closed:
            return None
        self._closed = True

        scene = self.aggregator.flush()
        output = self._emit(scene) if scene is not None else None
        self.debouncer.reset()
        return output

    def run(self, frames: Iterable[FrameObservation]) -> list[LipTrackOutput]:
        """Process a whole stream, including the final flush."""
        outputs = []
        for frame in frames:
            output = self.process(frame)
            if output is not None:
                outputs.append(output)
        final = self.close()
        if final is not None:
            outputs.append(final)
        return outputs

    def _emit(self, scene: SceneResolution) -> LipTrackOutput:
        shot_boundary = None
        if self.options.output_shot_boundary:
            shot_boundary = self.debouncer.process(scene)

        if self.options.output_contour_frames:
            for observation, speaker_frame in zip(scene.observations, scene.frames):
                speaker_frame.overlay = frame_overlay(observation, speaker_frame)

        return LipTrackOutput(scene=scene, shot_boundary=shot_boundary)
