"""
Shot Boundary Debouncer - turns dominant speaker changes into cut signals.

A change is signalled when a scene's dominant speaker appears after a scene
without one, or when its box no longer overlaps the previous speaker's box.
Changes closer than `min_shot_span` seconds to the previous signalled change
are suppressed, so the camera does not cut back and forth.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from speakertrack.config import LipTrackOptions
from speakertrack.services.geometry import RelativeBox, iou
from speakertrack.services.scene_aggregator import SceneResolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShotBoundarySignal:
    """Speaker change decision, stamped with the scene's first frame."""

    timestamp_ms: int
    is_speaker_change: bool


class ShotBoundaryDebouncer:
    """Stateful comparator between consecutive scenes' dominant speakers."""

    def __init__(
        self,
        iou_threshold: float,
        min_shot_span: float,
        output_only_on_change: bool = False,
    ):
        self.iou_threshold = iou_threshold
        self.min_shot_span = min_shot_span
        self.output_only_on_change = output_only_on_change

        self._previous_meta_face_id: Optional[int] = None
        self._previous_box: Optional[RelativeBox] = None
        self._last_change_ms: Optional[int] = None

    @classmethod
    def from_options(cls, options: LipTrackOptions) -> "ShotBoundaryDebouncer":
        return cls(
            iou_threshold=options.iou_threshold,
            min_shot_span=options.min_shot_span,
            output_only_on_change=options.output_shot_boundary_only_on_change,
        )

    @property
    def previous_box(self) -> Optional[RelativeBox]:
        return self._previous_box

    @property
    def last_change_ms(self) -> Optional[int]:
        return self._last_change_ms

    def reset(self) -> None:
        self._previous_meta_face_id = None
        self._previous_box = None
        self._last_change_ms = None

    def decide(self, scene: SceneResolution) -> ShotBoundarySignal:
        """Compute the (debounced) change signal for a resolved scene and update state."""
        timestamp_ms = scene.start_timestamp_ms

        if not scene.has_speaker:
            is_change = False
        elif self._previous_meta_face_id is None or self._previous_box is None:
            is_change = True
        else:
            is_change = iou(self._previous_box, scene.first_box) < self.iou_threshold

        if is_change and self._within_min_span(timestamp_ms):
            logger.debug(f"Speaker change at {timestamp_ms}ms suppressed by min_shot_span")
            is_change = False

        if is_change:
            self._last_change_ms = timestamp_ms
            logger.info(f"Speakers change at: {timestamp_ms / 1000:.3f} seconds.")

        self._previous_meta_face_id = scene.dominant_meta_face_id
        self._previous_box = scene.last_box

        return ShotBoundarySignal(timestamp_ms=timestamp_ms, is_speaker_change=is_change)

    def process(self, scene: SceneResolution) -> Optional[ShotBoundarySignal]:
        """
        Decide the signal and apply the emission policy.

        Returns:
            The signal, or None when it is false and only changes are emitted
        """
        signal = self.decide(scene)
        if not signal.is_speaker_change and self.output_only_on_change:
            return None
        return signal

    def _within_min_span(self, timestamp_ms: int) -> bool:
        if self._last_change_ms is None:
            return False
        return (timestamp_ms - self._last_change_ms) / 1000 < self.min_shot_span
