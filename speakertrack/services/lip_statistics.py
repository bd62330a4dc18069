"""
Lip Statistics - mouth aspect ratio per face and bounded per-face history.

The mouth aspect ratio (MAR) is the average vertical gap between paired
upper/lower inner-lip landmarks divided by the distance between the inner
mouth corners. It is the visual proxy for speech activity: an open, moving
mouth produces a high and varying MAR.

Landmark indices follow the 468-point MediaPipe face mesh.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from speakertrack.services.geometry import Landmark, landmark_distance

logger = logging.getLogger(__name__)


# ============================================================================
# FACE MESH LANDMARKS
# ============================================================================

FACE_MESH_LANDMARKS = 468

LIP_LEFT_INNER_CORNER_IDX = 78
LIP_RIGHT_INNER_CORNER_IDX = 308
LIP_UPPER_IDX = (82, 13, 312)
LIP_LOWER_IDX = (87, 14, 317)

# Contour drawn by the visualization overlay
LIP_CONTOUR_IDX = (78, 82, 13, 312, 308, 317, 14, 87)


class LipStatisticsEngine:
    """
    Computes per-frame mouth aspect ratios and maintains their history.

    Landmark distances are measured in pixels, so the engine needs the frame
    dimensions. They are captured from the first observed frame and reused
    for every later frame.
    """

    def __init__(self, variance_history: int):
        self.variance_history = variance_history
        self._frame_width: Optional[int] = None
        self._frame_height: Optional[int] = None

    @property
    def frame_size(self) -> Optional[tuple[int, int]]:
        if self._frame_width is None or self._frame_height is None:
            return None
        return (self._frame_width, self._frame_height)

    def observe_frame_size(self, frame_width: int, frame_height: int) -> None:
        """Record the frame dimensions; only the first call has an effect."""
        if self._frame_width is None:
            self._frame_width = frame_width
            self._frame_height = frame_height
            logger.info(f"Lip statistics frame size: {frame_width}x{frame_height}")

    def mouth_aspect_ratio(self, landmarks: Sequence[Landmark]) -> Optional[float]:
        """
        Calculate the mouth aspect ratio for one face.

        Returns:
            height / width, or None when the landmark list is incomplete or
            the mouth corners coincide
        """
        if len(landmarks) < FACE_MESH_LANDMARKS:
            return None
        if self.frame_size is None:
            raise RuntimeError("Frame size not observed yet")

        width, height = self.frame_size
        mouth_width = landmark_distance(
            landmarks[LIP_LEFT_INNER_CORNER_IDX],
            landmarks[LIP_RIGHT_INNER_CORNER_IDX],
            width,
            height,
        )
        if mouth_width <= 0:
            return None

        mouth_height = float(np.mean([
            landmark_distance(landmarks[upper], landmarks[lower], width, height)
            for upper, lower in zip(LIP_UPPER_IDX, LIP_LOWER_IDX)
        ]))

        return mouth_height / mouth_width

    def compute(self, landmark_lists: Sequence[Sequence[Landmark]]) -> list[Optional[float]]:
        """Mouth aspect ratio for every face in a frame, aligned by face index."""
        statistics = []
        for face_idx, landmarks in enumerate(landmark_lists):
            ratio = self.mouth_aspect_ratio(landmarks)
            if ratio is None:
                logger.debug(
                    f"Skipping lip statistic for face {face_idx}: "
                    f"{len(landmarks)} landmarks"
                )
            statistics.append(ratio)
        return statistics

    def extend_history(
        self,
        previous: Optional[Sequence[float]],
        statistic: Optional[float],
    ) -> list[float]:
        """
        Build a face's history for the current frame.

        Args:
            previous: History carried over from the matched face, or None for
                a face seen for the first time
            statistic: This frame's ratio, or None if it could not be measured

        Returns:
            New history (oldest first), never longer than variance_history
        """
        history = list(previous) if previous else []
        if statistic is not None:
            history.append(statistic)
        while len(history) > self.variance_history:
            history.pop(0)
        return history
