"""
Lip contour overlays for debugging the active speaker decision.

Draws, on a copy of the frame:
- the inner lip contour landmarks of every face (blue)
- every detected face box (green)
- the active speaker box (red)
"""

from typing import Optional, Sequence

import cv2
import numpy as np

from speakertrack.services.geometry import Landmark, RelativeBox
from speakertrack.services.lip_statistics import LIP_CONTOUR_IDX

# BGR
ACTIVE_SPEAKER_COLOR = (0, 0, 255)
DETECTION_COLOR = (0, 255, 0)
LANDMARK_COLOR = (255, 0, 0)

LANDMARK_RADIUS = 3
BOX_THICKNESS = 2


def draw_lip_contour(
    image: np.ndarray,
    landmarks: Sequence[Landmark],
    color: tuple[int, int, int] = LANDMARK_COLOR,
) -> None:
    """Draw the lip contour landmarks of one face in place."""
    height, width = image.shape[:2]
    if len(landmarks) <= max(LIP_CONTOUR_IDX):
        return
    for idx in LIP_CONTOUR_IDX:
        x, y = landmarks[idx][0], landmarks[idx][1]
        center = (int(x * width), int(y * height))
        cv2.circle(image, center, LANDMARK_RADIUS, color, cv2.FILLED)


def draw_box(
    image: np.ndarray,
    box: RelativeBox,
    color: tuple[int, int, int],
    thickness: int = BOX_THICKNESS,
) -> None:
    """Draw a relative box in place."""
    height, width = image.shape[:2]
    x, y, w, h = box.to_pixels(width, height)
    cv2.rectangle(image, (x, y), (x + w, y + h), color, thickness)


def render_lip_overlay(
    image: np.ndarray,
    landmark_lists: Sequence[Sequence[Landmark]] = (),
    detections: Sequence[RelativeBox] = (),
    speaker_detections: Sequence[RelativeBox] = (),
) -> np.ndarray:
    """
    Render lip contours, detections and the active speaker on a copy of `image`.

    Nothing is drawn when there are no landmarks.
    """
    overlay = image.copy()
    if not landmark_lists:
        return overlay

    for landmarks in landmark_lists:
        draw_lip_contour(overlay, landmarks)
    for box in detections:
        draw_box(overlay, box, DETECTION_COLOR)
    for box in speaker_detections:
        draw_box(overlay, box, ACTIVE_SPEAKER_COLOR)

    return overlay


def frame_overlay(frame, speaker_frame) -> Optional[np.ndarray]:
    """Overlay for a frame and its speaker output; None when the frame has no image."""
    if frame.image is None:
        return None
    if speaker_frame.carried_forward or not speaker_frame.detections:
        return render_lip_overlay(frame.image)
    return render_lip_overlay(
        frame.image,
        frame.landmarks,
        frame.detections,
        speaker_frame.detections,
    )
