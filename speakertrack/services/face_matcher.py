"""
Frame-to-frame face association by IoU.

Identity continuity is resolved one hop at a time: a face is matched only
against the faces of the immediately preceding processed frame.
"""

import logging
from typing import Optional, Sequence

from speakertrack.services.geometry import RelativeBox, iou

logger = logging.getLogger(__name__)


class FaceMatcher:
    """Matches a face box against the boxes of the previous processed frame."""

    def __init__(self, iou_threshold: float):
        self.iou_threshold = iou_threshold
        self._previous_boxes: list[RelativeBox] = []

    def advance(self, boxes: Sequence[RelativeBox]) -> None:
        """Make `boxes` the reference frame for the next round of matches."""
        self._previous_boxes = list(boxes)

    def reset(self) -> None:
        """Forget the previous frame."""
        self._previous_boxes = []

    def match(self, box: RelativeBox) -> Optional[int]:
        """
        Find the previous-frame face that best overlaps `box`.

        Candidates below the IoU threshold are ignored. Among the rest the
        strictly highest IoU wins, so ties keep the earliest index.

        Returns:
            Index into the previous frame's boxes, or None if nothing matches
        """
        return match_face(box, self._previous_boxes, self.iou_threshold)


def match_face(
    box: RelativeBox,
    previous_boxes: Sequence[RelativeBox],
    iou_threshold: float,
) -> Optional[int]:
    """Best-IoU index among `previous_boxes`; zero overlap never matches."""
    best_idx: Optional[int] = None
    best_iou = 0.0

    for idx, previous in enumerate(previous_boxes):
        overlap = iou(previous, box)
        if overlap < iou_threshold:
            continue
        if overlap > best_iou:
            best_iou = overlap
            best_idx = idx

    return best_idx
