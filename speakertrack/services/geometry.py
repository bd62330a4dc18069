"""
Geometry helpers shared by the lip tracking services.

Boxes are relative to the frame (all coordinates in [0, 1]). Landmarks are
normalized (x, y) points and are scaled to pixels before measuring distances.
"""

import math
from dataclasses import dataclass

Landmark = tuple[float, float]


@dataclass(frozen=True)
class RelativeBox:
    """Face bounding box in normalized frame coordinates."""

    xmin: float
    ymin: float
    width: float
    height: float

    @property
    def xmax(self) -> float:
        return self.xmin + self.width

    @property
    def ymax(self) -> float:
        return self.ymin + self.height

    @property
    def area(self) -> float:
        return max(self.width, 0.0) * max(self.height, 0.0)

    def to_pixels(self, frame_width: int, frame_height: int) -> tuple[int, int, int, int]:
        """Convert to an (x, y, w, h) pixel rectangle."""
        return (
            int(self.xmin * frame_width),
            int(self.ymin * frame_height),
            int(self.width * frame_width),
            int(self.height * frame_height),
        )


def iou(box_a: RelativeBox, box_b: RelativeBox) -> float:
    """
    Calculate Intersection over Union between two relative boxes.

    Returns 0.0 for disjoint boxes and for a zero-area union.
    """
    xi1 = max(box_a.xmin, box_b.xmin)
    yi1 = max(box_a.ymin, box_b.ymin)
    xi2 = min(box_a.xmax, box_b.xmax)
    yi2 = min(box_a.ymax, box_b.ymax)

    if xi2 <= xi1 or yi2 <= yi1:
        return 0.0

    intersection = (xi2 - xi1) * (yi2 - yi1)
    union = box_a.area + box_b.area - intersection

    if union <= 0:
        return 0.0

    return intersection / union


def landmark_distance(
    point_a: Landmark,
    point_b: Landmark,
    frame_width: int,
    frame_height: int,
) -> float:
    """Euclidean distance between two normalized landmarks, in pixels."""
    dx = (point_a[0] - point_b[0]) * frame_width
    dy = (point_a[1] - point_b[1]) * frame_height
    return math.hypot(dx, dy)
