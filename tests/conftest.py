"""
Pytest configuration and fixtures.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

FRAME_SIZE = (100, 100)


def build_landmarks(ratio, center=(0.5, 0.5), mouth_width=0.1, count=468):
    """
    Build a face mesh whose mouth aspect ratio is `ratio` on a square frame.

    Only the lip landmarks are placed; every other point sits at the origin.
    """
    cx, cy = center
    gap = ratio * mouth_width
    points = [(0.0, 0.0)] * count
    if count < 468:
        return points

    points[78] = (cx - mouth_width / 2, cy)
    points[308] = (cx + mouth_width / 2, cy)
    for offset, (upper, lower) in zip((-0.02, 0.0, 0.02), ((82, 87), (13, 14), (312, 317))):
        points[upper] = (cx + offset, cy - gap / 2)
        points[lower] = (cx + offset, cy + gap / 2)
    return points


@pytest.fixture
def landmarks_for():
    """Factory for face meshes with a given mouth aspect ratio."""
    return build_landmarks


@pytest.fixture
def make_frame():
    """Factory for FrameObservations of (box, ratio) faces on a square frame."""
    from speakertrack.services.scene_aggregator import FrameObservation

    def _make(timestamp_ms, faces=(), frame_size=FRAME_SIZE, image=None):
        return FrameObservation(
            timestamp_ms=timestamp_ms,
            detections=tuple(box for box, _ in faces),
            landmarks=tuple(build_landmarks(ratio) for _, ratio in faces),
            frame_size=frame_size,
            image=image,
        )

    return _make


@pytest.fixture
def speaker_options():
    """Options tuned for five-frame scenes at 100ms per frame."""
    from speakertrack.config import LipTrackOptions

    return LipTrackOptions(
        min_speaker_span=400,
        iou_threshold=0.3,
        variance_history=4,
        mean_history=2,
        lip_mean_threshold_big_mouth=0.25,
        lip_variance_threshold_big_mouth=0.01,
        lip_mean_threshold_small_mouth=0.1,
        lip_variance_threshold_small_mouth=0.001,
        min_shot_span=1.0,
    )


@pytest.fixture(scope="session")
def sample_image():
    """Create a sample test image."""
    import cv2
    import numpy as np

    image = np.zeros((FRAME_SIZE[1], FRAME_SIZE[0], 3), dtype=np.uint8)
    cv2.circle(image, (50, 50), 30, (200, 180, 160), cv2.FILLED)
    return image


@pytest.fixture
def mock_settings(mocker):
    """Settings with authentication enabled."""
    from speakertrack.config import Settings

    settings = Settings(speakertrack_api_key="test-key")
    mocker.patch("speakertrack.auth.get_settings", return_value=settings)
    return settings
