"""
Scene Aggregator - picks one dominant speaker per buffered window of frames.

Frames are buffered until the window spans at least `min_speaker_span`
milliseconds. The whole window is then resolved in one pass:

1. Faces are chained across frames into meta-faces by one-hop IoU matching
2. Each face's lip statistics history is extended and classified
3. Every frame with exactly one speaking face votes for that face's meta-face
4. The meta-face with the most votes is the scene's dominant speaker
5. Frames where the dominant speaker is missing reuse its last known box

Identity and statistics do not carry over between scenes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from speakertrack.config import LipTrackOptions
from speakertrack.services.errors import InvalidFrameError, MissingFrameError
from speakertrack.services.face_matcher import FaceMatcher
from speakertrack.services.geometry import Landmark, RelativeBox
from speakertrack.services.lip_statistics import LipStatisticsEngine
from speakertrack.services.speaker_classifier import ActiveSpeakerClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameObservation:
    """
    One frame as delivered by the ingestion side.

    Landmark list `i` belongs to detection `i`. The image is optional; when it
    is absent, `frame_size` must be provided as (width, height).
    """

    timestamp_ms: int
    detections: tuple[RelativeBox, ...] = ()
    landmarks: tuple[tuple[Landmark, ...], ...] = ()
    image: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
    frame_size: Optional[tuple[int, int]] = None

    def __post_init__(self):
        object.__setattr__(self, "detections", tuple(self.detections))
        object.__setattr__(self, "landmarks", tuple(tuple(lm) for lm in self.landmarks))
        if self.detections and self.landmarks and len(self.detections) != len(self.landmarks):
            raise InvalidFrameError(
                f"Frame at {self.timestamp_ms}ms has {len(self.detections)} detections "
                f"but {len(self.landmarks)} landmark lists"
            )

    @property
    def has_faces(self) -> bool:
        return bool(self.detections) and bool(self.landmarks)

    @property
    def dimensions(self) -> Optional[tuple[int, int]]:
        """(width, height) of the frame, from the image if there is one."""
        if self.image is not None:
            height, width = self.image.shape[:2]
            return (width, height)
        return self.frame_size


@dataclass
class MetaFaceChain:
    """
    A face identity across one scene.

    `slots[i]` is the face index of this identity in the i-th buffered frame,
    or None when the identity was not observed there.
    """

    meta_face_id: int
    slots: list[Optional[int]]

    @classmethod
    def open(cls, meta_face_id: int, window_size: int) -> "MetaFaceChain":
        return cls(meta_face_id=meta_face_id, slots=[None] * window_size)

    def first_present(self) -> Optional[int]:
        """Window position of the earliest frame where the identity appears."""
        for position, face_idx in enumerate(self.slots):
            if face_idx is not None:
                return position
        return None

    @property
    def frames_present(self) -> int:
        return sum(1 for face_idx in self.slots if face_idx is not None)


@dataclass
class SpeakerFrame:
    """Active speaker output for one frame."""

    timestamp_ms: int
    detections: list[RelativeBox] = field(default_factory=list)
    carried_forward: bool = False
    overlay: Optional[np.ndarray] = field(default=None, repr=False)


@dataclass
class SceneResolution:
    """Result of resolving one buffered window."""

    start_timestamp_ms: int
    end_timestamp_ms: int
    frames: list[SpeakerFrame]
    chains: list[MetaFaceChain]
    votes: dict[int, int]
    dominant_meta_face_id: Optional[int] = None
    # Earliest and latest box of the dominant speaker in this scene
    first_box: Optional[RelativeBox] = None
    last_box: Optional[RelativeBox] = None
    observations: list[FrameObservation] = field(default_factory=list, repr=False)

    @property
    def has_speaker(self) -> bool:
        return self.dominant_meta_face_id is not None

    @property
    def dominant_votes(self) -> int:
        if self.dominant_meta_face_id is None:
            return 0
        return self.votes.get(self.dominant_meta_face_id, 0)


class SceneAggregator:
    """Buffers frames and resolves each window into a dominant speaker."""

    def __init__(
        self,
        options: LipTrackOptions,
        lip_statistics: Optional[LipStatisticsEngine] = None,
        classifier: Optional[ActiveSpeakerClassifier] = None,
    ):
        self.options = options
        self.lip_statistics = lip_statistics or LipStatisticsEngine(options.variance_history)
        self.classifier = classifier or ActiveSpeakerClassifier.from_options(options)
        self._buffer: list[FrameObservation] = []

    @property
    def buffered_frames(self) -> int:
        return len(self._buffer)

    def is_ready(self) -> bool:
        """True when the buffered window spans at least min_speaker_span."""
        if not self._buffer:
            return False
        span = self._buffer[-1].timestamp_ms - self._buffer[0].timestamp_ms
        return span >= self.options.min_speaker_span

    def add_frame(self, frame: FrameObservation) -> Optional[SceneResolution]:
        """
        Buffer a frame and resolve the window if it is long enough.

        Returns:
            SceneResolution when the window was resolved, otherwise None

        Raises:
            MissingFrameError: If a frame with faces has no image or frame size
        """
        dimensions = frame.dimensions
        if dimensions is not None:
            self.lip_statistics.observe_frame_size(*dimensions)
        elif frame.has_faces:
            raise MissingFrameError(frame.timestamp_ms)

        self._buffer.append(frame)
        if self.is_ready():
            return self.resolve()
        return None

    def flush(self) -> Optional[SceneResolution]:
        """Resolve whatever is buffered, regardless of its span."""
        if not self._buffer:
            return None
        return self.resolve()

    def resolve(self) -> SceneResolution:
        """Resolve the buffered window and clear the buffer."""
        window = self._buffer
        self._buffer = []

        chains, votes = self._build_chains_and_votes(window)
        dominant_id = select_dominant(votes)

        if dominant_id is None:
            logger.info(
                f"Scene {window[0].timestamp_ms}-{window[-1].timestamp_ms}ms: "
                f"no dominant speaker in {len(window)} frames"
            )
            return SceneResolution(
                start_timestamp_ms=window[0].timestamp_ms,
                end_timestamp_ms=window[-1].timestamp_ms,
                frames=[SpeakerFrame(timestamp_ms=f.timestamp_ms) for f in window],
                chains=chains,
                votes=votes,
                observations=window,
            )

        chain = chains[dominant_id]
        frames, first_box, last_box = self._carry_forward(window, chain)

        logger.info(
            f"Scene {window[0].timestamp_ms}-{window[-1].timestamp_ms}ms: "
            f"speaker {dominant_id} with {votes[dominant_id]} votes, "
            f"seen in {chain.frames_present}/{len(window)} frames ({len(chains)} faces)"
        )

        return SceneResolution(
            start_timestamp_ms=window[0].timestamp_ms,
            end_timestamp_ms=window[-1].timestamp_ms,
            frames=frames,
            chains=chains,
            votes=votes,
            dominant_meta_face_id=dominant_id,
            first_box=first_box,
            last_box=last_box,
            observations=window,
        )

    def _build_chains_and_votes(
        self,
        window: Sequence[FrameObservation],
    ) -> tuple[list[MetaFaceChain], dict[int, int]]:
        chains: list[MetaFaceChain] = []
        votes: dict[int, int] = {}

        matcher = FaceMatcher(self.options.iou_threshold)
        session = self.classifier.new_session()
        previous_histories: list[list[float]] = []
        previous_meta_ids: list[int] = []

        for position, frame in enumerate(window):
            if not frame.has_faces:
                continue

            statistics = self.lip_statistics.compute(frame.landmarks)
            histories: list[list[float]] = []
            meta_ids: list[int] = []
            speaking: list[int] = []

            for face_idx, box in enumerate(frame.detections):
                statistic = statistics[face_idx] if face_idx < len(statistics) else None
                previous_idx = matcher.match(box)

                if previous_idx is not None:
                    history = self.lip_statistics.extend_history(
                        previous_histories[previous_idx], statistic
                    )
                    chain = chains[previous_meta_ids[previous_idx]]
                else:
                    history = self.lip_statistics.extend_history(None, statistic)
                    chain = MetaFaceChain.open(len(chains), len(window))
                    chains.append(chain)

                chain.slots[position] = face_idx
                histories.append(history)
                meta_ids.append(chain.meta_face_id)

                is_speaking, session = self.classifier.classify(history, session)
                if is_speaking:
                    speaking.append(face_idx)

            if len(speaking) == 1:
                meta_id = meta_ids[speaking[0]]
                votes[meta_id] = votes.get(meta_id, 0) + 1
            elif len(speaking) > 1:
                logger.debug(
                    f"Frame {frame.timestamp_ms}ms: {len(speaking)} faces speaking, no vote"
                )

            matcher.advance(frame.detections)
            previous_histories = histories
            previous_meta_ids = meta_ids

        return chains, votes

    def _carry_forward(
        self,
        window: Sequence[FrameObservation],
        chain: MetaFaceChain,
    ) -> tuple[list[SpeakerFrame], RelativeBox, RelativeBox]:
        seed_position = chain.first_present()
        if seed_position is None:
            raise RuntimeError(f"Meta-face {chain.meta_face_id} has no observations")

        first_box = window[seed_position].detections[chain.slots[seed_position]]
        last_box = first_box
        frames = []

        for position, frame in enumerate(window):
            face_idx = chain.slots[position]
            if face_idx is not None:
                last_box = frame.detections[face_idx]
                frames.append(SpeakerFrame(frame.timestamp_ms, [last_box]))
            else:
                frames.append(SpeakerFrame(frame.timestamp_ms, [last_box], carried_forward=True))

        return frames, first_box, last_box


def select_dominant(votes: dict[int, int]) -> Optional[int]:
    """Meta-face with strictly the most votes; the lowest id wins ties."""
    dominant_id = None
    max_votes = 0
    for meta_id in sorted(votes):
        if votes[meta_id] > max_votes:
            dominant_id = meta_id
            max_votes = votes[meta_id]
    return dominant_id
