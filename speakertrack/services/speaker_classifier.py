"""
Active speaker classification from lip statistics history.

A face is speaking when its recent mouth aspect ratio is high enough and its
history varies enough. Two regimes are accepted:

- big mouth: a high short-term mean with moderate variance
- small mouth: a lower short-term mean compensated by a higher variance

Within a scene only a "louder" face than the best one seen so far can be
judged speaking. The running best (the high-water marks) is carried in a
SpeakerSession that the caller threads through every classification of the
scene, so the winner-take-all pass is an explicit fold over the scene's faces.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeakerSession:
    """High-water marks of the loudest speaker seen so far in a scene."""

    speaker_mean: float = 0.0
    speaker_variance: float = 0.0


@dataclass(frozen=True)
class LipActivity:
    """Summary statistics of one face's history."""

    mean_short: float
    mean: float
    variance: float
    samples: int


class ActiveSpeakerClassifier:
    """Decides whether a face's lip statistics history looks like speech."""

    def __init__(
        self,
        variance_history: int,
        mean_history: int,
        mean_threshold_big_mouth: float,
        variance_threshold_big_mouth: float,
        mean_threshold_small_mouth: float,
        variance_threshold_small_mouth: float,
    ):
        self.variance_history = variance_history
        self.mean_history = mean_history
        self.mean_threshold_big_mouth = mean_threshold_big_mouth
        self.variance_threshold_big_mouth = variance_threshold_big_mouth
        self.mean_threshold_small_mouth = mean_threshold_small_mouth
        self.variance_threshold_small_mouth = variance_threshold_small_mouth

    @classmethod
    def from_options(cls, options) -> "ActiveSpeakerClassifier":
        return cls(
            variance_history=options.variance_history,
            mean_history=options.mean_history,
            mean_threshold_big_mouth=options.lip_mean_threshold_big_mouth,
            variance_threshold_big_mouth=options.lip_variance_threshold_big_mouth,
            mean_threshold_small_mouth=options.lip_mean_threshold_small_mouth,
            variance_threshold_small_mouth=options.lip_variance_threshold_small_mouth,
        )

    def new_session(self) -> SpeakerSession:
        return SpeakerSession()

    def summarize(self, history: Sequence[float]) -> Optional[LipActivity]:
        """
        Compute the statistics used for classification.

        Returns None when the history is too short to belong to a persistent
        face (no more than half of variance_history samples).
        """
        if len(history) <= self.variance_history / 2:
            return None

        values = np.asarray(history, dtype=np.float64)

        if len(values) < self.mean_history:
            # Short history: use the oldest sample rather than averaging.
            mean_short = float(values[0])
        else:
            mean_short = float(np.mean(values[-self.mean_history:]))

        return LipActivity(
            mean_short=mean_short,
            mean=float(np.mean(values)),
            variance=float(np.var(values)),
            samples=len(values),
        )

    def classify(
        self,
        history: Sequence[float],
        session: SpeakerSession,
    ) -> tuple[bool, SpeakerSession]:
        """
        Classify one face and fold the result into the scene session.

        Returns:
            Tuple of (is_speaking, updated_session). The session is returned
            unchanged when the face is not speaking.
        """
        activity = self.summarize(history)
        if activity is None:
            return False, session

        big_mouth = (
            activity.mean_short >= self.mean_threshold_big_mouth
            and activity.variance >= self.variance_threshold_big_mouth
            and activity.mean_short > session.speaker_mean
        )
        small_mouth = (
            activity.mean_short >= self.mean_threshold_small_mouth
            and activity.variance >= self.variance_threshold_small_mouth
            and activity.variance > session.speaker_variance
        )

        if not (big_mouth or small_mouth):
            return False, session

        return True, SpeakerSession(
            speaker_mean=activity.mean_short,
            speaker_variance=activity.variance,
        )
