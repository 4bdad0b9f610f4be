"""Trophy-position detection for serves.

The trophy position is the loaded pause before the forward swing: the racket
wrist has slowed down, the toss arm is high, both arms are up, the knees are
bent and the feet are planted. Each cue becomes a per-frame signal; the
frame that best combines them before the racket's acceleration peak wins.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config.detector_config import HandednessConfig, TrophyConfig
from ..config.keypoints import Hand, SkeletonModel
from ..core.errors import NoEventFoundError
from ..core.pose_data import PoseFrames, present_bodies
from ..core.smoother import SignalSmoother
from ..serialization import SerializableResult
from .base_detector import BaseDetector, ScoredFrame, event_confidence
from .geometry import angle_at_vertex, distance, image_height, min_max_normalize
from .handedness import HandednessResult, resolve_hand
from .kinematics import acceleration_series, speed_between, speed_series
from .peaks import argmax_optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrophySignal:
    """Per-frame trophy cues. None means the cue was not measurable."""

    frame: int
    timestamp: float
    # Racket wrist
    racket_wrist_velocity: Optional[float]
    racket_wrist_acceleration: Optional[float]
    # Toss wrist (free hand); height is 1 at its highest point in the clip
    toss_wrist_y: Optional[float]
    toss_wrist_height: Optional[float]
    # Arms above shoulders
    left_arm_up: Optional[bool]
    right_arm_up: Optional[bool]
    arms_up_score: Optional[float]
    # Legs
    left_knee_angle: Optional[float]
    right_knee_angle: Optional[float]
    knee_bend: Optional[float]          # 180 - mean knee angle
    knee_distance: Optional[float]
    ankle_distance: Optional[float]
    ankle_motion: Optional[float]       # px/s, mean of both ankles
    ankle_stability: Optional[float]    # 1 = no motion
    legs_together: Optional[float]


@dataclass(frozen=True)
class TrophyDetectionResult(SerializableResult):
    trophy_frame: int
    trophy_timestamp: float
    peak_acceleration_frame: int
    peak_acceleration: float
    score: float
    confidence: float
    dominant_hand: Hand
    handedness: HandednessResult
    raw_signals: Tuple[TrophySignal, ...]
    signals: Tuple[TrophySignal, ...]
    scores: Tuple[ScoredFrame, ...]

    @property
    def handedness_confidence(self) -> float:
        return self.handedness.confidence


@dataclass
class _RawFrame:
    frame: int
    timestamp: float
    racket_wrist: Optional[np.ndarray]
    toss_wrist: Optional[np.ndarray]
    left_wrist: Optional[np.ndarray]
    right_wrist: Optional[np.ndarray]
    left_shoulder: Optional[np.ndarray]
    right_shoulder: Optional[np.ndarray]
    left_hip: Optional[np.ndarray]
    right_hip: Optional[np.ndarray]
    left_knee: Optional[np.ndarray]
    right_knee: Optional[np.ndarray]
    left_ankle: Optional[np.ndarray]
    right_ankle: Optional[np.ndarray]


SMOOTHED_CHANNELS = (
    "racket_wrist_velocity",
    "racket_wrist_acceleration",
    "toss_wrist_height",
    "knee_bend",
    "legs_together",
    "arms_up_score",
)


def _knee_angle(hip, knee, ankle) -> Optional[float]:
    if hip is None or knee is None or ankle is None:
        return None
    return angle_at_vertex(hip, knee, ankle)


def _pair_distance(a, b) -> Optional[float]:
    if a is None or b is None:
        return None
    return distance(a, b)


def _weighted(parts: Sequence[Tuple[Optional[float], float]]) -> Optional[float]:
    """Weighted mean over the parts that are present, weights renormalised."""
    available = [(v, w) for v, w in parts if v is not None]
    total = sum(w for _, w in available)
    if not available or total <= 0:
        return None
    return sum(v * w for v, w in available) / total


class TrophyDetector(BaseDetector):
    """Locate the trophy position in a serve clip."""

    name = "trophy"

    def __init__(
        self,
        config: Optional[TrophyConfig] = None,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        handedness_config: Optional[HandednessConfig] = None,
        strict_layout: bool = False,
    ):
        super().__init__(config or TrophyConfig(), model, body_index, strict_layout)
        self.handedness_config = handedness_config or HandednessConfig()

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _collect(self, frames: PoseFrames, fps: float, dominant: Hand) -> List[_RawFrame]:
        thr = self.config.min_confidence
        racket, toss = self.sides(dominant)
        lay = self.layout
        raw: List[_RawFrame] = []
        for frame, body in present_bodies(frames, self.body_index):
            raw.append(
                _RawFrame(
                    frame=frame,
                    timestamp=frame / fps,
                    racket_wrist=body.point(racket.wrist, thr),
                    toss_wrist=body.point(toss.wrist, thr),
                    left_wrist=body.point(lay.left_wrist, thr),
                    right_wrist=body.point(lay.right_wrist, thr),
                    left_shoulder=body.point(lay.left_shoulder, thr),
                    right_shoulder=body.point(lay.right_shoulder, thr),
                    left_hip=body.point(lay.left_hip, thr),
                    right_hip=body.point(lay.right_hip, thr),
                    left_knee=body.point(lay.left_knee, thr),
                    right_knee=body.point(lay.right_knee, thr),
                    left_ankle=body.point(lay.left_ankle, thr),
                    right_ankle=body.point(lay.right_ankle, thr),
                )
            )
        return raw

    def _arms_up(self, d: _RawFrame) -> Tuple[Optional[bool], Optional[bool], Optional[float]]:
        cfg = self.config
        left_lift = right_lift = None
        if d.left_wrist is not None and d.left_shoulder is not None:
            left_lift = d.left_shoulder[1] - d.left_wrist[1]
        if d.right_wrist is not None and d.right_shoulder is not None:
            right_lift = d.right_shoulder[1] - d.right_wrist[1]

        left_up = None if left_lift is None else bool(left_lift > 0)
        right_up = None if right_lift is None else bool(right_lift > 0)

        if left_up and right_up:
            shoulder_y = (d.left_shoulder[1] + d.right_shoulder[1]) / 2.0
            left_hip_y = d.left_hip[1] if d.left_hip is not None else d.left_shoulder[1] + cfg.fallback_hip_offset_px
            right_hip_y = d.right_hip[1] if d.right_hip is not None else d.right_shoulder[1] + cfg.fallback_hip_offset_px
            torso = max((left_hip_y + right_hip_y) / 2.0 - shoulder_y, cfg.min_torso_length_px)
            score = (min(1.0, left_lift / torso) + min(1.0, right_lift / torso)) / 2.0
        elif left_up or right_up:
            score = cfg.one_arm_up_score
        elif left_up is None and right_up is None:
            score = None
        else:
            score = 0.0
        return left_up, right_up, (None if score is None else float(score))

    def extract_signals(self, frames: PoseFrames, fps: float, dominant: Hand) -> List[TrophySignal]:
        """One pass over the clip producing raw (unsmoothed) trophy cues."""
        cfg = self.config
        raw = self._collect(frames, fps, dominant)
        timestamps = [d.timestamp for d in raw]

        velocities = speed_series([d.racket_wrist for d in raw], timestamps)
        accelerations = acceleration_series([d.racket_wrist for d in raw], timestamps)

        toss_ys = [None if d.toss_wrist is None else float(d.toss_wrist[1]) for d in raw]
        valid_toss = [y for y in toss_ys if y is not None]
        toss_min = min(valid_toss) if valid_toss else 0.0
        toss_max = max(valid_toss) if valid_toss else 0.0

        ankle_distances = [_pair_distance(d.left_ankle, d.right_ankle) for d in raw]
        knee_distances = [_pair_distance(d.left_knee, d.right_knee) for d in raw]
        ankle_proximity = min_max_normalize(ankle_distances, invert=True)
        knee_proximity = min_max_normalize(knee_distances, invert=True)

        motions: List[Optional[float]] = [None] * len(raw)
        for i in range(1, len(raw)):
            prev, curr = raw[i - 1], raw[i]
            left = speed_between(prev.left_ankle, prev.timestamp, curr.left_ankle, curr.timestamp)
            right = speed_between(prev.right_ankle, prev.timestamp, curr.right_ankle, curr.timestamp)
            if left is not None and right is not None:
                motions[i] = (left + right) / 2.0
        valid_motion = [m for m in motions if m is not None]
        max_motion = max(valid_motion + [1.0])

        signals: List[TrophySignal] = []
        for i, d in enumerate(raw):
            left_up, right_up, arms_score = self._arms_up(d)

            left_angle = _knee_angle(d.left_hip, d.left_knee, d.left_ankle)
            right_angle = _knee_angle(d.right_hip, d.right_knee, d.right_ankle)
            angles = [a for a in (left_angle, right_angle) if a is not None]
            knee_bend = 180.0 - float(np.mean(angles)) if angles else None

            stability = None if motions[i] is None else 1.0 - min(1.0, motions[i] / max_motion)
            legs = _weighted(
                [
                    (stability, cfg.legs_stability_weight),
                    (ankle_proximity[i], cfg.legs_ankle_weight),
                    (knee_proximity[i], cfg.legs_knee_weight),
                ]
            )

            signals.append(
                TrophySignal(
                    frame=d.frame,
                    timestamp=d.timestamp,
                    racket_wrist_velocity=velocities[i],
                    racket_wrist_acceleration=accelerations[i],
                    toss_wrist_y=toss_ys[i],
                    toss_wrist_height=image_height(toss_ys[i], toss_min, toss_max),
                    left_arm_up=left_up,
                    right_arm_up=right_up,
                    arms_up_score=arms_score,
                    left_knee_angle=left_angle,
                    right_knee_angle=right_angle,
                    knee_bend=knee_bend,
                    knee_distance=knee_distances[i],
                    ankle_distance=ankle_distances[i],
                    ankle_motion=motions[i],
                    ankle_stability=stability,
                    legs_together=legs,
                )
            )
        return signals

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_window(self, signals: Sequence[TrophySignal], start: int, end: int) -> List[ScoredFrame]:
        """Score frames ``[start, end)`` against the window's own extrema."""
        cfg = self.config
        window = signals[start:end]

        def norm(name: str, invert: bool) -> List[float]:
            values = min_max_normalize([getattr(s, name) for s in window], invert=invert)
            return [0.0 if v is None else v for v in values]

        accel = norm("racket_wrist_acceleration", invert=True)
        toss = norm("toss_wrist_height", invert=False)
        knee = norm("knee_bend", invert=False)
        arms = norm("arms_up_score", invert=False)
        legs = norm("legs_together", invert=False)

        scored: List[ScoredFrame] = []
        for k, s in enumerate(window):
            score = (
                accel[k] * cfg.weight_acceleration
                + toss[k] * cfg.weight_toss_height
                + knee[k] * cfg.weight_knee_bend
                + arms[k] * cfg.weight_arms_up
                + legs[k] * cfg.weight_legs_together
            )
            scored.append(ScoredFrame(frame=s.frame, timestamp=s.timestamp, score=score))
        return scored

    def analyze(
        self,
        frames: PoseFrames,
        fps: float,
        dominant_hand: Union[Hand, str, HandednessResult, None] = "auto",
    ) -> TrophyDetectionResult:
        fps = self.validate(frames, fps)
        cfg = self.config

        hand = resolve_hand(dominant_hand, frames, self.layout, self.body_index, self.handedness_config)
        raw_signals = self.extract_signals(frames, fps, hand.dominant)
        usable = sum(1 for s in raw_signals if s.racket_wrist_velocity is not None)
        self.require(usable, cfg.min_frames)

        smoothed = SignalSmoother(cfg.smoothing_window).smooth(raw_signals, SMOOTHED_CHANNELS)

        peak_idx = argmax_optional([s.racket_wrist_acceleration for s in smoothed])
        if peak_idx is None:
            raise NoEventFoundError(self.name, "no racket-wrist acceleration measurable")
        if peak_idx < len(smoothed) * cfg.early_peak_fraction:
            logger.warning(
                "Peak acceleration at %d/%d frames; serve may be cut off at the start",
                peak_idx, len(smoothed),
            )

        start = int(math.floor(peak_idx * cfg.window_start_fraction))
        end = int(math.floor(peak_idx * cfg.window_end_fraction))
        if end <= start:
            raise NoEventFoundError(
                self.name, f"search window before peak acceleration (index {peak_idx}) is empty"
            )

        scores = self.score_window(smoothed, start, end)
        best = max(range(len(scores)), key=lambda k: (scores[k].score, -k))
        best_frame = scores[best]
        peak = smoothed[peak_idx]

        logger.debug(
            "Trophy at frame %d (score %.2f), peak acceleration at frame %d",
            best_frame.frame, best_frame.score, peak.frame,
        )
        return TrophyDetectionResult(
            trophy_frame=best_frame.frame,
            trophy_timestamp=best_frame.timestamp,
            peak_acceleration_frame=peak.frame,
            peak_acceleration=float(peak.racket_wrist_acceleration),
            score=best_frame.score,
            confidence=event_confidence(best_frame.score, hand.confidence),
            dominant_hand=hand.dominant,
            handedness=hand,
            raw_signals=tuple(raw_signals),
            signals=tuple(smoothed),
            scores=tuple(scores),
        )


def detect_trophy(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    body_index: int = 0,
    config: Optional[TrophyConfig] = None,
    dominant_hand: Union[Hand, str, HandednessResult, None] = "auto",
) -> TrophyDetectionResult:
    return TrophyDetector(config, model, body_index).analyze(frames, fps, dominant_hand)
