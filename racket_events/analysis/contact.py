"""Ball-contact detection from the racket-arm tip.

Contact happens near the fastest point of the arm, with the arm reaching
high and extended and the body stretched upward. The "arm tip" is the wrist
or the elbow, whichever is higher in the image, so a wrist lost to motion
blur or leaving the frame at full extension still leaves a usable track.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config.detector_config import ContactConfig, HandednessConfig
from ..config.keypoints import Hand, SkeletonModel
from ..core.errors import NoEventFoundError
from ..core.pose_data import PoseFrames, present_bodies
from ..core.smoother import SignalSmoother
from ..serialization import SerializableResult
from .base_detector import BaseDetector, ScoredFrame, event_confidence
from .geometry import angle_at_vertex, bearing_deg, clamp, image_height, min_max_normalize
from .handedness import HandednessResult, resolve_hand
from .kinematics import acceleration_series, speed_series
from .peaks import argmax_optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactSignal:
    frame: int
    timestamp: float
    arm_tip_y: Optional[float]
    arm_tip_height: Optional[float]
    arm_tip_velocity: Optional[float]
    arm_tip_acceleration: Optional[float]
    used_elbow_as_tip: bool
    arm_extension_angle: Optional[float]
    arm_extension_score: Optional[float]
    shoulder_height: Optional[float]
    hip_height: Optional[float]
    body_extension: Optional[float]


@dataclass(frozen=True)
class ContactPointDetectionResult(SerializableResult):
    contact_frame: int
    contact_timestamp: float
    peak_velocity_frame: int
    peak_velocity: float
    score: float
    confidence: float
    dominant_hand: Hand
    handedness: HandednessResult
    used_elbow_as_tip: bool
    raw_signals: Tuple[ContactSignal, ...]
    signals: Tuple[ContactSignal, ...]
    scores: Tuple[ScoredFrame, ...]

    @property
    def handedness_confidence(self) -> float:
        return self.handedness.confidence


SMOOTHED_CHANNELS = (
    "arm_tip_height",
    "arm_tip_velocity",
    "arm_tip_acceleration",
    "arm_extension_score",
    "body_extension",
)


def arm_tip(wrist: Optional[np.ndarray], elbow: Optional[np.ndarray]) -> Tuple[Optional[np.ndarray], bool]:
    """Higher of wrist and elbow (lower image Y), and whether it is the elbow."""
    if wrist is None and elbow is None:
        return None, False
    if wrist is None:
        return elbow, True
    if elbow is None:
        return wrist, False
    if elbow[1] < wrist[1]:
        return elbow, True
    return wrist, False


def _mean_y(a: Optional[np.ndarray], b: Optional[np.ndarray]) -> Optional[float]:
    if a is None or b is None:
        return None
    return float((a[1] + b[1]) / 2.0)


def _extent(values: Sequence[Optional[float]]) -> Tuple[float, float]:
    valid = [v for v in values if v is not None]
    if not valid:
        return 0.0, 0.0
    return min(valid), max(valid)


class ContactPointDetector(BaseDetector):
    """Locate the ball-contact frame of a serve or overhead."""

    name = "contact"

    def __init__(
        self,
        config: Optional[ContactConfig] = None,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        handedness_config: Optional[HandednessConfig] = None,
        strict_layout: bool = False,
    ):
        super().__init__(config or ContactConfig(), model, body_index, strict_layout)
        self.handedness_config = handedness_config or HandednessConfig()

    def extension_angle(
        self,
        shoulder: Optional[np.ndarray],
        elbow: Optional[np.ndarray],
        wrist: Optional[np.ndarray],
        used_elbow: bool,
    ) -> Optional[float]:
        """Shoulder-elbow-wrist angle, estimated from the upper arm if the elbow is the tip."""
        cfg = self.config
        if shoulder is not None and elbow is not None and wrist is not None:
            return angle_at_vertex(shoulder, elbow, wrist)
        if used_elbow and shoulder is not None and elbow is not None:
            # A near-vertical upper arm pointing up means the arm is extended.
            verticalness = abs(abs(bearing_deg(shoulder, elbow)) - 90.0)
            if verticalness < cfg.vertical_tolerance_deg:
                return cfg.vertical_base_angle_deg + (cfg.vertical_tolerance_deg - verticalness)
            return cfg.non_vertical_angle_deg
        return None

    def extract_signals(self, frames: PoseFrames, fps: float, dominant: Hand) -> List[ContactSignal]:
        cfg = self.config
        thr = cfg.min_confidence
        racket, _ = self.sides(dominant)
        lay = self.layout

        records = []
        for frame, body in present_bodies(frames, self.body_index):
            wrist = body.point(racket.wrist, thr)
            elbow = body.point(racket.elbow, thr)
            tip, used_elbow = arm_tip(wrist, elbow)
            records.append(
                {
                    "frame": frame,
                    "timestamp": frame / fps,
                    "wrist": wrist,
                    "elbow": elbow,
                    "shoulder": body.point(racket.shoulder, thr),
                    "tip": tip,
                    "used_elbow": used_elbow,
                    "shoulder_y": _mean_y(body.point(lay.left_shoulder, thr), body.point(lay.right_shoulder, thr)),
                    "hip_y": _mean_y(body.point(lay.left_hip, thr), body.point(lay.right_hip, thr)),
                }
            )

        timestamps = [r["timestamp"] for r in records]
        tips = [r["tip"] for r in records]
        velocities = speed_series(tips, timestamps)
        accelerations = acceleration_series(tips, timestamps)

        tip_ys = [None if t is None else float(t[1]) for t in tips]
        tip_lo, tip_hi = _extent(tip_ys)
        sh_lo, sh_hi = _extent([r["shoulder_y"] for r in records])
        hip_lo, hip_hi = _extent([r["hip_y"] for r in records])

        elbow_tips = sum(1 for r in records if r["used_elbow"])
        if elbow_tips:
            logger.debug("Elbow used as arm tip in %d/%d frames", elbow_tips, len(records))

        signals: List[ContactSignal] = []
        for i, r in enumerate(records):
            angle = self.extension_angle(r["shoulder"], r["elbow"], r["wrist"], r["used_elbow"])
            ext_score = None if angle is None else clamp((angle - 90.0) / 90.0)
            shoulder_h = image_height(r["shoulder_y"], sh_lo, sh_hi)
            hip_h = image_height(r["hip_y"], hip_lo, hip_hi)
            if shoulder_h is not None and hip_h is not None:
                body_ext = shoulder_h * cfg.body_shoulder_weight + hip_h * cfg.body_hip_weight
            elif shoulder_h is not None:
                body_ext = shoulder_h
            else:
                body_ext = hip_h

            signals.append(
                ContactSignal(
                    frame=r["frame"],
                    timestamp=r["timestamp"],
                    arm_tip_y=tip_ys[i],
                    arm_tip_height=image_height(tip_ys[i], tip_lo, tip_hi),
                    arm_tip_velocity=velocities[i],
                    arm_tip_acceleration=accelerations[i],
                    used_elbow_as_tip=r["used_elbow"],
                    arm_extension_angle=angle,
                    arm_extension_score=ext_score,
                    shoulder_height=shoulder_h,
                    hip_height=hip_h,
                    body_extension=body_ext,
                )
            )
        return signals

    def score_window(
        self,
        signals: Sequence[ContactSignal],
        start: int,
        end: int,
        peak_idx: int,
    ) -> List[ScoredFrame]:
        """Score frames ``[start, end]`` (inclusive) around the velocity peak."""
        cfg = self.config
        window = signals[start:end + 1]

        def norm(name: str) -> List[float]:
            values = min_max_normalize([getattr(s, name) for s in window], invert=False)
            return [0.0 if v is None else v for v in values]

        height = norm("arm_tip_height")
        extension = norm("arm_extension_score")
        body = norm("body_extension")

        scored: List[ScoredFrame] = []
        for k, s in enumerate(window):
            proximity = 1.0 - min(1.0, abs(start + k - peak_idx) / cfg.proximity_span_frames)
            score = (
                height[k] * cfg.weight_tip_height
                + extension[k] * cfg.weight_extension
                + body[k] * cfg.weight_body_extension
                + proximity * cfg.weight_proximity
            )
            scored.append(ScoredFrame(frame=s.frame, timestamp=s.timestamp, score=score))
        return scored

    def analyze(
        self,
        frames: PoseFrames,
        fps: float,
        dominant_hand: Union[Hand, str, HandednessResult, None] = "auto",
    ) -> ContactPointDetectionResult:
        fps = self.validate(frames, fps)
        cfg = self.config

        hand = resolve_hand(dominant_hand, frames, self.layout, self.body_index, self.handedness_config)
        raw_signals = self.extract_signals(frames, fps, hand.dominant)
        usable = sum(1 for s in raw_signals if s.arm_tip_y is not None)
        self.require(usable, cfg.min_frames)

        smoothed = SignalSmoother(cfg.smoothing_window).smooth(raw_signals, SMOOTHED_CHANNELS)
        n = len(smoothed)

        peak_idx = argmax_optional([s.arm_tip_velocity for s in smoothed])
        if peak_idx is None:
            raise NoEventFoundError(self.name, "no arm-tip velocity measurable")
        if peak_idx < n * cfg.early_peak_fraction:
            logger.warning("Peak arm velocity at %d/%d frames; contact may precede the clip", peak_idx, n)

        start = max(0, int(math.floor(peak_idx * cfg.window_start_fraction)))
        end = min(n - 1, int(math.floor(peak_idx * cfg.window_end_fraction + cfg.window_end_offset_frames)))

        scores = self.score_window(smoothed, start, end, peak_idx)
        best = max(range(len(scores)), key=lambda k: (scores[k].score, -k))
        best_frame = scores[best]
        contact_signal = smoothed[start + best]
        peak = smoothed[peak_idx]

        logger.debug(
            "Contact at frame %d (score %.2f), peak velocity at frame %d",
            best_frame.frame, best_frame.score, peak.frame,
        )
        return ContactPointDetectionResult(
            contact_frame=best_frame.frame,
            contact_timestamp=best_frame.timestamp,
            peak_velocity_frame=peak.frame,
            peak_velocity=float(peak.arm_tip_velocity),
            score=best_frame.score,
            confidence=event_confidence(best_frame.score, hand.confidence),
            dominant_hand=hand.dominant,
            handedness=hand,
            used_elbow_as_tip=contact_signal.used_elbow_as_tip,
            raw_signals=tuple(raw_signals),
            signals=tuple(smoothed),
            scores=tuple(scores),
        )


def detect_contact_point(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    body_index: int = 0,
    config: Optional[ContactConfig] = None,
    dominant_hand: Union[Hand, str, HandednessResult, None] = "auto",
) -> ContactPointDetectionResult:
    return ContactPointDetector(config, model, body_index).analyze(frames, fps, dominant_hand)
