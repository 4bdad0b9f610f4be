"""Swing detection from wrist velocity peaks (V1).

Wrist motion is measured relative to the body center so that walking or
camera drift does not register as a swing. Peaks in the combined two-wrist
velocity are thinned by non-maximum suppression and a minimum spacing, and
the radial component (away from the body) separates forward swings from
the recovery motion that follows them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from ..config.detector_config import SwingConfig
from ..config.keypoints import SkeletonModel
from ..core.errors import NoEventFoundError
from ..core.pose_data import PoseFrames, primary_bodies
from ..core.smoother import moving_average
from ..serialization import SerializableResult
from .base_detector import BaseDetector
from .kinematics import relative_motion
from .peaks import enforce_min_distance, find_local_maxima, non_maximum_suppression, percentile_low

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WristMotion:
    """Center-relative wrist motion between one frame and the previous one."""

    frame: int
    timestamp: float
    body_center: Optional[Tuple[float, float]]
    velocity: Optional[float]           # px/frame, sum over measured wrists
    left_velocity: Optional[float]
    right_velocity: Optional[float]
    radial_velocity: Optional[float]    # px/frame, positive = away from the body
    left_radial: Optional[float]
    right_radial: Optional[float]
    gap: bool                           # body, center or previous frame missing


@dataclass(frozen=True)
class SwingSignal:
    frame: int
    timestamp: float
    velocity: Optional[float]           # smoothed combined velocity
    raw_velocity: Optional[float]
    left_velocity: Optional[float]
    right_velocity: Optional[float]
    radial_velocity: Optional[float]


@dataclass(frozen=True)
class DetectedSwing:
    frame: int
    timestamp: float
    velocity: float                     # px/frame
    velocity_kmh: float
    dominant_side: str                  # "left", "right" or "both"
    symmetry: float
    confidence: float
    left_velocity: float
    right_velocity: float


@dataclass(frozen=True)
class SwingDetectionResult(SerializableResult):
    swings: Tuple[DetectedSwing, ...]
    signals: Tuple[SwingSignal, ...]
    total_swings: int
    average_velocity: float
    max_velocity: float
    velocity_threshold: float
    person_height_px: float
    frames_analyzed: int
    frames_with_gaps: int
    video_duration: float


def _sum_optional(*values: Optional[float]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(sum(present))


def extract_wrist_motion(
    detector: BaseDetector,
    frames: PoseFrames,
    fps: float,
    threshold: float,
) -> List[WristMotion]:
    """Per-frame center-relative wrist motion for every frame in the store.

    Keypoints count when their score is at least ``threshold``. The first
    frame has no motion; a wrist contributes only when it is confident in
    both the current and the previous frame.
    """
    lay = detector.layout
    motions: List[WristMotion] = []
    prev_body = None
    prev_center = None

    for i, (frame, body) in enumerate(primary_bodies(frames, detector.body_index)):
        center = None if body is None else detector.body_center(body, threshold, inclusive=True)
        center_tuple = None if center is None else (float(center[0]), float(center[1]))
        gap = body is None or center is None or (i > 0 and (prev_body is None or prev_center is None))

        per_wrist = {"left": (None, None), "right": (None, None)}
        if i > 0 and not gap:
            for side, idx in (("left", lay.left_wrist), ("right", lay.right_wrist)):
                curr = body.point(idx, threshold, inclusive=True)
                prev = prev_body.point(idx, threshold, inclusive=True)
                if curr is not None and prev is not None:
                    per_wrist[side] = relative_motion(curr, prev, center, prev_center)

        (lv, lr), (rv, rr) = per_wrist["left"], per_wrist["right"]
        motions.append(
            WristMotion(
                frame=frame,
                timestamp=frame / fps,
                body_center=center_tuple,
                velocity=_sum_optional(lv, rv),
                left_velocity=lv,
                right_velocity=rv,
                radial_velocity=_sum_optional(lr, rr),
                left_radial=lr,
                right_radial=rr,
                gap=gap,
            )
        )
        prev_body, prev_center = body, center
    return motions


def pixels_to_kmh(velocity_px_per_frame: float, person_height_px: float, fps: float, person_height_m: float) -> float:
    """Convert px/frame to km/h using the player's height as the scale."""
    pixels_per_meter = person_height_px / person_height_m
    return velocity_px_per_frame / pixels_per_meter * fps * 3.6


class SwingDetector(BaseDetector):
    """Velocity-peak swing detector with a radial-direction gate."""

    name = "swing"

    def __init__(
        self,
        config: Optional[SwingConfig] = None,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        strict_layout: bool = False,
    ):
        super().__init__(config or SwingConfig(), model, body_index, strict_layout)

    def estimate_person_height(
        self,
        frames: PoseFrames,
        motions: Optional[List[WristMotion]] = None,
    ) -> float:
        """Height in px from the last frame with a confident left shoulder and hip.

        With ``motions`` only frames whose motion was measured count: the
        first frame and gap frames are skipped.
        """
        cfg = self.config
        measured = None
        if motions is not None:
            measured = {m.frame for m in motions[1:] if not m.gap}
        height = cfg.default_person_height_px
        for frame, body in primary_bodies(frames, self.body_index):
            if body is None or (measured is not None and frame not in measured):
                continue
            shoulder = body.point(self.layout.left_shoulder, cfg.min_confidence, inclusive=True)
            hip = body.point(self.layout.left_hip, cfg.min_confidence, inclusive=True)
            if shoulder is not None and hip is not None:
                height = abs(hip[1] - shoulder[1]) * cfg.height_to_torso_ratio
        return float(height)

    def analyze(self, frames: PoseFrames, fps: float) -> SwingDetectionResult:
        fps = self.validate(frames, fps)
        cfg = self.config

        motions = extract_wrist_motion(self, frames, fps, cfg.min_confidence)
        raw_velocity = [m.velocity for m in motions]
        valid = sum(1 for v in raw_velocity if v is not None)
        self.require(valid, cfg.min_frames, "frames with wrist velocity")

        smoothed = moving_average(raw_velocity, cfg.smoothing_window)
        person_height = self.estimate_person_height(frames, motions)

        threshold = percentile_low(smoothed, cfg.velocity_percentile)
        nms_frames = int(round(cfg.nms_window_s * fps))
        min_distance = int(round(cfg.min_swing_distance_s * fps))

        peaks = find_local_maxima(smoothed, threshold)
        peaks = non_maximum_suppression(peaks, nms_frames)
        peaks = enforce_min_distance(peaks, min_distance)
        if peaks:
            floor = peaks[0].value * cfg.min_velocity_ratio
            peaks = [p for p in peaks if p.value >= floor]
        peaks = sorted(peaks, key=lambda p: p.index)

        if cfg.require_outward_motion:
            before = len(peaks)
            peaks = [
                p for p in peaks
                if motions[p.index].radial_velocity is None
                or motions[p.index].radial_velocity >= cfg.min_radial_velocity
            ]
            if len(peaks) < before:
                logger.debug("Discarded %d peak(s) with insufficient outward motion", before - len(peaks))

        swings: List[DetectedSwing] = []
        for p in peaks:
            m = motions[p.index]
            left = m.left_velocity or 0.0
            right = m.right_velocity or 0.0
            symmetry = min(left, right) / max(left, right) if left + right > 0 else 0.0
            if symmetry > cfg.both_hands_symmetry:
                side = "both"
            else:
                side = "left" if left > right else "right"
            swings.append(
                DetectedSwing(
                    frame=m.frame,
                    timestamp=m.timestamp,
                    velocity=p.value,
                    velocity_kmh=pixels_to_kmh(p.value, person_height, fps, cfg.person_height_m),
                    dominant_side=side,
                    symmetry=symmetry,
                    confidence=min(1.0, p.value / (threshold * 2)) if threshold > 0 else 1.0,
                    left_velocity=left,
                    right_velocity=right,
                )
            )

        if not swings:
            raise NoEventFoundError(self.name, "no velocity peak passed the swing filters")

        signals = tuple(
            SwingSignal(
                frame=m.frame,
                timestamp=m.timestamp,
                velocity=smoothed[i],
                raw_velocity=m.velocity,
                left_velocity=m.left_velocity,
                right_velocity=m.right_velocity,
                radial_velocity=m.radial_velocity,
            )
            for i, m in enumerate(motions)
        )
        valid_smoothed = [v for v in smoothed if v is not None]
        logger.debug("Detected %d swing(s) over %d frames", len(swings), len(motions))
        return SwingDetectionResult(
            swings=tuple(swings),
            signals=signals,
            total_swings=len(swings),
            average_velocity=float(np.mean(valid_smoothed)),
            max_velocity=float(max(valid_smoothed)),
            velocity_threshold=threshold,
            person_height_px=person_height,
            frames_analyzed=len(motions),
            frames_with_gaps=sum(1 for m in motions if m.gap),
            video_duration=len(motions) / fps,
        )


def detect_swings(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    body_index: int = 0,
    config: Optional[SwingConfig] = None,
) -> SwingDetectionResult:
    return SwingDetector(config, model, body_index).analyze(frames, fps)
