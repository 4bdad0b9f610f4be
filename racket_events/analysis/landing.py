"""Jump phase detection: takeoff, peak, landing and knee-bend phases.

Tracks one vertical position per frame, the lowest foot (largest image Y),
falling back to the hips when neither ankle is confident. The jump peak is
the minimum of that track; takeoff and landing are where it crosses back
near ground level on either side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union

from ..config.detector_config import LandingConfig
from ..config.keypoints import SkeletonModel
from ..core.errors import NoEventFoundError
from ..core.pose_data import PoseFrames, present_bodies
from ..core.smoother import SignalSmoother
from ..serialization import SerializableResult
from .base_detector import BaseDetector
from .geometry import angle_at_vertex
from .peaks import argmin_optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LandingSignal:
    frame: int
    timestamp: float
    primary_y: float
    y_source: str                       # "ankle" or "hip"
    lower_foot: str                     # "left", "right", "both" or "unknown"
    left_ankle_y: Optional[float]
    right_ankle_y: Optional[float]
    left_knee_angle: Optional[float]
    right_knee_angle: Optional[float]
    avg_knee_angle: Optional[float]
    min_knee_angle: Optional[float]
    y_velocity: float                   # px/s, negative = moving up

    @property
    def knee_angle(self) -> Optional[float]:
        """Most bent knee, or the average when only that is known."""
        return self.min_knee_angle if self.min_knee_angle is not None else self.avg_knee_angle


@dataclass(frozen=True)
class KneePhase:
    frame: int
    timestamp: float
    knee_angle: Optional[float]


@dataclass(frozen=True)
class KneePhases:
    loading: KneePhase          # deepest bend before takeoff
    extension: KneePhase        # straightest knee during push-off
    absorption: KneePhase       # knees start bending again after landing


@dataclass(frozen=True)
class LandingDetectionResult(SerializableResult):
    landing_frame: int
    landing_timestamp: float
    landing_foot: str
    takeoff_frame: int
    takeoff_timestamp: float
    peak_jump_frame: int
    peak_jump_timestamp: float
    jump_height: float          # fraction of ground level
    air_time: float
    confidence: float
    peak_upward_velocity: float
    peak_upward_velocity_frame: int
    peak_upward_velocity_timestamp: float
    peak_downward_velocity: float
    peak_downward_velocity_frame: int
    peak_downward_velocity_timestamp: float
    knee_phases: Optional[KneePhases]
    raw_signals: Tuple[LandingSignal, ...]
    signals: Tuple[LandingSignal, ...]


def _knee_stats(left: Optional[float], right: Optional[float]) -> Tuple[Optional[float], Optional[float]]:
    angles = [a for a in (left, right) if a is not None]
    if not angles:
        return None, None
    return sum(angles) / len(angles), min(angles)


class LandingDetector(BaseDetector):
    """Detect takeoff, peak and landing of a jump."""

    name = "landing"

    def __init__(
        self,
        config: Optional[LandingConfig] = None,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        strict_layout: bool = False,
    ):
        super().__init__(config or LandingConfig(), model, body_index, strict_layout)

    def extract_signals(self, frames: PoseFrames, fps: float) -> List[LandingSignal]:
        cfg = self.config
        thr = cfg.min_confidence
        lay = self.layout

        rows = []
        for frame, body in present_bodies(frames, self.body_index):
            l_ankle = body.point(lay.left_ankle, thr)
            r_ankle = body.point(lay.right_ankle, thr)
            l_hip = body.point(lay.left_hip, thr)
            r_hip = body.point(lay.right_hip, thr)
            l_knee = body.point(lay.left_knee, thr)
            r_knee = body.point(lay.right_knee, thr)

            if l_ankle is not None and r_ankle is not None:
                primary_y = float(max(l_ankle[1], r_ankle[1]))
                source = "ankle"
                if abs(l_ankle[1] - r_ankle[1]) < cfg.both_feet_tolerance_px:
                    foot = "both"
                else:
                    foot = "left" if l_ankle[1] > r_ankle[1] else "right"
            elif l_ankle is not None or r_ankle is not None:
                ankle = l_ankle if l_ankle is not None else r_ankle
                primary_y = float(ankle[1])
                source = "ankle"
                foot = "left" if l_ankle is not None else "right"
            elif l_hip is not None or r_hip is not None:
                primary_y = float(max(h[1] for h in (l_hip, r_hip) if h is not None))
                source = "hip"
                foot = "unknown"
            else:
                continue

            left_angle = None
            if l_hip is not None and l_knee is not None and l_ankle is not None:
                left_angle = angle_at_vertex(l_hip, l_knee, l_ankle)
            right_angle = None
            if r_hip is not None and r_knee is not None and r_ankle is not None:
                right_angle = angle_at_vertex(r_hip, r_knee, r_ankle)

            rows.append(
                (frame, primary_y, source, foot,
                 None if l_ankle is None else float(l_ankle[1]),
                 None if r_ankle is None else float(r_ankle[1]),
                 left_angle, right_angle)
            )

        velocities = [0.0] * len(rows)
        for i in range(1, len(rows)):
            dt = (rows[i][0] - rows[i - 1][0]) / fps
            velocities[i] = (rows[i][1] - rows[i - 1][1]) / dt if dt > 0 else 0.0
        if len(rows) > 1:
            velocities[0] = velocities[1]

        signals = []
        for i, (frame, primary_y, source, foot, l_y, r_y, l_ang, r_ang) in enumerate(rows):
            avg_angle, min_angle = _knee_stats(l_ang, r_ang)
            signals.append(
                LandingSignal(
                    frame=frame,
                    timestamp=frame / fps,
                    primary_y=primary_y,
                    y_source=source,
                    lower_foot=foot,
                    left_ankle_y=l_y,
                    right_ankle_y=r_y,
                    left_knee_angle=l_ang,
                    right_knee_angle=r_ang,
                    avg_knee_angle=avg_angle,
                    min_knee_angle=min_angle,
                    y_velocity=velocities[i],
                )
            )
        return signals

    def smooth(self, signals: Sequence[LandingSignal]) -> List[LandingSignal]:
        smoothed = SignalSmoother(self.config.smoothing_window).smooth(
            signals, ("primary_y", "y_velocity", "left_knee_angle", "right_knee_angle")
        )
        out = []
        for s in smoothed:
            avg_angle, min_angle = _knee_stats(s.left_knee_angle, s.right_knee_angle)
            out.append(replace(s, avg_knee_angle=avg_angle, min_knee_angle=min_angle))
        return out

    def knee_phases(
        self,
        data: Sequence[LandingSignal],
        takeoff: int,
        peak: int,
        landing: int,
    ) -> Optional[KneePhases]:
        """Loading, extension and absorption from the knee-angle track."""
        angles = [s.knee_angle for s in data]
        if all(a is None for a in angles):
            return None
        cfg = self.config
        n = len(data)

        loading = 0
        best = None
        for i in range(0, takeoff + 1):
            if angles[i] is not None and (best is None or angles[i] < best):
                best, loading = angles[i], i

        extension = takeoff
        best = None
        for i in range(loading, peak + 1):
            if angles[i] is not None and (best is None or angles[i] > best):
                best, extension = angles[i], i

        straightest = landing
        straight_angle = None
        for i in range(landing, min(landing + cfg.absorption_lookahead_frames, n)):
            if angles[i] is not None and (straight_angle is None or angles[i] > straight_angle):
                straight_angle, straightest = angles[i], i

        absorption = None
        if straight_angle is not None:
            for i in range(straightest, n):
                if angles[i] is not None and straight_angle - angles[i] >= cfg.absorption_min_drop_deg:
                    absorption = i
                    break
        if absorption is None:
            absorption = argmin_optional(angles, landing)
            if absorption is None:
                absorption = landing

        def phase(idx: int) -> KneePhase:
            return KneePhase(frame=data[idx].frame, timestamp=data[idx].timestamp, knee_angle=angles[idx])

        return KneePhases(loading=phase(loading), extension=phase(extension), absorption=phase(absorption))

    def analyze(self, frames: PoseFrames, fps: float) -> LandingDetectionResult:
        fps = self.validate(frames, fps)
        cfg = self.config

        raw_signals = self.extract_signals(frames, fps)
        self.require(len(raw_signals), cfg.min_frames)
        data = self.smooth(raw_signals)
        n = len(data)
        ys = [s.primary_y for s in data]

        peak = argmin_optional(ys)
        ground = max(ys[0], ys[-1])
        jump_height = (ground - ys[peak]) / ground if ground > 0 else 0.0
        if jump_height <= 0:
            raise NoEventFoundError(self.name, "no vertical rise above ground level")
        if jump_height < cfg.small_jump_warning:
            logger.warning("Very small jump detected (%.1f%% of ground level)", jump_height * 100)

        threshold = ground * cfg.ground_threshold_ratio
        takeoff = 0
        for i in range(peak - 1, -1, -1):
            if ys[i] >= threshold:
                takeoff = i
                break
        landing = n - 1
        for i in range(peak + 1, n):
            if ys[i] >= threshold:
                landing = i
                break

        up_idx, up_vel = takeoff, 0.0
        for i in range(takeoff, peak + 1):
            if data[i].y_velocity < up_vel:
                up_idx, up_vel = i, data[i].y_velocity
        down_idx, down_vel = peak, 0.0
        for i in range(peak, landing + 1):
            if data[i].y_velocity > down_vel:
                down_idx, down_vel = i, data[i].y_velocity

        ankle_ratio = sum(1 for s in raw_signals if s.y_source == "ankle") / len(raw_signals)
        confidence = min(1.0, 0.3 + ankle_ratio * 0.4 + min(1.0, jump_height * 5.0) * 0.3)

        logger.debug(
            "Jump: takeoff %d, peak %d, landing %d, height %.3f",
            data[takeoff].frame, data[peak].frame, data[landing].frame, jump_height,
        )
        return LandingDetectionResult(
            landing_frame=data[landing].frame,
            landing_timestamp=data[landing].timestamp,
            landing_foot=data[landing].lower_foot,
            takeoff_frame=data[takeoff].frame,
            takeoff_timestamp=data[takeoff].timestamp,
            peak_jump_frame=data[peak].frame,
            peak_jump_timestamp=data[peak].timestamp,
            jump_height=jump_height,
            air_time=data[landing].timestamp - data[takeoff].timestamp,
            confidence=confidence,
            peak_upward_velocity=up_vel,
            peak_upward_velocity_frame=data[up_idx].frame,
            peak_upward_velocity_timestamp=data[up_idx].timestamp,
            peak_downward_velocity=down_vel,
            peak_downward_velocity_frame=data[down_idx].frame,
            peak_downward_velocity_timestamp=data[down_idx].timestamp,
            knee_phases=self.knee_phases(data, takeoff, peak, landing),
            raw_signals=tuple(raw_signals),
            signals=tuple(data),
        )


def detect_landing(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    body_index: int = 0,
    config: Optional[LandingConfig] = None,
) -> LandingDetectionResult:
    return LandingDetector(config, model, body_index).analyze(frames, fps)
