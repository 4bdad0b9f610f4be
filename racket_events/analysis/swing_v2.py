"""Swing detection from acceleration spikes (V2).

Contact and the start of the forward swing show up as short, sharp changes
in wrist speed. The absolute change of the smoothed velocity is searched
for local peaks that stand well above their surroundings, which is less
sensitive to sustained fast movement (running, shadow swings) than raw
velocity peaks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..config.detector_config import SwingV2Config
from ..config.keypoints import SkeletonModel
from ..core.errors import NoEventFoundError
from ..core.pose_data import PoseFrames
from ..core.smoother import moving_average
from ..serialization import SerializableResult
from .base_detector import BaseDetector
from .geometry import clamp
from .peaks import find_prominent_peaks, mean_before
from .swing import extract_wrist_motion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwingSignalV2:
    frame: int
    timestamp: float
    body_center: Optional[Tuple[float, float]]
    raw_velocity: Optional[float]
    velocity: Optional[float]           # smoothed, px/frame
    acceleration: Optional[float]       # smoothed |Δ velocity|, px/frame²
    radial_velocity: Optional[float]


@dataclass(frozen=True)
class DetectedSwingV2:
    frame: int
    timestamp: float
    acceleration: float
    velocity: float
    prominence: float
    confidence: float
    approach_radial_velocity: Optional[float]


@dataclass(frozen=True)
class SwingDetectionResultV2(SerializableResult):
    swings: Tuple[DetectedSwingV2, ...]
    signals: Tuple[SwingSignalV2, ...]
    total_swings: int
    max_acceleration: float
    frames_analyzed: int
    video_duration: float


def velocity_change(velocities: List[Optional[float]]) -> List[Optional[float]]:
    """Absolute frame-to-frame change; None where either side is missing."""
    out: List[Optional[float]] = [None] * len(velocities)
    for i in range(1, len(velocities)):
        curr, prev = velocities[i], velocities[i - 1]
        if curr is not None and prev is not None:
            out[i] = abs(curr - prev)
    return out


class SwingDetectorV2(BaseDetector):
    """Acceleration-prominence swing detector."""

    name = "swing_v2"

    def __init__(
        self,
        config: Optional[SwingV2Config] = None,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        strict_layout: bool = False,
    ):
        super().__init__(config or SwingV2Config(), model, body_index, strict_layout)

    def compute_signals(self, frames: PoseFrames, fps: float) -> List[SwingSignalV2]:
        cfg = self.config
        motions = extract_wrist_motion(self, frames, fps, cfg.min_confidence)
        raw_velocity = [m.velocity for m in motions]
        velocity = moving_average(raw_velocity, cfg.smoothing_window)
        acceleration = moving_average(velocity_change(velocity), cfg.smoothing_window)
        return [
            SwingSignalV2(
                frame=m.frame,
                timestamp=m.timestamp,
                body_center=m.body_center,
                raw_velocity=m.velocity,
                velocity=velocity[i],
                acceleration=acceleration[i],
                radial_velocity=m.radial_velocity,
            )
            for i, m in enumerate(motions)
        ]

    def analyze(self, frames: PoseFrames, fps: float) -> SwingDetectionResultV2:
        fps = self.validate(frames, fps)
        cfg = self.config
        self.require(len(frames), cfg.min_frames)

        signals = self.compute_signals(frames, fps)
        accel = [s.acceleration for s in signals]
        valid_accel = [a for a in accel if a is not None]
        self.require(len(valid_accel), cfg.min_valid_accelerations, "frames with acceleration")

        peaks = find_prominent_peaks(
            accel,
            min_prominence_ratio=cfg.min_prominence_ratio,
            min_distance=int(round(cfg.min_swing_distance_s * fps)),
            neighbor_radius=cfg.local_max_radius,
            baseline_radius=cfg.baseline_radius,
            core_radius=cfg.baseline_core_radius,
            min_valid=cfg.min_valid_accelerations,
        )
        logger.debug("%d prominent acceleration peak(s) before direction filter", len(peaks))

        radials = [s.radial_velocity for s in signals]
        swings: List[DetectedSwingV2] = []
        for p in peaks:
            approach = mean_before(radials, p.index, cfg.radial_lookback_frames)
            if cfg.require_outward_motion and approach is not None and approach < cfg.min_radial_velocity:
                logger.debug(
                    "Dropped peak at frame %d: approach radial %.2f looks like recovery",
                    signals[p.index].frame, approach,
                )
                continue
            s = signals[p.index]
            swings.append(
                DetectedSwingV2(
                    frame=s.frame,
                    timestamp=s.timestamp,
                    acceleration=p.value,
                    velocity=s.velocity if s.velocity is not None else 0.0,
                    prominence=p.prominence,
                    confidence=clamp((p.prominence - 1.0) / 2.0),
                    approach_radial_velocity=approach,
                )
            )

        if not swings:
            raise NoEventFoundError(self.name, "no prominent acceleration peak found")

        logger.debug("Detected %d swing(s) over %d frames", len(swings), len(signals))
        return SwingDetectionResultV2(
            swings=tuple(swings),
            signals=tuple(signals),
            total_swings=len(swings),
            max_acceleration=float(max(valid_accel)),
            frames_analyzed=len(signals),
            video_duration=len(signals) / fps,
        )


def detect_swings_v2(
    frames: PoseFrames,
    fps: float,
    model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
    body_index: int = 0,
    config: Optional[SwingV2Config] = None,
) -> SwingDetectionResultV2:
    return SwingDetectorV2(config, model, body_index).analyze(frames, fps)
