"""Detector tuning configuration.

All thresholds, window fractions and score weights live here so that tuning
a detector never requires touching analysis code. Override a value with
``dataclasses.replace``::

    cfg = replace(DEFAULT_CONFIG, swing_v2=replace(DEFAULT_CONFIG.swing_v2, min_prominence_ratio=1.5))
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict


def _check_window(name: str, window: int) -> None:
    if window <= 0 or window % 2 == 0:
        raise ValueError(f"{name} must be a positive odd integer, got {window}")


def _check_fraction(name: str, value: float) -> None:
    if value < 0.0:
        raise ValueError(f"{name} must be non-negative, got {value}")


# =====================================================================
# Shared: racket-hand inference
# =====================================================================

@dataclass(frozen=True)
class HandednessConfig:
    """Wrist-motion based racket-hand inference."""

    min_confidence: float = 0.3          # wrist score must exceed this
    # Raise NoHandednessSignalError instead of defaulting to the right hand
    # when no wrist motion is measurable.
    require_signal: bool = False


# =====================================================================
# Serve: trophy position
# =====================================================================

@dataclass(frozen=True)
class TrophyConfig:
    """Trophy-position search (loaded stance before the forward swing)."""

    min_confidence: float = 0.3
    smoothing_window: int = 5
    min_frames: int = 20

    # Search window relative to the peak-acceleration index: [start, end)
    window_start_fraction: float = 0.2
    window_end_fraction: float = 0.85

    # Component weights (sum to 1)
    weight_acceleration: float = 0.25    # low acceleration = paused
    weight_toss_height: float = 0.20
    weight_knee_bend: float = 0.20
    weight_arms_up: float = 0.20
    weight_legs_together: float = 0.15

    # Arms-up grading
    one_arm_up_score: float = 0.3
    min_torso_length_px: float = 50.0
    fallback_hip_offset_px: float = 100.0

    # Legs-together composite
    legs_stability_weight: float = 0.40
    legs_ankle_weight: float = 0.35
    legs_knee_weight: float = 0.25

    # Peaks this early in the clip usually mean the swing was cut off
    early_peak_fraction: float = 0.15

    def __post_init__(self):
        _check_window("smoothing_window", self.smoothing_window)
        _check_fraction("window_start_fraction", self.window_start_fraction)
        if self.window_end_fraction <= self.window_start_fraction:
            raise ValueError("window_end_fraction must exceed window_start_fraction")


# =====================================================================
# Serve / groundstroke: contact point
# =====================================================================

@dataclass(frozen=True)
class ContactConfig:
    """Ball-contact search around the arm-tip velocity peak."""

    min_confidence: float = 0.3
    smoothing_window: int = 5
    min_frames: int = 20

    # Search window relative to the peak-velocity index: [start, end] inclusive
    window_start_fraction: float = 0.7
    window_end_fraction: float = 1.3
    window_end_offset_frames: int = 5

    weight_tip_height: float = 0.35
    weight_extension: float = 0.25
    weight_body_extension: float = 0.15
    weight_proximity: float = 0.25
    proximity_span_frames: float = 10.0

    # Elbow-as-tip extension heuristic
    vertical_tolerance_deg: float = 30.0
    vertical_base_angle_deg: float = 160.0
    non_vertical_angle_deg: float = 90.0

    body_shoulder_weight: float = 0.6
    body_hip_weight: float = 0.4

    early_peak_fraction: float = 0.2

    def __post_init__(self):
        _check_window("smoothing_window", self.smoothing_window)
        _check_fraction("window_start_fraction", self.window_start_fraction)
        if self.window_end_fraction <= self.window_start_fraction:
            raise ValueError("window_end_fraction must exceed window_start_fraction")


# =====================================================================
# Jump: takeoff / peak / landing
# =====================================================================

@dataclass(frozen=True)
class LandingConfig:
    """Jump phase detection from the lowest foot position."""

    min_confidence: float = 0.2
    smoothing_window: int = 5
    min_frames: int = 5

    ground_threshold_ratio: float = 0.95   # Y >= ratio * ground counts as grounded
    both_feet_tolerance_px: float = 10.0

    absorption_lookahead_frames: int = 10
    absorption_min_drop_deg: float = 5.0    # a drop of exactly this much counts

    small_jump_warning: float = 0.05

    def __post_init__(self):
        _check_window("smoothing_window", self.smoothing_window)
        if not 0.0 < self.ground_threshold_ratio <= 1.0:
            raise ValueError("ground_threshold_ratio must be in (0, 1]")


# =====================================================================
# Swings: velocity peaks gated by radial direction (V1)
# =====================================================================

@dataclass(frozen=True)
class SwingConfig:
    """Velocity-peak swing detector."""

    min_confidence: float = 0.3            # inclusive (score >= threshold)
    smoothing_window: int = 3
    min_frames: int = 5

    velocity_percentile: float = 75.0
    nms_window_s: float = 1.25
    min_swing_distance_s: float = 1.5
    min_velocity_ratio: float = 0.33       # relative to the strongest swing

    require_outward_motion: bool = True
    min_radial_velocity: float = 1.0       # px/frame

    # Symmetry above this labels the swing two-handed
    both_hands_symmetry: float = 0.7

    person_height_m: float = 1.75
    default_person_height_px: float = 200.0
    height_to_torso_ratio: float = 2.5

    def __post_init__(self):
        _check_window("smoothing_window", self.smoothing_window)
        if not 0.0 <= self.velocity_percentile <= 100.0:
            raise ValueError("velocity_percentile must be in [0, 100]")


# =====================================================================
# Swings: acceleration peaks gated by prominence (V2)
# =====================================================================

@dataclass(frozen=True)
class SwingV2Config:
    """Acceleration-prominence swing detector."""

    min_confidence: float = 0.2            # inclusive (score >= threshold)
    smoothing_window: int = 3
    min_frames: int = 3
    min_valid_accelerations: int = 5

    min_swing_distance_s: float = 1.5
    min_prominence_ratio: float = 1.3

    local_max_radius: int = 2
    baseline_radius: int = 15
    baseline_core_radius: int = 3

    require_outward_motion: bool = True
    min_radial_velocity: float = 0.5       # mean px/frame over the lookback
    radial_lookback_frames: int = 8

    def __post_init__(self):
        _check_window("smoothing_window", self.smoothing_window)
        if self.baseline_core_radius >= self.baseline_radius:
            raise ValueError("baseline_core_radius must be smaller than baseline_radius")


# =====================================================================
# Aggregate config
# =====================================================================

@dataclass(frozen=True)
class DetectorConfig:
    """Top-level configuration aggregating all detector configs."""

    handedness: HandednessConfig = field(default_factory=HandednessConfig)
    trophy: TrophyConfig = field(default_factory=TrophyConfig)
    contact: ContactConfig = field(default_factory=ContactConfig)
    landing: LandingConfig = field(default_factory=LandingConfig)
    swing: SwingConfig = field(default_factory=SwingConfig)
    swing_v2: SwingV2Config = field(default_factory=SwingV2Config)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Singleton default config
DEFAULT_CONFIG = DetectorConfig()
