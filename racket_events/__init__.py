"""Racket-sport pose event detection.

Turns a per-frame 2D pose keypoint series of one serve, swing or jump clip
into event timestamps: trophy position, ball contact, jump phases and swing
impacts.
"""

from .analysis import (
    ContactPointDetectionResult,
    ContactPointDetector,
    DetectedSwing,
    DetectedSwingV2,
    HandednessResult,
    HandednessSource,
    KneePhases,
    LandingDetectionResult,
    LandingDetector,
    SwingDetectionResult,
    SwingDetectionResultV2,
    SwingDetector,
    SwingDetectorV2,
    TrophyDetectionResult,
    TrophyDetector,
    detect_contact_point,
    detect_handedness,
    detect_landing,
    detect_swings,
    detect_swings_v2,
    detect_trophy,
)
from .config import DEFAULT_CONFIG, DetectorConfig, SkeletonModel, resolve_layout
from .config.keypoints import Hand
from .core import (
    Body,
    DetectionError,
    InsufficientDataError,
    InvalidPoseInputError,
    Keypoint,
    NoEventFoundError,
    NoHandednessSignalError,
    UnknownSkeletonModelError,
    frames_from_estimator,
    frames_from_json,
)
from .pipeline import DETECTOR_NAMES, ClipAnalysis, analyze_clip
from .serialization import result_to_json, to_serializable

__version__ = "0.1.0"

__all__ = [
    "ContactPointDetectionResult",
    "ContactPointDetector",
    "DetectedSwing",
    "DetectedSwingV2",
    "HandednessResult",
    "HandednessSource",
    "KneePhases",
    "LandingDetectionResult",
    "LandingDetector",
    "SwingDetectionResult",
    "SwingDetectionResultV2",
    "SwingDetector",
    "SwingDetectorV2",
    "TrophyDetectionResult",
    "TrophyDetector",
    "detect_contact_point",
    "detect_handedness",
    "detect_landing",
    "detect_swings",
    "detect_swings_v2",
    "detect_trophy",
    "DEFAULT_CONFIG",
    "DetectorConfig",
    "SkeletonModel",
    "resolve_layout",
    "Hand",
    "Body",
    "DetectionError",
    "InsufficientDataError",
    "InvalidPoseInputError",
    "Keypoint",
    "NoEventFoundError",
    "NoHandednessSignalError",
    "UnknownSkeletonModelError",
    "frames_from_estimator",
    "frames_from_json",
    "DETECTOR_NAMES",
    "ClipAnalysis",
    "analyze_clip",
    "result_to_json",
    "to_serializable",
]
