"""Signal extraction, peak location and the event detectors."""

from .base_detector import BaseDetector, ScoredFrame
from .contact import ContactPointDetectionResult, ContactPointDetector, detect_contact_point
from .handedness import HandednessResult, HandednessSource, detect_handedness, resolve_hand
from .landing import KneePhase, KneePhases, LandingDetectionResult, LandingDetector, detect_landing
from .swing import DetectedSwing, SwingDetectionResult, SwingDetector, detect_swings
from .swing_v2 import DetectedSwingV2, SwingDetectionResultV2, SwingDetectorV2, detect_swings_v2
from .trophy import TrophyDetectionResult, TrophyDetector, detect_trophy

__all__ = [
    "BaseDetector",
    "ScoredFrame",
    "ContactPointDetectionResult",
    "ContactPointDetector",
    "detect_contact_point",
    "HandednessResult",
    "HandednessSource",
    "detect_handedness",
    "resolve_hand",
    "KneePhase",
    "KneePhases",
    "LandingDetectionResult",
    "LandingDetector",
    "detect_landing",
    "DetectedSwing",
    "SwingDetectionResult",
    "SwingDetector",
    "detect_swings",
    "DetectedSwingV2",
    "SwingDetectionResultV2",
    "SwingDetectorV2",
    "detect_swings_v2",
    "TrophyDetectionResult",
    "TrophyDetector",
    "detect_trophy",
]
