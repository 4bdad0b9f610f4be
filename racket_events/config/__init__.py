"""Configuration: skeleton layouts and detector tuning."""

from .detector_config import (
    DEFAULT_CONFIG,
    ContactConfig,
    DetectorConfig,
    HandednessConfig,
    LandingConfig,
    SwingConfig,
    SwingV2Config,
    TrophyConfig,
)
from .keypoints import (
    BLAZEPOSE_LAYOUT,
    MOVENET_LAYOUT,
    KeypointLayout,
    SideIndices,
    SkeletonModel,
    resolve_layout,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ContactConfig",
    "DetectorConfig",
    "HandednessConfig",
    "LandingConfig",
    "SwingConfig",
    "SwingV2Config",
    "TrophyConfig",
    "BLAZEPOSE_LAYOUT",
    "MOVENET_LAYOUT",
    "KeypointLayout",
    "SideIndices",
    "SkeletonModel",
    "resolve_layout",
]
