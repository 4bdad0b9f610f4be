"""Core data types: frame store, errors and smoothing."""

from .errors import (
    DetectionError,
    InsufficientDataError,
    InvalidPoseInputError,
    NoEventFoundError,
    NoHandednessSignalError,
    UnknownSkeletonModelError,
)
from .pose_data import (
    Body,
    Keypoint,
    PoseFrames,
    frames_from_estimator,
    frames_from_json,
    validate_inputs,
)
from .smoother import SignalSmoother, moving_average

__all__ = [
    "DetectionError",
    "InsufficientDataError",
    "InvalidPoseInputError",
    "NoEventFoundError",
    "NoHandednessSignalError",
    "UnknownSkeletonModelError",
    "Body",
    "Keypoint",
    "PoseFrames",
    "frames_from_estimator",
    "frames_from_json",
    "validate_inputs",
    "SignalSmoother",
    "moving_average",
]
