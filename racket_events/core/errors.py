"""Typed failures raised by the event detectors.

Every detector either returns a complete result or raises one of these.
Nothing here is retried: the same input always fails the same way.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DetectionError(Exception):
    """Base class for all detector failures."""

    def __init__(self, message: str, detector: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detector = detector

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "detector": self.detector,
            "message": self.message,
        }


class InvalidPoseInputError(DetectionError, ValueError):
    """Malformed input rejected before extraction (empty store, bad fps)."""


class UnknownSkeletonModelError(InvalidPoseInputError):
    """Skeleton model name is not one of the supported layouts."""


class InsufficientDataError(DetectionError):
    """Fewer usable frames than the detector requires."""

    def __init__(self, detector: str, required: int, available: int, what: str = "frames"):
        super().__init__(
            f"{detector}: need at least {required} {what} with usable signal, got {available}",
            detector=detector,
        )
        self.required = required
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["required"] = self.required
        data["available"] = self.available
        return data


class NoEventFoundError(DetectionError):
    """Signals were extracted but no frame met the event criteria."""

    def __init__(self, detector: str, reason: str):
        super().__init__(f"{detector}: {reason}", detector=detector)
        self.reason = reason


class NoHandednessSignalError(DetectionError):
    """No wrist motion at all while the racket hand was requested as "auto".

    Only raised when a detector is configured to require the signal; by
    default the handedness detector reports a ``NO_SIGNAL`` outcome instead.
    """
