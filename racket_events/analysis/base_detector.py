"""Base class for all event detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np

from ..config.keypoints import Hand, KeypointLayout, SideIndices, SkeletonModel, resolve_layout
from ..core.errors import InsufficientDataError
from ..core.pose_data import PoseFrames, validate_inputs
from .geometry import mean_point


@dataclass(frozen=True)
class ScoredFrame:
    """Composite score of one frame inside a detector's search window."""

    frame: int
    timestamp: float
    score: float


def event_confidence(score: float, handedness_confidence: float) -> float:
    """Confidence for best-in-window events (trophy, contact)."""
    return min(1.0, score * 0.6 + handedness_confidence * 0.2 + 0.2)


class BaseDetector(ABC):
    """
    Common setup for clip-level event detectors.

    A detector resolves its keypoint layout once and keeps no per-clip state,
    so one instance can analyze several clips, also from different threads.
    """

    name = "detector"

    def __init__(
        self,
        config: Any,
        model: Union[SkeletonModel, str] = SkeletonModel.MOVENET,
        body_index: int = 0,
        strict_layout: bool = False,
    ):
        """
        Args:
            config: Detector-specific tuning dataclass
            model: Skeleton model naming the keypoint layout
            body_index: Which detected body per frame is the subject
            strict_layout: Reject unknown model names instead of falling back
        """
        self.config = config
        self.layout: KeypointLayout = resolve_layout(model, strict=strict_layout)
        self.body_index = body_index

    def sides(self, dominant: Hand) -> Tuple[SideIndices, SideIndices]:
        """(racket side, free side) joint indices."""
        return self.layout.side(dominant), self.layout.side(dominant.opposite)

    def body_center(self, body, threshold: float, inclusive: bool = False) -> Optional[np.ndarray]:
        """Mean of the confident shoulders and hips, at least two required."""
        points = [body.point(idx, threshold, inclusive) for idx in self.layout.core_indices]
        return mean_point(points, min_count=2)

    def validate(self, frames: PoseFrames, fps: float) -> float:
        validate_inputs(frames, fps)
        return float(fps)

    def require(self, available: int, required: int, what: str = "frames") -> None:
        if available < required:
            raise InsufficientDataError(self.name, required, available, what)

    @abstractmethod
    def analyze(self, frames: PoseFrames, fps: float, **kwargs):
        """Run the detector over one clip and return its result."""
        pass
