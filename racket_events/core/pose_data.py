"""Pose frame store: keypoints, bodies and the sparse frame mapping.

Frames arrive from an external pose estimator as a mapping of frame index to
the bodies detected in that frame. The mapping is sparse; occluded or skipped
frames are simply absent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidPoseInputError


@dataclass(frozen=True)
class Keypoint:
    """A single 2D landmark in image pixels."""

    x: float
    y: float
    score: Optional[float] = None

    def is_valid(self, threshold: float, inclusive: bool = False) -> bool:
        score = self.score if self.score is not None else 0.0
        if inclusive:
            return score >= threshold
        return score > threshold


@dataclass(frozen=True)
class Body:
    """One detected person: keypoints ordered by the skeleton layout."""

    keypoints: Tuple[Keypoint, ...]

    def point(
        self,
        index: int,
        threshold: float,
        inclusive: bool = False,
    ) -> Optional[np.ndarray]:
        """Return ``(x, y)`` for a confident keypoint, else None.

        Missing indices and low-confidence keypoints both yield None so that
        dependent signals become null instead of using a (0, 0) position.
        """
        if index < 0 or index >= len(self.keypoints):
            return None
        kp = self.keypoints[index]
        if not kp.is_valid(threshold, inclusive):
            return None
        return np.array([kp.x, kp.y], dtype=np.float64)

    @classmethod
    def from_arrays(cls, keypoints: np.ndarray, confidence: np.ndarray) -> "Body":
        """Build from an (N, 2) coordinate array and an (N,) score array."""
        keypoints = np.asarray(keypoints, dtype=np.float64)
        confidence = np.asarray(confidence, dtype=np.float64)
        if keypoints.ndim != 2 or keypoints.shape[1] != 2:
            raise InvalidPoseInputError(f"keypoints must have shape (N, 2), got {keypoints.shape}")
        if confidence.shape != (keypoints.shape[0],):
            raise InvalidPoseInputError(
                f"confidence must have shape ({keypoints.shape[0]},), got {confidence.shape}"
            )
        return cls(
            tuple(
                Keypoint(float(x), float(y), float(c))
                for (x, y), c in zip(keypoints, confidence)
            )
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Body":
        """Build from ``{"keypoints": [{"x": .., "y": .., "score": ..}, ...]}``."""
        try:
            raw = data["keypoints"]
        except KeyError as e:
            raise InvalidPoseInputError("body is missing 'keypoints'") from e
        kps = []
        for item in raw:
            score = item.get("score")
            kps.append(
                Keypoint(
                    float(item["x"]),
                    float(item["y"]),
                    None if score is None else float(score),
                )
            )
        return cls(tuple(kps))


# Sparse frame index -> bodies (index 0 is conventionally the primary subject)
PoseFrames = Mapping[int, Sequence[Body]]


def validate_inputs(frames: PoseFrames, fps: float) -> None:
    """Reject malformed input before any signal extraction."""
    if frames is None or len(frames) == 0:
        raise InvalidPoseInputError("frame store is empty")
    try:
        fps_value = float(fps)
    except (TypeError, ValueError) as e:
        raise InvalidPoseInputError(f"fps must be a number, got {fps!r}") from e
    if not math.isfinite(fps_value) or fps_value <= 0:
        raise InvalidPoseInputError(f"fps must be positive and finite, got {fps!r}")
    for key in frames:
        if isinstance(key, bool) or not isinstance(key, (int, np.integer)):
            raise InvalidPoseInputError(f"frame keys must be integers, got {key!r}")


def primary_bodies(frames: PoseFrames, body_index: int = 0) -> Iterator[Tuple[int, Optional[Body]]]:
    """Yield ``(frame, body)`` in ascending frame order.

    ``body`` is None when the frame has fewer detections than ``body_index``.
    """
    for frame in sorted(frames):
        bodies = frames[frame]
        if bodies is None or len(bodies) <= body_index:
            yield int(frame), None
        else:
            yield int(frame), bodies[body_index]


def present_bodies(frames: PoseFrames, body_index: int = 0) -> Iterator[Tuple[int, Body]]:
    """Like :func:`primary_bodies` but skips frames without the body."""
    for frame, body in primary_bodies(frames, body_index):
        if body is not None:
            yield frame, body


def frames_from_estimator(outputs: Mapping[int, Mapping[str, Any]]) -> Dict[int, Tuple[Body, ...]]:
    """Convert pose-estimator outputs to a frame store.

    Each value is ``{"persons": [{"keypoints": (N, 2), "confidence": (N,)}, ...]}``.
    """
    store: Dict[int, Tuple[Body, ...]] = {}
    for frame, result in outputs.items():
        persons = result.get("persons", [])
        store[int(frame)] = tuple(
            Body.from_arrays(p["keypoints"], p["confidence"]) for p in persons
        )
    return store


def frames_from_json(payload: Mapping[Any, Sequence[Mapping[str, Any]]]) -> Dict[int, Tuple[Body, ...]]:
    """Convert ``{frame: [body dict, ...]}`` (string keys allowed) to a frame store."""
    store: Dict[int, Tuple[Body, ...]] = {}
    for frame, bodies in payload.items():
        try:
            key = int(frame)
        except (TypeError, ValueError) as e:
            raise InvalidPoseInputError(f"frame key {frame!r} is not an integer") from e
        store[key] = tuple(Body.from_dict(b) for b in bodies)
    return store
