"""Racket-hand inference from accumulated wrist motion.

The racket hand moves much more than the free hand over a swing or serve,
so the wrist with the larger total displacement is taken as dominant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..config.detector_config import HandednessConfig
from ..config.keypoints import Hand, KeypointLayout
from ..core.errors import NoHandednessSignalError
from ..core.pose_data import PoseFrames, primary_bodies
from .geometry import clamp, distance

logger = logging.getLogger(__name__)


class HandednessSource(Enum):
    DETECTED = "detected"
    SPECIFIED = "specified"
    # No wrist motion measurable: right hand assumed with zero confidence
    NO_SIGNAL = "no_signal"


@dataclass(frozen=True)
class HandednessResult:
    dominant: Hand
    confidence: float
    left_motion: float
    right_motion: float
    source: HandednessSource


def handedness_confidence(left_motion: float, right_motion: float) -> float:
    """How lopsided the motion is: 0 for equal motion, 1 when one wrist is still."""
    total = left_motion + right_motion
    if total <= 0:
        return 0.0
    return clamp(abs(right_motion / total - 0.5) * 2.0)


def detect_handedness(
    frames: PoseFrames,
    layout: KeypointLayout,
    body_index: int = 0,
    min_confidence: float = 0.3,
) -> HandednessResult:
    """
    Infer the racket hand over the whole clip.

    Consecutive frames contribute a wrist's displacement only when that
    wrist is confident (score > ``min_confidence``) in both. A frame where
    the wrist is lost or the body is missing breaks the chain; it is not
    counted as zero motion. Ties go to the right hand.
    """
    left_motion = 0.0
    right_motion = 0.0
    prev_left = None
    prev_right = None

    for _, body in primary_bodies(frames, body_index):
        if body is None:
            prev_left = prev_right = None
            continue
        left = body.point(layout.left_wrist, min_confidence)
        right = body.point(layout.right_wrist, min_confidence)
        if left is not None and prev_left is not None:
            left_motion += distance(left, prev_left)
        if right is not None and prev_right is not None:
            right_motion += distance(right, prev_right)
        prev_left = left
        prev_right = right

    if left_motion + right_motion <= 0:
        logger.warning("No wrist motion measurable; assuming right-handed with zero confidence")
        return HandednessResult(
            dominant=Hand.RIGHT,
            confidence=0.0,
            left_motion=0.0,
            right_motion=0.0,
            source=HandednessSource.NO_SIGNAL,
        )

    dominant = Hand.RIGHT if right_motion >= left_motion else Hand.LEFT
    confidence = handedness_confidence(left_motion, right_motion)
    logger.debug(
        "Handedness: left=%.0fpx right=%.0fpx -> %s (%.2f)",
        left_motion, right_motion, dominant.value, confidence,
    )
    return HandednessResult(
        dominant=dominant,
        confidence=confidence,
        left_motion=left_motion,
        right_motion=right_motion,
        source=HandednessSource.DETECTED,
    )


def resolve_hand(
    preferred: Union[Hand, str, HandednessResult, None],
    frames: PoseFrames,
    layout: KeypointLayout,
    body_index: int = 0,
    config: Optional[HandednessConfig] = None,
) -> HandednessResult:
    """Use an explicit hand as given, or detect it for ``"auto"``/None.

    A precomputed :class:`HandednessResult` is passed through unchanged.
    """
    if isinstance(preferred, HandednessResult):
        return preferred
    config = config or HandednessConfig()
    if isinstance(preferred, str):
        name = preferred.strip().lower()
        preferred = None if name == "auto" else Hand(name)

    if preferred is not None:
        return HandednessResult(
            dominant=preferred,
            confidence=1.0,
            left_motion=0.0,
            right_motion=0.0,
            source=HandednessSource.SPECIFIED,
        )

    result = detect_handedness(frames, layout, body_index, config.min_confidence)
    if result.source is HandednessSource.NO_SIGNAL and config.require_signal:
        raise NoHandednessSignalError("no wrist motion measurable in the clip", detector="handedness")
    return result
