"""Skeleton layouts for the supported pose estimators.

Two topologies are supported: the 17-point COCO order used by MoveNet and
the 33-point BlazePose order. Detectors never guess the layout from the data;
the caller names the model and :func:`resolve_layout` maps it to indices.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..core.errors import UnknownSkeletonModelError

logger = logging.getLogger(__name__)


# COCO 17 keypoints (MoveNet order)
COCO_KEYPOINTS = {
    0: "nose",
    1: "left_eye",
    2: "right_eye",
    3: "left_ear",
    4: "right_ear",
    5: "left_shoulder",
    6: "right_shoulder",
    7: "left_elbow",
    8: "right_elbow",
    9: "left_wrist",
    10: "right_wrist",
    11: "left_hip",
    12: "right_hip",
    13: "left_knee",
    14: "right_knee",
    15: "left_ankle",
    16: "right_ankle",
}

# Reverse mapping
KEYPOINT_NAMES = {v: k for k, v in COCO_KEYPOINTS.items()}


class SkeletonModel(Enum):
    """Pose estimators whose keypoint order is known."""

    MOVENET = "MoveNet"
    BLAZEPOSE = "BlazePose"


class Hand(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Hand":
        return Hand.RIGHT if self is Hand.LEFT else Hand.LEFT


@dataclass(frozen=True)
class SideIndices:
    """Joint indices for one side of the body."""

    wrist: int
    elbow: int
    shoulder: int
    hip: int
    knee: int
    ankle: int


@dataclass(frozen=True)
class KeypointLayout:
    """Semantic joint name -> keypoint index for one skeleton model."""

    model: SkeletonModel
    num_keypoints: int
    left_wrist: int
    right_wrist: int
    left_elbow: int
    right_elbow: int
    left_shoulder: int
    right_shoulder: int
    left_hip: int
    right_hip: int
    left_knee: int
    right_knee: int
    left_ankle: int
    right_ankle: int

    def side(self, hand: Hand) -> SideIndices:
        if hand is Hand.LEFT:
            return SideIndices(
                wrist=self.left_wrist,
                elbow=self.left_elbow,
                shoulder=self.left_shoulder,
                hip=self.left_hip,
                knee=self.left_knee,
                ankle=self.left_ankle,
            )
        return SideIndices(
            wrist=self.right_wrist,
            elbow=self.right_elbow,
            shoulder=self.right_shoulder,
            hip=self.right_hip,
            knee=self.right_knee,
            ankle=self.right_ankle,
        )

    @property
    def core_indices(self) -> tuple:
        """Shoulders and hips, used for the body center."""
        return (self.left_shoulder, self.right_shoulder, self.left_hip, self.right_hip)


MOVENET_LAYOUT = KeypointLayout(
    model=SkeletonModel.MOVENET,
    num_keypoints=17,
    left_wrist=KEYPOINT_NAMES["left_wrist"],
    right_wrist=KEYPOINT_NAMES["right_wrist"],
    left_elbow=KEYPOINT_NAMES["left_elbow"],
    right_elbow=KEYPOINT_NAMES["right_elbow"],
    left_shoulder=KEYPOINT_NAMES["left_shoulder"],
    right_shoulder=KEYPOINT_NAMES["right_shoulder"],
    left_hip=KEYPOINT_NAMES["left_hip"],
    right_hip=KEYPOINT_NAMES["right_hip"],
    left_knee=KEYPOINT_NAMES["left_knee"],
    right_knee=KEYPOINT_NAMES["right_knee"],
    left_ankle=KEYPOINT_NAMES["left_ankle"],
    right_ankle=KEYPOINT_NAMES["right_ankle"],
)

BLAZEPOSE_LAYOUT = KeypointLayout(
    model=SkeletonModel.BLAZEPOSE,
    num_keypoints=33,
    left_wrist=15,
    right_wrist=16,
    left_elbow=13,
    right_elbow=14,
    left_shoulder=11,
    right_shoulder=12,
    left_hip=23,
    right_hip=24,
    left_knee=25,
    right_knee=26,
    left_ankle=27,
    right_ankle=28,
)

_LAYOUTS = {
    SkeletonModel.MOVENET: MOVENET_LAYOUT,
    SkeletonModel.BLAZEPOSE: BLAZEPOSE_LAYOUT,
}


def resolve_layout(model: Union[SkeletonModel, str], strict: bool = False) -> KeypointLayout:
    """Return the keypoint layout for ``model``.

    Names are matched case-insensitively against :class:`SkeletonModel`
    values. An unrecognised name falls back to the MoveNet layout and logs a
    warning; pass ``strict=True`` to raise :class:`UnknownSkeletonModelError`
    instead.
    """
    if isinstance(model, SkeletonModel):
        return _LAYOUTS[model]

    name = str(model).strip().lower()
    for candidate in SkeletonModel:
        if candidate.value.lower() == name or candidate.name.lower() == name:
            return _LAYOUTS[candidate]

    if strict:
        raise UnknownSkeletonModelError(
            f"Unknown skeleton model {model!r}; expected one of "
            f"{[m.value for m in SkeletonModel]}"
        )
    logger.warning("Unknown skeleton model %r, falling back to the MoveNet layout", model)
    return MOVENET_LAYOUT
