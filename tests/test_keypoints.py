import logging

import pytest

from racket_events.config.keypoints import (
    BLAZEPOSE_LAYOUT,
    KEYPOINT_NAMES,
    MOVENET_LAYOUT,
    Hand,
    SkeletonModel,
    resolve_layout,
)
from racket_events.core.errors import InvalidPoseInputError, UnknownSkeletonModelError


def test_movenet_layout_uses_coco_indices():
    layout = resolve_layout(SkeletonModel.MOVENET)
    assert layout is MOVENET_LAYOUT
    assert layout.right_wrist == KEYPOINT_NAMES["right_wrist"] == 10
    assert layout.left_ankle == 15
    assert layout.num_keypoints == 17


def test_blazepose_layout_indices():
    layout = resolve_layout("BlazePose")
    assert layout is BLAZEPOSE_LAYOUT
    assert (layout.left_wrist, layout.right_wrist) == (15, 16)
    assert (layout.left_elbow, layout.right_elbow) == (13, 14)
    assert (layout.left_shoulder, layout.right_shoulder) == (11, 12)
    assert (layout.left_hip, layout.right_hip) == (23, 24)
    assert (layout.left_knee, layout.right_knee) == (25, 26)
    assert (layout.left_ankle, layout.right_ankle) == (27, 28)


@pytest.mark.parametrize("name", ["movenet", "MOVENET", " MoveNet "])
def test_model_names_are_case_insensitive(name):
    assert resolve_layout(name) is MOVENET_LAYOUT


def test_unknown_model_falls_back_to_movenet_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="racket_events.config.keypoints"):
        layout = resolve_layout("OpenPose")
    assert layout is MOVENET_LAYOUT
    assert "OpenPose" in caplog.text


def test_unknown_model_strict_raises():
    with pytest.raises(UnknownSkeletonModelError):
        resolve_layout("OpenPose", strict=True)
    # Still a ValueError for callers that only catch builtins
    with pytest.raises(ValueError):
        resolve_layout("OpenPose", strict=True)
    assert issubclass(UnknownSkeletonModelError, InvalidPoseInputError)


def test_side_and_opposite_hand():
    layout = MOVENET_LAYOUT
    right = layout.side(Hand.RIGHT)
    left = layout.side(Hand.RIGHT.opposite)
    assert Hand.LEFT.opposite is Hand.RIGHT
    assert right.wrist == layout.right_wrist and right.elbow == layout.right_elbow
    assert left.knee == layout.left_knee and left.ankle == layout.left_ankle
    assert layout.core_indices == (5, 6, 11, 12)
