import math

import numpy as np
import pytest

from racket_events.core.errors import InvalidPoseInputError
from racket_events.core.pose_data import (
    Body,
    Keypoint,
    frames_from_estimator,
    frames_from_json,
    present_bodies,
    primary_bodies,
    validate_inputs,
)


def test_keypoint_threshold_modes():
    kp = Keypoint(1.0, 2.0, 0.3)
    assert not kp.is_valid(0.3)
    assert kp.is_valid(0.3, inclusive=True)
    assert not Keypoint(1.0, 2.0).is_valid(0.0)


def test_body_point_masks_low_confidence_and_missing_indices():
    body = Body((Keypoint(10.0, 20.0, 0.9), Keypoint(0.0, 0.0, 0.1)))
    assert body.point(0, 0.3).tolist() == [10.0, 20.0]
    assert body.point(1, 0.3) is None
    assert body.point(27, 0.3) is None


def test_from_arrays_checks_shapes():
    body = Body.from_arrays(np.zeros((17, 2)), np.full(17, 0.5))
    assert len(body.keypoints) == 17
    with pytest.raises(InvalidPoseInputError):
        Body.from_arrays(np.zeros((17, 3)), np.ones(17))
    with pytest.raises(InvalidPoseInputError):
        Body.from_arrays(np.zeros((17, 2)), np.ones(16))


def test_frames_from_estimator():
    outputs = {
        3: {"persons": [{"keypoints": np.ones((17, 2)), "confidence": np.ones(17)}]},
        5: {"persons": []},
    }
    store = frames_from_estimator(outputs)
    assert sorted(store) == [3, 5]
    assert len(store[3]) == 1 and store[5] == ()


def test_frames_from_json_accepts_string_keys():
    payload = {"0": [{"keypoints": [{"x": 1, "y": 2, "score": 0.8}, {"x": 3, "y": 4}]}]}
    store = frames_from_json(payload)
    kp = store[0][0].keypoints
    assert kp[0] == Keypoint(1.0, 2.0, 0.8)
    assert kp[1].score is None

    with pytest.raises(InvalidPoseInputError):
        frames_from_json({"first": []})
    with pytest.raises(InvalidPoseInputError):
        frames_from_json({0: [{"points": []}]})


@pytest.mark.parametrize("fps", [0, -30, math.nan, math.inf, "fast", None])
def test_validate_rejects_bad_fps(fps):
    with pytest.raises(InvalidPoseInputError):
        validate_inputs({0: []}, fps)


def test_validate_rejects_empty_store_and_bad_keys():
    with pytest.raises(InvalidPoseInputError):
        validate_inputs({}, 30)
    with pytest.raises(InvalidPoseInputError):
        validate_inputs({"0": []}, 30)
    with pytest.raises(InvalidPoseInputError):
        validate_inputs({True: []}, 30)
    validate_inputs({np.int64(0): []}, 30.0)


def test_primary_bodies_sorted_with_missing_subject():
    body = Body((Keypoint(0.0, 0.0, 1.0),))
    frames = {4: [body], 1: [], 2: [body, body]}
    assert [(f, b is None) for f, b in primary_bodies(frames)] == [(1, True), (2, False), (4, False)]
    assert [f for f, _ in present_bodies(frames, body_index=1)] == [2]
