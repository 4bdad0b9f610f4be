import pytest

from racket_events.analysis.handedness import (
    HandednessResult,
    HandednessSource,
    detect_handedness,
    handedness_confidence,
    resolve_hand,
)
from racket_events.config.detector_config import HandednessConfig
from racket_events.config.keypoints import KEYPOINT_NAMES, MOVENET_LAYOUT, Hand
from racket_events.core.errors import NoHandednessSignalError

LW = KEYPOINT_NAMES["left_wrist"]
RW = KEYPOINT_NAMES["right_wrist"]


def _clip(make_body, left_step, right_step, n=10, scores=None):
    return {
        i: [make_body({LW: (100.0 + left_step * i, 200.0), RW: (300.0 + right_step * i, 200.0)}, scores=scores)]
        for i in range(n)
    }


def test_right_hand_moves_more(make_body):
    result = detect_handedness(_clip(make_body, 0.0, 10.0), MOVENET_LAYOUT)
    assert result.dominant is Hand.RIGHT
    assert result.source is HandednessSource.DETECTED
    assert result.right_motion == pytest.approx(90.0)
    assert result.left_motion == 0.0
    assert result.confidence == pytest.approx(1.0)


def test_left_hand_moves_more(make_body):
    result = detect_handedness(_clip(make_body, 8.0, 2.0), MOVENET_LAYOUT)
    assert result.dominant is Hand.LEFT
    assert result.confidence == pytest.approx(0.6)


def test_tie_goes_to_right(make_body):
    result = detect_handedness(_clip(make_body, 5.0, 5.0), MOVENET_LAYOUT)
    assert result.dominant is Hand.RIGHT
    assert result.confidence == 0.0


def test_no_motion_reports_no_signal(make_body):
    result = detect_handedness(_clip(make_body, 0.0, 0.0), MOVENET_LAYOUT)
    assert result.source is HandednessSource.NO_SIGNAL
    assert result.dominant is Hand.RIGHT
    assert result.confidence == 0.0


def test_confidence_grows_with_imbalance():
    values = [handedness_confidence(10.0, r) for r in (10.0, 15.0, 30.0, 100.0)]
    assert values == sorted(values)
    assert values[0] == 0.0
    assert handedness_confidence(0.0, 10.0) == 1.0
    assert handedness_confidence(0.0, 0.0) == 0.0


def test_missing_body_breaks_motion_chain(make_body):
    frames = _clip(make_body, 0.0, 10.0, n=4)
    frames[2] = []
    # Far jump after the gap must not count
    frames[3] = [make_body({LW: (100.0, 200.0), RW: (900.0, 200.0)})]
    result = detect_handedness(frames, MOVENET_LAYOUT)
    assert result.right_motion == pytest.approx(10.0)


def test_wrist_at_threshold_is_ignored(make_body):
    frames = _clip(make_body, 0.0, 10.0, scores={RW: 0.3})
    result = detect_handedness(frames, MOVENET_LAYOUT, min_confidence=0.3)
    assert result.source is HandednessSource.NO_SIGNAL


def test_resolve_explicit_hand(make_body):
    frames = _clip(make_body, 0.0, 10.0)
    result = resolve_hand("left", frames, MOVENET_LAYOUT)
    assert result.dominant is Hand.LEFT
    assert result.source is HandednessSource.SPECIFIED
    assert result.confidence == 1.0
    assert resolve_hand(Hand.RIGHT, frames, MOVENET_LAYOUT).dominant is Hand.RIGHT


def test_resolve_auto_detects(make_body):
    frames = _clip(make_body, 10.0, 0.0)
    for preferred in ("auto", "AUTO", None):
        result = resolve_hand(preferred, frames, MOVENET_LAYOUT)
        assert result.dominant is Hand.LEFT
        assert result.source is HandednessSource.DETECTED


def test_resolve_passes_result_through(make_body):
    given = HandednessResult(Hand.LEFT, 0.4, 10.0, 4.0, HandednessSource.DETECTED)
    assert resolve_hand(given, _clip(make_body, 0.0, 10.0), MOVENET_LAYOUT) is given


def test_require_signal_raises(make_body):
    frames = _clip(make_body, 0.0, 0.0)
    with pytest.raises(NoHandednessSignalError):
        resolve_hand("auto", frames, MOVENET_LAYOUT, config=HandednessConfig(require_signal=True))


def test_unknown_hand_name_raises(make_body):
    with pytest.raises(ValueError):
        resolve_hand("middle", _clip(make_body, 0.0, 1.0), MOVENET_LAYOUT)
