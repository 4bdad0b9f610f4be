import pytest

from racket_events.analysis.base_detector import event_confidence
from racket_events.analysis.trophy import TrophyDetector, detect_trophy
from racket_events.config.detector_config import TrophyConfig
from racket_events.config.keypoints import KEYPOINT_NAMES, Hand
from racket_events.core.errors import InsufficientDataError, InvalidPoseInputError


def test_trophy_found_at_toss_apex(serve_clip):
    result = detect_trophy(serve_clip, 30)

    assert result.dominant_hand is Hand.RIGHT
    assert result.peak_acceleration_frame == 40
    # Window is [floor(0.2 * 40), floor(0.85 * 40))
    assert [s.frame for s in result.scores] == list(range(8, 34))
    assert result.trophy_frame == 32
    assert result.trophy_timestamp == pytest.approx(32 / 30)
    assert result.trophy_frame < result.peak_acceleration_frame


def test_confidence_combines_score_and_handedness(serve_clip):
    result = detect_trophy(serve_clip, 30)
    expected = min(1.0, result.score * 0.6 + result.handedness_confidence * 0.2 + 0.2)
    assert result.confidence == pytest.approx(expected)
    assert result.confidence == pytest.approx(event_confidence(result.score, result.handedness.confidence))
    assert 0.0 <= result.confidence <= 1.0


def test_explicit_hand_has_full_handedness_confidence(serve_clip):
    result = detect_trophy(serve_clip, 30, dominant_hand="right")
    assert result.handedness_confidence == 1.0
    assert result.trophy_frame == 32


def test_too_few_frames_raises(serve_clip):
    short = {i: serve_clip[i] for i in range(3)}
    with pytest.raises(InsufficientDataError) as excinfo:
        detect_trophy(short, 30)
    assert excinfo.value.required == 20
    assert excinfo.value.to_dict()["error"] == "InsufficientDataError"


def test_invalid_fps_raises(serve_clip):
    with pytest.raises(InvalidPoseInputError):
        detect_trophy(serve_clip, 0)


def test_low_confidence_wrist_gives_null_signals(serve_clip, make_body):
    frames = dict(serve_clip)
    body = frames[10][0]
    rw = KEYPOINT_NAMES["right_wrist"]
    points = {i: (kp.x, kp.y) for i, kp in enumerate(body.keypoints) if kp.score}
    frames[10] = [make_body(points, scores={rw: 0.25})]

    signals = TrophyDetector().extract_signals(frames, 30.0, Hand.RIGHT)
    assert signals[10].racket_wrist_velocity is None
    assert signals[11].racket_wrist_velocity is None
    assert signals[11].racket_wrist_acceleration is None
    assert signals[12].racket_wrist_acceleration is None
    assert signals[13].racket_wrist_acceleration is not None
    # Other cues of the same frame are still measured
    assert signals[10].toss_wrist_y is not None


def test_first_frames_have_no_motion(serve_clip):
    signals = TrophyDetector().extract_signals(serve_clip, 30.0, Hand.RIGHT)
    assert signals[0].racket_wrist_velocity is None
    assert signals[1].racket_wrist_acceleration is None
    assert signals[0].ankle_motion is None
    assert signals[2].racket_wrist_acceleration is not None


def test_raw_signals_kept_alongside_smoothed(serve_clip):
    result = detect_trophy(serve_clip, 30)
    assert len(result.raw_signals) == len(result.signals) == 60
    raw_accel = [s.racket_wrist_acceleration for s in result.raw_signals]
    smooth_accel = [s.racket_wrist_acceleration for s in result.signals]
    assert raw_accel != smooth_accel
    assert result.raw_signals[31].racket_wrist_acceleration == pytest.approx(-3600.0)


def test_result_is_deterministic(serve_clip):
    first = detect_trophy(serve_clip, 30)
    second = detect_trophy(serve_clip, 30)
    assert first.to_dict() == second.to_dict()
    assert first.to_json() == second.to_json()


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        TrophyConfig(smoothing_window=4)
