import pytest

from racket_events.analysis.swing import SwingDetector, detect_swings, extract_wrist_motion, pixels_to_kmh
from racket_events.config.detector_config import SwingConfig
from racket_events.config.keypoints import KEYPOINT_NAMES
from racket_events.core.errors import InsufficientDataError, NoEventFoundError

TORSO = {
    KEYPOINT_NAMES["left_shoulder"]: (180.0, 200.0),
    KEYPOINT_NAMES["right_shoulder"]: (220.0, 200.0),
    KEYPOINT_NAMES["left_hip"]: (180.0, 300.0),
    KEYPOINT_NAMES["right_hip"]: (220.0, 300.0),
}
RW = KEYPOINT_NAMES["right_wrist"]
BURST = [2.0, 5.0, 10.0, 20.0, 10.0, 5.0, 2.0]


def _swing_clip(make_body, start_x=250.0, direction=1.0, n=90):
    """Right wrist at rest beside a fixed torso, one burst starting at frame 40."""
    frames = {}
    x = start_x
    for i in range(n):
        if 40 <= i < 40 + len(BURST):
            x += direction * BURST[i - 40]
        points = dict(TORSO)
        points[RW] = (x, 250.0)
        frames[i] = [make_body(points)]
    return frames


def test_outward_burst_is_a_swing(make_body):
    result = detect_swings(_swing_clip(make_body), 30)

    assert result.total_swings == 1
    swing = result.swings[0]
    assert swing.frame == 43
    assert swing.velocity == pytest.approx(40.0 / 3.0)
    assert swing.dominant_side == "right"
    assert swing.symmetry == 0.0
    assert swing.left_velocity == 0.0
    assert result.person_height_px == pytest.approx(250.0)
    assert swing.velocity_kmh == pytest.approx(pixels_to_kmh(40.0 / 3.0, 250.0, 30.0, 1.75))
    assert result.frames_analyzed == 90
    assert result.frames_with_gaps == 0
    assert result.video_duration == pytest.approx(3.0)


def test_recovery_motion_is_rejected(make_body):
    frames = _swing_clip(make_body, start_x=350.0, direction=-1.0)
    with pytest.raises(NoEventFoundError):
        detect_swings(frames, 30)

    result = detect_swings(frames, 30, config=SwingConfig(require_outward_motion=False))
    assert [s.frame for s in result.swings] == [43]


def test_missing_frames_are_counted_as_gaps(make_body):
    frames = _swing_clip(make_body)
    frames[10] = []
    result = detect_swings(frames, 30)
    assert result.frames_with_gaps == 2
    assert result.signals[10].raw_velocity is None
    assert result.signals[11].raw_velocity is None


def test_center_requires_two_core_points(make_body):
    points = {KEYPOINT_NAMES["left_shoulder"]: (180.0, 200.0), RW: (250.0, 250.0)}
    frames = {i: [make_body(points)] for i in range(3)}
    motions = extract_wrist_motion(SwingDetector(), frames, 30.0, 0.3)
    assert all(m.gap for m in motions)
    assert all(m.body_center is None for m in motions)


def test_threshold_is_inclusive(make_body):
    points = dict(TORSO)
    frames = {}
    for i in range(3):
        points[RW] = (250.0 + i, 250.0)
        frames[i] = [make_body(points, score=0.3)]
    motions = extract_wrist_motion(SwingDetector(), frames, 30.0, 0.3)
    assert motions[0].velocity is None
    assert motions[1].right_velocity == pytest.approx(1.0)


def test_person_height_falls_back_to_default(make_body):
    frames = {0: [make_body({RW: (1.0, 1.0)})]}
    assert SwingDetector().estimate_person_height(frames) == 200.0


def test_not_enough_wrist_velocities(make_body):
    frames = {i: [make_body(dict(TORSO))] for i in range(10)}
    with pytest.raises(InsufficientDataError):
        detect_swings(frames, 30)


def test_person_height_ignores_gap_frames(make_body):
    frames = _swing_clip(make_body)
    frames[88] = []
    frames[89] = [make_body({
        KEYPOINT_NAMES["left_shoulder"]: (180.0, 100.0),
        KEYPOINT_NAMES["left_hip"]: (180.0, 300.0),
    })]

    result = detect_swings(frames, 30)
    assert result.person_height_px == pytest.approx(250.0)
    # Without motion information every frame counts
    assert SwingDetector().estimate_person_height(frames) == pytest.approx(500.0)


def test_swing_result_is_deterministic(make_body):
    frames = _swing_clip(make_body)
    assert detect_swings(frames, 30).to_json() == detect_swings(frames, 30).to_json()
