import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import pytest


# Ensure the repo root is importable when tests are run without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from racket_events.config.keypoints import KEYPOINT_NAMES  # noqa: E402
from racket_events.core.pose_data import Body, Keypoint  # noqa: E402


def _make_body(
    points: Dict[int, Tuple[float, float]],
    num_keypoints: int = 17,
    score: float = 0.9,
    scores: Optional[Dict[int, float]] = None,
) -> Body:
    """Body with the given keypoints; every other keypoint has score 0."""
    scores = scores or {}
    kps = []
    for idx in range(num_keypoints):
        if idx in points:
            x, y = points[idx]
            kps.append(Keypoint(float(x), float(y), scores.get(idx, score)))
        else:
            kps.append(Keypoint(0.0, 0.0, 0.0))
    return Body(tuple(kps))


@pytest.fixture
def make_body():
    return _make_body


def _torso() -> Dict[int, Tuple[float, float]]:
    return {
        KEYPOINT_NAMES["left_shoulder"]: (180.0, 200.0),
        KEYPOINT_NAMES["right_shoulder"]: (220.0, 200.0),
        KEYPOINT_NAMES["left_hip"]: (185.0, 300.0),
        KEYPOINT_NAMES["right_hip"]: (215.0, 300.0),
    }


def _legs() -> Dict[int, Tuple[float, float]]:
    return {
        KEYPOINT_NAMES["left_knee"]: (185.0, 400.0),
        KEYPOINT_NAMES["right_knee"]: (215.0, 400.0),
        KEYPOINT_NAMES["left_ankle"]: (185.0, 500.0),
        KEYPOINT_NAMES["right_ankle"]: (215.0, 500.0),
    }


def _serve_racket_x(i: int) -> float:
    # Wrist holds still until frame 37, then accelerates: per-frame steps 2, 6, 14, 30, then 60.
    steps = [2.0, 6.0, 14.0, 30.0]
    x = 240.0
    for k in range(38, i + 1):
        j = k - 38
        x += steps[j] if j < len(steps) else 60.0
    return x


def _serve_racket_y(i: int) -> float:
    # Slow rise of 4 px/frame, then a pause at the top (frames 30-37 and the swing).
    return 300.0 - 4.0 * min(i, 30)


@pytest.fixture
def serve_clip():
    """60-frame right-handed serve at 30 fps.

    Racket (right) wrist rises slowly, pauses from frame 30, then swings with
    peak acceleration around frame 40. The toss (left) wrist peaks at frame 32.
    """
    frames = {}
    for i in range(60):
        points = _torso()
        points.update(_legs())
        points[KEYPOINT_NAMES["right_elbow"]] = (230.0, 250.0)
        points[KEYPOINT_NAMES["left_elbow"]] = (170.0, 250.0)
        points[KEYPOINT_NAMES["right_wrist"]] = (_serve_racket_x(i), _serve_racket_y(i))
        points[KEYPOINT_NAMES["left_wrist"]] = (160.0, 100.0 + 6.25 * abs(i - 32))
        frames[i] = [_make_body(points)]
    return frames


@pytest.fixture
def jump_clip():
    """61 frames: feet at y=500, rising linearly to y=100 at frame 30, back by frame 60."""
    frames = {}
    for i in range(61):
        if i <= 30:
            y = 500.0 - (400.0 / 30.0) * i
        else:
            y = 100.0 + (400.0 / 30.0) * (i - 30)
        points = _torso()
        points.update(
            {
                KEYPOINT_NAMES["left_hip"]: (185.0, y - 100.0),
                KEYPOINT_NAMES["right_hip"]: (215.0, y - 100.0),
                KEYPOINT_NAMES["left_knee"]: (185.0, y - 50.0),
                KEYPOINT_NAMES["right_knee"]: (215.0, y - 50.0),
                KEYPOINT_NAMES["left_ankle"]: (185.0, y),
                KEYPOINT_NAMES["right_ankle"]: (215.0, y),
            }
        )
        frames[i] = [_make_body(points)]
    return frames
