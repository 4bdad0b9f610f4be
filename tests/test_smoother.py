from dataclasses import dataclass
from typing import Optional

import pytest

from racket_events.core.smoother import SignalSmoother, moving_average


@dataclass(frozen=True)
class _Record:
    frame: int
    value: Optional[float]
    other: Optional[float]


def test_constant_series_is_unchanged():
    values = [4.0] * 9
    assert moving_average(values, 5) == values


def test_window_shrinks_at_boundaries():
    assert moving_average([1.0, 2.0, 3.0], 3) == [1.5, 2.0, 2.5]


def test_missing_samples_are_filled_from_neighbours():
    out = moving_average([1.0, None, 3.0], 3)
    assert out == [1.0, 2.0, 3.0]


def test_window_without_valid_samples_stays_none():
    out = moving_average([None, None, None, None, 8.0], 3)
    assert out[0] is None and out[1] is None
    assert out[3] == 8.0 and out[4] == 8.0


@pytest.mark.parametrize("window", [0, 2, 4, -3])
def test_invalid_window_raises(window):
    with pytest.raises(ValueError):
        moving_average([1.0, 2.0], window)
    with pytest.raises(ValueError):
        SignalSmoother(window)


def test_smoother_returns_new_records():
    records = [_Record(i, float(v), 1.0) for i, v in enumerate([0, 3, 0])]
    smoothed = SignalSmoother(3).smooth(records, ("value",))

    assert [r.value for r in smoothed] == [1.5, 1.0, 1.5]
    # Untouched channels and the raw records are preserved
    assert [r.other for r in smoothed] == [1.0, 1.0, 1.0]
    assert [r.value for r in records] == [0.0, 3.0, 0.0]
    assert [r.frame for r in smoothed] == [0, 1, 2]


def test_smooth_many():
    out = SignalSmoother(3).smooth_many({"a": [0.0, 3.0, 0.0], "b": [None, None, 2.0]})
    assert out["a"] == [1.5, 1.0, 1.5]
    assert out["b"] == [None, 2.0, 2.0]
