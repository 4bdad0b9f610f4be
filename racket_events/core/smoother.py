"""Temporal smoothing for per-frame signal channels."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def moving_average(values: Sequence[Optional[float]], window: int = 5) -> List[Optional[float]]:
    """Centered moving average that tolerates missing samples.

    The window shrinks at the series boundaries instead of wrapping. None
    entries are left out of every average, so a missing sample is filled
    from its neighbours; a position whose window holds no valid sample stays
    None.
    """
    if window <= 0 or window % 2 == 0:
        raise ValueError(f"window must be a positive odd integer, got {window}")

    n = len(values)
    half = window // 2
    smoothed: List[Optional[float]] = []
    for i in range(n):
        start = max(0, i - half)
        end = min(n - 1, i + half)
        valid = [values[j] for j in range(start, end + 1) if values[j] is not None]
        if not valid:
            smoothed.append(None)
        else:
            smoothed.append(float(np.mean(valid)))
    return smoothed


class SignalSmoother:
    """
    Smooth named channels of a sequence of frozen signal records.

    Records are never modified; :meth:`smooth` returns new records built with
    ``dataclasses.replace`` so raw and smoothed traces can both be kept.
    """

    def __init__(self, window: int = 5):
        if window <= 0 or window % 2 == 0:
            raise ValueError(f"window must be a positive odd integer, got {window}")
        self.window = window

    def smooth_series(self, values: Sequence[Optional[float]]) -> List[Optional[float]]:
        return moving_average(values, self.window)

    def smooth_many(self, series: Dict[str, Sequence[Optional[float]]]) -> Dict[str, List[Optional[float]]]:
        return {name: self.smooth_series(vals) for name, vals in series.items()}

    def smooth(self, records: Sequence[T], channels: Sequence[str]) -> List[T]:
        """Return copies of ``records`` with ``channels`` smoothed."""
        smoothed = self.smooth_many(
            {name: [getattr(r, name) for r in records] for name in channels}
        )
        return [
            replace(record, **{name: smoothed[name][i] for name in channels})
            for i, record in enumerate(records)
        ]
