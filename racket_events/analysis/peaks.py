"""Peak and extremum search over null-tolerant signal series.

Selection is deterministic: candidates with equal values are resolved in
index order, so identical input always yields identical peaks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Peak:
    index: int
    value: float
    prominence: Optional[float] = None


def _valid(values: Sequence[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]


def argmax_optional(values: Sequence[Optional[float]], start: int = 0, end: Optional[int] = None) -> Optional[int]:
    """Index of the first maximum among non-None values in ``[start, end)``."""
    end = len(values) if end is None else min(end, len(values))
    best: Optional[int] = None
    for i in range(max(0, start), end):
        v = values[i]
        if v is not None and (best is None or v > values[best]):
            best = i
    return best


def argmin_optional(values: Sequence[Optional[float]], start: int = 0, end: Optional[int] = None) -> Optional[int]:
    """Index of the first minimum among non-None values in ``[start, end)``."""
    end = len(values) if end is None else min(end, len(values))
    best: Optional[int] = None
    for i in range(max(0, start), end):
        v = values[i]
        if v is not None and (best is None or v < values[best]):
            best = i
    return best


def median_low(values: Sequence[Optional[float]]) -> Optional[float]:
    """Element at ``n // 2`` of the sorted valid values (upper median for even n)."""
    valid = sorted(_valid(values))
    if not valid:
        return None
    return valid[len(valid) // 2]


def percentile_low(values: Sequence[Optional[float]], p: float) -> float:
    """Nearest-rank percentile of the valid values, 0 when there are none."""
    valid = sorted(_valid(values))
    if not valid:
        return 0.0
    idx = int(np.floor(len(valid) * p / 100.0))
    return valid[min(idx, len(valid) - 1)]


def _by_value(peaks: Sequence[Peak]) -> List[Peak]:
    # Highest first; equal values keep index order.
    return sorted(peaks, key=lambda pk: (-pk.value, pk.index))


def find_local_maxima(values: Sequence[Optional[float]], min_height: float) -> List[Peak]:
    """Strict local maxima over the immediate neighbours, at or above ``min_height``."""
    peaks: List[Peak] = []
    for i in range(1, len(values) - 1):
        prev, curr, nxt = values[i - 1], values[i], values[i + 1]
        if prev is None or curr is None or nxt is None:
            continue
        if curr > prev and curr > nxt and curr >= min_height:
            peaks.append(Peak(index=i, value=curr))
    return peaks


def non_maximum_suppression(peaks: Sequence[Peak], window: int) -> List[Peak]:
    """Keep a peak only if no stronger kept peak lies within ``±window``.

    Returns the survivors ordered by descending value.
    """
    kept: List[Peak] = []
    suppressed = set()
    ordered = _by_value(peaks)
    for candidate in ordered:
        if candidate.index in suppressed:
            continue
        kept.append(candidate)
        for other in ordered:
            if other.index != candidate.index and abs(other.index - candidate.index) <= window:
                suppressed.add(other.index)
    return kept


def enforce_min_distance(peaks: Sequence[Peak], min_distance: int) -> List[Peak]:
    """Greedy by value: keep a peak if it is ``min_distance`` from every kept one.

    Returns the survivors ordered by descending value.
    """
    selected: List[Peak] = []
    for peak in _by_value(peaks):
        if all(abs(peak.index - s.index) >= min_distance for s in selected):
            selected.append(peak)
    return selected


def local_baseline(
    values: Sequence[Optional[float]],
    index: int,
    radius: int,
    core_radius: int,
) -> Optional[float]:
    """Mean of valid values within ``±radius`` of ``index``, skipping ``±core_radius``."""
    samples = [
        values[j]
        for j in range(index - radius, index + radius + 1)
        if 0 <= j < len(values) and abs(j - index) > core_radius and values[j] is not None
    ]
    if not samples:
        return None
    return float(np.mean(samples))


def find_prominent_peaks(
    values: Sequence[Optional[float]],
    min_prominence_ratio: float = 1.3,
    min_distance: int = 45,
    neighbor_radius: int = 2,
    baseline_radius: int = 15,
    core_radius: int = 3,
    min_valid: int = 5,
) -> List[Peak]:
    """
    Prominent, well-separated local maxima, in chronological order.

    A candidate is strictly greater than every valid value within
    ``±neighbor_radius`` and above the series median. Its prominence is its
    value over the mean of the surrounding ``±baseline_radius`` values with
    the ``±core_radius`` core excluded (the median stands in when that ring
    is empty). Candidates under ``min_prominence_ratio`` are dropped, the
    rest are picked greedily by value with at least ``min_distance`` frames
    between any two picks.
    """
    if len(_valid(values)) < min_valid:
        return []
    median = median_low(values)

    candidates: List[Peak] = []
    for i in range(neighbor_radius, len(values) - neighbor_radius):
        curr = values[i]
        if curr is None or curr <= median:
            continue
        is_max = True
        for j in range(i - neighbor_radius, i + neighbor_radius + 1):
            if j == i:
                continue
            neighbor = values[j]
            if neighbor is not None and neighbor >= curr:
                is_max = False
                break
        if not is_max:
            continue

        baseline = local_baseline(values, i, baseline_radius, core_radius)
        if baseline is None:
            baseline = median
        prominence = curr / baseline if baseline > 0 else curr
        candidates.append(Peak(index=i, value=curr, prominence=prominence))

    significant = [pk for pk in candidates if pk.prominence >= min_prominence_ratio]
    selected = enforce_min_distance(significant, min_distance)
    return sorted(selected, key=lambda pk: pk.index)


def mean_before(values: Sequence[Optional[float]], index: int, lookback: int) -> Optional[float]:
    """Mean of valid values in ``[index - lookback, index)``, None if there are none."""
    samples = [
        values[j]
        for j in range(index - lookback, index)
        if 0 <= j < len(values) and values[j] is not None
    ]
    if not samples:
        return None
    return float(np.mean(samples))
