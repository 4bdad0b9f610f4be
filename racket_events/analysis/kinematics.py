"""Finite-difference speed and acceleration over sparse point tracks."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np


def speed_between(
    p0: Optional[np.ndarray],
    t0: float,
    p1: Optional[np.ndarray],
    t1: float,
) -> Optional[float]:
    """Displacement magnitude per second, None if either point is missing."""
    if p0 is None or p1 is None:
        return None
    dt = t1 - t0
    if dt <= 0:
        return None
    return float(np.linalg.norm(p1 - p0) / dt)


def speed_series(
    points: Sequence[Optional[np.ndarray]],
    timestamps: Sequence[float],
) -> List[Optional[float]]:
    """Speed at each index from the previous record (index 0 is None)."""
    speeds: List[Optional[float]] = [None] * len(points)
    for i in range(1, len(points)):
        speeds[i] = speed_between(points[i - 1], timestamps[i - 1], points[i], timestamps[i])
    return speeds


def acceleration_series(
    points: Sequence[Optional[np.ndarray]],
    timestamps: Sequence[float],
) -> List[Optional[float]]:
    """
    Acceleration over a 3-record window.

    ``v1`` is taken over i-2 -> i-1, ``v2`` over i-1 -> i, and the change is
    divided by half the i-2 -> i time span. Any missing point makes the
    value None.
    """
    accels: List[Optional[float]] = [None] * len(points)
    for i in range(2, len(points)):
        v1 = speed_between(points[i - 2], timestamps[i - 2], points[i - 1], timestamps[i - 1])
        v2 = speed_between(points[i - 1], timestamps[i - 1], points[i], timestamps[i])
        if v1 is None or v2 is None:
            continue
        dt = (timestamps[i] - timestamps[i - 2]) / 2.0
        if dt <= 0:
            continue
        accels[i] = (v2 - v1) / dt
    return accels


def relative_motion(
    curr: np.ndarray,
    prev: np.ndarray,
    curr_center: np.ndarray,
    prev_center: np.ndarray,
    min_radius: float = 1.0,
) -> Tuple[float, float]:
    """
    Motion of a point relative to a moving body center, per frame.

    Returns ``(speed, radial)``: the magnitude of the change in the
    center-relative position, and its component along the current
    center->point direction (positive = moving away from the body). The
    radial part is 0 when the point sits within ``min_radius`` of the center.
    """
    rel_curr = curr - curr_center
    rel_prev = prev - prev_center
    delta = rel_curr - rel_prev
    speed = float(np.linalg.norm(delta))
    radius = float(np.linalg.norm(rel_curr))
    if radius < min_radius:
        return speed, 0.0
    radial = float(np.dot(delta, rel_curr / radius))
    return speed, radial
