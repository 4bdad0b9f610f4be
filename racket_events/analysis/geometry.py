"""2D geometry helpers shared by all detectors."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np


def angle_at_vertex(p1: np.ndarray, vertex: np.ndarray, p2: np.ndarray) -> float:
    """
    Angle p1-vertex-p2 in degrees, in [0, 180].

    Computed from the difference of the two edge bearings, folded back into
    [0, 180]. Symmetric in p1/p2; collinear points with the vertex between
    them give 180, a fully folded limb gives 0.
    """
    a1 = math.atan2(p1[1] - vertex[1], p1[0] - vertex[0])
    a2 = math.atan2(p2[1] - vertex[1], p2[0] - vertex[0])
    angle = abs(math.degrees(a1 - a2))
    if angle > 180.0:
        angle = 360.0 - angle
    return float(angle)


def bearing_deg(origin: np.ndarray, target: np.ndarray) -> float:
    """Polar angle of origin->target in degrees (image coordinates)."""
    return float(math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0])))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def min_max_normalize(
    values: Sequence[Optional[float]],
    *,
    invert: bool,
) -> List[Optional[float]]:
    """
    Scale values into [0, 1] against their own extrema.

    ``invert=True`` maps the minimum to 1, which is what image-Y quantities
    need (lower pixel Y = higher in image). ``invert=False`` maps the maximum
    to 1. None entries stay None; a flat series maps to 0.5.
    """
    valid = [v for v in values if v is not None]
    if not valid:
        return [None] * len(values)
    lo, hi = min(valid), max(valid)
    span = hi - lo
    out: List[Optional[float]] = []
    for v in values:
        if v is None:
            out.append(None)
        elif span <= 0:
            out.append(0.5)
        else:
            scaled = (v - lo) / span
            out.append(1.0 - scaled if invert else scaled)
    return out


def image_height(y: Optional[float], y_min: float, y_max: float) -> Optional[float]:
    """Normalized height of an image-Y value: 1 at ``y_min`` (top), 0 at ``y_max``."""
    if y is None:
        return None
    span = y_max - y_min
    if span <= 0:
        return 0.5
    return 1.0 - (y - y_min) / span


def mean_point(points: Sequence[Optional[np.ndarray]], min_count: int = 1) -> Optional[np.ndarray]:
    """Centroid of the available points, or None if fewer than ``min_count``."""
    valid = [p for p in points if p is not None]
    if len(valid) < max(1, min_count):
        return None
    return np.mean(np.stack(valid), axis=0)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))
