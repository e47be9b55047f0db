# curve_resample.py
# Arc-length resampling: redistribute m points along a 3D polyline so that
# consecutive output points are equally spaced by path length.

from __future__ import annotations
import numpy as np

from errors import InsufficientPoints
from geometry import as_points


def cumulative_lengths(points) -> np.ndarray:
    """Cumulative path length at each input point; first entry is 0."""
    pts = as_points(points)
    if len(pts) == 0:
        return np.zeros(0)
    seg = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    return np.concatenate([[0.0], np.cumsum(seg)])


def resample(points, m: int) -> np.ndarray:
    """
    Resample an ordered point sequence to exactly `m` points, uniform in arc length.

    Returns an (m, 3) float64 array. The first output point is the first
    input point; when the curve has non-zero length the last output point is
    the last input point. Duplicate consecutive inputs (zero-length segments)
    are never selected as an interpolation interval.
    """
    pts = as_points(points)
    n = len(pts)
    if n == 0:
        raise InsufficientPoints("resample needs at least one point")
    m = int(m)
    if m < 1:
        raise ValueError(f"resample count must be positive, got {m}")

    if n == 1:
        return np.repeat(pts[:1], m, axis=0)

    cum = cumulative_lengths(pts)
    total = float(cum[-1])
    if total == 0.0 or m == 1:
        return np.repeat(pts[:1], m, axis=0)

    d = total / (m - 1)
    # clamp float overshoot on the final sample to the curve end
    s = np.minimum(np.arange(m, dtype=np.float64) * d, total)

    # first index whose cumulative length is >= s; cum[idx-1] < s <= cum[idx]
    idx = np.searchsorted(cum, s, side="left")

    out = np.empty((m, 3), dtype=np.float64)
    head = idx == 0
    out[head] = pts[0]

    k = idx[~head]
    lo = cum[k - 1]
    hi = cum[k]
    t = np.clip((s[~head] - lo) / (hi - lo), 0.0, 1.0)
    out[~head] = pts[k - 1] + t[:, None] * (pts[k] - pts[k - 1])
    return out
