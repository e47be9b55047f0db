# plane_fit.py
# Fit a viewer-facing panel plane to a (resampled) gesture curve.
#
# The curve is split into three contiguous arcs; their means span the plane.
# The normal is turned toward the viewer and the in-plane X axis is kept
# perpendicular to the viewer's up axis, so the panel reads upright.

from __future__ import annotations
import logging
import numpy as np

from errors import ColinearPoints, DegenerateViewpoint, InsufficientPoints, ParallelAxes
from geometry import RigidTransform, as_point, as_points, length
from params import EPS

logger = logging.getLogger(__name__)

# 180 deg about the local normal: X -> -X, Y -> -Y, Z unchanged.
# Matches the display convention the panels were authored against.
LEGACY_DISPLAY_FLIP = np.diag([-1.0, -1.0, 1.0])


def group_sizes(n: int) -> tuple[int, int, int]:
    base, rem = divmod(int(n), 3)
    return tuple(base + (1 if g < rem else 0) for g in range(3))


def representative_points(curve):
    """Means of the three contiguous thirds of `curve` (larger thirds first)."""
    pts = as_points(curve)
    n = len(pts)
    if n < 3:
        raise InsufficientPoints(f"plane fit needs at least 3 points, got {n}")

    out = []
    start = 0
    for size in group_sizes(n):
        out.append(pts[start:start + size].mean(axis=0))
        start += size
    return out[0], out[1], out[2]


def compute_center(points):
    """Arithmetic mean in float64, or None for no points."""
    pts = as_points(points)
    if len(pts) == 0:
        return None
    return pts.sum(axis=0, dtype=np.float64) / float(len(pts))


def fit_plane(a, b, c, center, viewer_position, viewer_up_axis) -> RigidTransform:
    a, b, c = as_point(a), as_point(b), as_point(c)
    center = as_point(center)

    cross = np.cross(b - a, c - a)
    if length(cross) < EPS:
        raise ColinearPoints("representative points are colinear; no plane")
    normal = cross / length(cross)

    to_viewer = as_point(viewer_position) - center
    if length(to_viewer) < EPS:
        raise DegenerateViewpoint("viewer sits on the plane center")
    if np.dot(normal, to_viewer / length(to_viewer)) < 0.0:
        normal = -normal

    up = as_point(viewer_up_axis)
    if length(up) >= EPS:
        up = up / length(up)
    x_raw = np.cross(normal, up)
    if length(x_raw) < EPS:
        raise ParallelAxes("viewer up axis is parallel to the plane normal")
    x = x_raw / length(x_raw)
    y = np.cross(normal, x)
    y = y / length(y)

    basis = np.column_stack([x, y, normal]) @ LEGACY_DISPLAY_FLIP
    return RigidTransform(center, basis)


def fit_curve(resampled, viewer: RigidTransform) -> RigidTransform:
    """Plane for a resampled curve, seen from the `viewer` pose (its origin and +Y)."""
    a, b, c = representative_points(resampled)
    center = compute_center(resampled)
    plane = fit_plane(a, b, c, center, viewer.origin, viewer.y_axis)
    logger.debug("plane fit: center=%s normal=%s", np.round(center, 4), np.round(plane.z_axis, 4))
    return plane
