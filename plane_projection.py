# plane_projection.py
# World points -> a plane's local 2D frame, and the panel size that covers them.

from __future__ import annotations
import numpy as np

from errors import EmptyPointSet
from geometry import RigidTransform, as_points


def project_point(point, plane: RigidTransform) -> tuple[float, float]:
    """
    Orthogonal projection of `point` into `plane`'s local XY.
    `plane` must be rigid; that is not re-checked here.
    """
    local = plane.inverse_transform_point(point)
    return (float(local[0]), float(local[1]))


def project_points(points, plane: RigidTransform) -> np.ndarray:
    """Vectorized project_point: (N, 3) -> (N, 2)."""
    return plane.inverse_transform_points(points)[:, :2]


def bounding_box_size(raw_points, plane: RigidTransform) -> tuple[float, float]:
    """
    Width/height of the local-XY box around every raw curve point.

    Pass the raw stroke, not the resampled one: resampling can cut corners
    and shrink the box below the drawn extent.
    """
    pts = as_points(raw_points)
    if len(pts) == 0:
        raise EmptyPointSet("no points to size a panel from")
    xy = project_points(pts, plane)
    mins = xy.min(axis=0)
    maxs = xy.max(axis=0)
    return (float(maxs[0] - mins[0]), float(maxs[1] - mins[1]))
