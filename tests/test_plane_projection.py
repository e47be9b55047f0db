import numpy as np
import pytest

from errors import EmptyPointSet
from geometry import RigidTransform
from plane_projection import bounding_box_size, project_point, project_points


def tilted_plane():
    # plane rotated 90 deg about Y: local X -> world -Z, local Z -> world +X
    return RigidTransform.from_axes((1.0, 2.0, 3.0), (0, 0, -1), (0, 1, 0), (1, 0, 0))


def test_project_drops_local_z():
    plane = tilted_plane()
    x, y = project_point((5.0, 2.5, 2.0), plane)
    assert (x, y) == pytest.approx((1.0, 0.5))


def test_project_points_matches_single():
    plane = tilted_plane()
    pts = np.array([(5.0, 2.5, 2.0), (1.0, 2.0, 3.0), (-1.0, 0.0, 4.0)])
    many = project_points(pts, plane)
    for p, xy in zip(pts, many):
        assert project_point(p, plane) == pytest.approx(tuple(xy))


def test_bounding_box_uses_every_raw_point():
    plane = RigidTransform.identity()
    pts = [(0, 0, 0), (2, 0, 5), (2, 3, -1), (0.5, 1, 0)]
    assert bounding_box_size(pts, plane) == pytest.approx((2.0, 3.0))


def test_bounding_box_empty_raises():
    with pytest.raises(EmptyPointSet):
        bounding_box_size([], RigidTransform.identity())
