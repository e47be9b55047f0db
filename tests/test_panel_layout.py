import numpy as np
import pytest

from geometry import PanelPlacement, RigidTransform
from panel_layout import companion_offset, panel_corners, place_companion


def test_panel_corners_order():
    panel = PanelPlacement(RigidTransform.identity(), 1.0, 0.6)
    c = panel_corners(panel)
    assert np.allclose(c, [(-0.5, 0.3, 0), (0.5, 0.3, 0), (0.5, -0.3, 0), (-0.5, -0.3, 0)])


def test_companion_offset_right_side_top_aligned():
    assert np.allclose(companion_offset((1.0, 0.6)), (0.7, 0.05, 0.0))


def test_companion_faces_viewer():
    image_panel = PanelPlacement(RigidTransform.identity(), 1.0, 0.6)
    viewer = np.array([0.0, 0.0, 5.0])
    comp = place_companion(image_panel, viewer)
    assert comp.size == pytest.approx((0.3, 0.5))
    assert np.allclose(comp.transform.origin, (0.7, 0.05, 0.0))
    to_viewer = viewer - comp.transform.origin
    assert np.allclose(comp.transform.z_axis, to_viewer / np.linalg.norm(to_viewer))
    assert comp.transform.is_rigid()


def test_companion_upright_even_when_image_lies_flat():
    # image panel flat on a table, normal pointing up
    flat = RigidTransform.from_axes((0, 0.8, -0.5), (1, 0, 0), (0, 0, -1), (0, 1, 0))
    image_panel = PanelPlacement(flat, 0.4, 0.3)
    viewer = np.array([0.0, 1.6, 0.3])
    comp = place_companion(image_panel, viewer)
    assert np.dot(comp.transform.z_axis, viewer - comp.transform.origin) > 0
    assert comp.transform.y_axis[1] > 0.5
    assert abs(np.dot(comp.transform.z_axis, flat.z_axis)) < 0.99
