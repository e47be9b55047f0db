# panel_layout.py
# Where the two panels go:
# - image panel corners in world space (for the crop)
# - companion panel: beside the image panel, top-aligned, turned to face the viewer

from __future__ import annotations
import logging
import numpy as np

from geometry import PanelPlacement, RigidTransform, as_point

logger = logging.getLogger(__name__)

COMPANION_SIZE = (0.3, 0.5)
COMPANION_SPACING = 0.05
WORLD_UP = (0.0, 1.0, 0.0)


def panel_corners(panel: PanelPlacement) -> np.ndarray:
    """World corners ordered top-left, top-right, bottom-right, bottom-left."""
    hw = panel.width / 2.0
    hh = panel.height / 2.0
    local = np.array([
        [-hw,  hh, 0.0],
        [ hw,  hh, 0.0],
        [ hw, -hh, 0.0],
        [-hw, -hh, 0.0],
    ])
    return panel.transform.transform_points(local)


def companion_offset(image_size, size=COMPANION_SIZE, spacing=COMPANION_SPACING) -> np.ndarray:
    """Companion center in the image panel's local frame: right side, tops aligned."""
    iw, ih = image_size
    pw, ph = size
    return np.array([iw / 2.0 + spacing + pw / 2.0, ih / 2.0 - ph / 2.0, 0.0])


def place_companion(image_panel: PanelPlacement, viewer_position,
                    size=COMPANION_SIZE, spacing=COMPANION_SPACING,
                    up=WORLD_UP) -> PanelPlacement:
    offset = companion_offset(image_panel.size, size, spacing)
    position = image_panel.transform.transform_point(offset)

    # Faces the viewer even when the circled thing lies flat (e.g. on a table).
    transform = RigidTransform.look_at(as_point(viewer_position), position, up)
    logger.debug("companion panel at %s", np.round(position, 4))
    return PanelPlacement(transform, float(size[0]), float(size[1]))
