import math

import numpy as np
import pytest

from camera import PinholeCamera


def circle_points(center, radius, n=64, z_wobble=0.0):
    cx, cy, cz = center
    pts = []
    for i in range(n + 1):
        a = 2.0 * math.pi * i / n
        pts.append((cx + radius * math.cos(a), cy + radius * math.sin(a), cz + z_wobble * math.sin(3 * a)))
    return np.array(pts)


@pytest.fixture
def camera():
    return PinholeCamera(640, 480, hfov_deg=60.0)


@pytest.fixture
def center_patch_image():
    # black frame with a white block around the image center
    img = np.zeros((480, 640, 3), dtype=np.uint8)
    img[200:280, 280:360] = 255
    return img
