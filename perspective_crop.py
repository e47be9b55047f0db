# perspective_crop.py
# Cut the circled panel out of a camera image.
#
# The panel's 4 world corners are projected into the camera image, which gives
# a (usually non-rectangular) quad; a 4-point homography then warps that quad
# straight onto an upright rectangle. The output's shorter side is always
# 1080 px whatever the panel's physical size.

from __future__ import annotations
from dataclasses import dataclass
import itertools
import logging
import math
import cv2
import numpy as np

from errors import CropFailure, DegenerateQuadrilateral, ProjectionFailure
from params import EPS

logger = logging.getLogger(__name__)

SHORT_SIDE_PX = 1080


@dataclass(frozen=True)
class PlanarImage:
    pixels: np.ndarray   # (H, W) or (H, W, C), read-only
    width: int
    height: int

    def __post_init__(self):
        px = np.asarray(self.pixels)
        if not px.flags.writeable:
            return
        px = px.copy()
        px.setflags(write=False)
        object.__setattr__(self, "pixels", px)


def output_size(width: float, height: float, short_side: int = SHORT_SIDE_PX) -> tuple[int, int]:
    """Scale (width, height) so the shorter side is `short_side` px, keeping the aspect."""
    w = float(width)
    h = float(height)
    if not (math.isfinite(w) and math.isfinite(h)) or w <= 0.0 or h <= 0.0:
        raise CropFailure(f"bad panel size {width}x{height}")
    if w < h:
        return (int(short_side), int(round(short_side * h / w)))
    return (int(round(short_side * w / h)), int(short_side))


def project_corners(corners, project) -> np.ndarray:
    """World corners -> (4, 2) camera pixels; ProjectionFailure if any is undefined."""
    out = []
    for i, c in enumerate(corners):
        try:
            uv = project(np.asarray(c, dtype=np.float64))
        except Exception as e:
            raise ProjectionFailure(f"corner {i} projection raised: {e}") from e
        if uv is None:
            raise ProjectionFailure(f"corner {i} is outside the camera view")
        uv = np.asarray(uv, dtype=np.float64).reshape(-1)
        if uv.shape[0] != 2 or not np.all(np.isfinite(uv)):
            raise ProjectionFailure(f"corner {i} projected to {uv}")
        out.append(uv)
    return np.array(out)


def _tri_area2(p, q, r) -> float:
    return abs((q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0]))


def solve_homography(src_quad, width: int, height: int) -> np.ndarray:
    """
    3x3 homography taking the quad (TL, TR, BR, BL) onto (0,0),(w,0),(w,h),(0,h).
    Normalized so H[2,2] == 1.
    """
    src = np.asarray(src_quad, dtype=np.float64).reshape(4, 2)
    for p, q, r in itertools.combinations(src, 3):
        if _tri_area2(p, q, r) < EPS:
            raise DegenerateQuadrilateral(f"3 of the source corners are colinear: {src.tolist()}")

    dst = np.array([
        [0.0, 0.0],
        [float(width), 0.0],
        [float(width), float(height)],
        [0.0, float(height)],
    ])
    try:
        H = cv2.getPerspectiveTransform(src.astype(np.float32), dst.astype(np.float32))
    except cv2.error as e:
        raise DegenerateQuadrilateral(f"homography solve failed: {e}") from e

    H = np.asarray(H, dtype=np.float64)
    if not np.all(np.isfinite(H)) or abs(H[2, 2]) < EPS or abs(np.linalg.det(H)) < EPS:
        raise DegenerateQuadrilateral(f"singular homography:\n{H}")
    return H / H[2, 2]


def warp(image, H, size) -> PlanarImage:
    """Resample `image` into a `size` = (w, h) rectangle through homography H."""
    img = np.asarray(image) if image is not None else None
    if img is None or img.size == 0 or img.ndim not in (2, 3):
        raise CropFailure("no camera image to crop from")
    w, h = int(size[0]), int(size[1])
    try:
        out = cv2.warpPerspective(
            img, np.asarray(H, dtype=np.float64), (w, h),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=0,
        )
    except cv2.error as e:
        raise CropFailure(f"warpPerspective failed: {e}") from e
    if out is None or out.shape[0] != h or out.shape[1] != w:
        raise CropFailure("warpPerspective returned an unexpected image")
    return PlanarImage(out, w, h)


def crop_panel(corners, project, image, physical_size, short_side: int = SHORT_SIDE_PX) -> PlanarImage:
    """
    corners:        4 world points, TL, TR, BR, BL
    project:        world point -> (u, v) camera pixel, or None when not visible
    physical_size:  panel (width, height) in meters; only the aspect matters
    """
    quad = project_corners(corners, project)
    size = output_size(physical_size[0], physical_size[1], short_side)
    logger.debug("crop quad=%s -> %dx%d", np.round(quad, 1).tolist(), size[0], size[1])
    H = solve_homography(quad, size[0], size[1])
    return warp(image, H, size)
