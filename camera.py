# camera.py
# Camera-side inputs of the pipeline.
#
# CameraFrame bundles what one finalized circle needs: the viewer (device)
# pose, the camera image and a world -> pixel mapping.
# PinholeCamera is the mapping used by the webcam demo and the tests: camera
# at the viewer origin, looking down its -Z, +Y up, image v growing downward.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional
import math
import numpy as np

from geometry import RigidTransform, as_point
from params import EPS


@dataclass(frozen=True)
class CameraFrame:
    viewer: RigidTransform
    image: np.ndarray
    project: Callable[[np.ndarray], Optional[tuple]]

    @property
    def viewer_position(self) -> np.ndarray:
        return self.viewer.origin


class PinholeCamera:
    def __init__(self, width: int, height: int, hfov_deg: float = 60.0,
                 pose=None):
        self.width = int(width)
        self.height = int(height)
        self.f = (self.width / 2.0) / math.tan(math.radians(hfov_deg) / 2.0)
        self.cx = self.width / 2.0
        self.cy = self.height / 2.0
        # pose: RigidTransform or a 4x4 device-to-world matrix
        if pose is None:
            pose = RigidTransform.identity()
        elif not isinstance(pose, RigidTransform):
            pose = RigidTransform.from_matrix(pose)
        self.pose = pose
        self.view = pose.inverse().matrix   # world -> camera

    def project(self, world_point):
        """World point -> (u, v) pixel, or None if it is at/behind the lens."""
        p = self.view @ np.append(as_point(world_point), 1.0)
        depth = -float(p[2])
        if depth < EPS:
            return None
        u = self.cx + self.f * float(p[0]) / depth
        v = self.cy - self.f * float(p[1]) / depth
        if not (math.isfinite(u) and math.isfinite(v)):
            return None
        return (u, v)

    def unproject(self, u: float, v: float, depth: float) -> np.ndarray:
        """Pixel + depth in front of the lens -> world point."""
        x = (float(u) - self.cx) / self.f * depth
        y = -(float(v) - self.cy) / self.f * depth
        return self.pose.transform_point(as_point((x, y, -depth)))

    def frame(self, image) -> CameraFrame:
        return CameraFrame(viewer=self.pose, image=image, project=self.project)
