# geometry.py
# Rigid transforms and panel placements shared by the plane fitter, the
# projector, the cropper and the panel layout.
#
# Convention: rotation columns are the local X, Y, Z axes expressed in world
# space; origin is the local (0,0,0) in world space.

from __future__ import annotations
from dataclasses import dataclass
import math
import numpy as np

from params import EPS


def as_point(p) -> np.ndarray:
    v = np.asarray(p, dtype=np.float64).reshape(3)
    return v


def as_points(points) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return arr.reshape(0, 3)
    return arr.reshape(-1, 3)


def length(v) -> float:
    return float(math.sqrt(float(np.dot(v, v))))


def normalize(v, what: str = "vector") -> np.ndarray:
    n = length(v)
    if n < EPS:
        raise ValueError(f"cannot normalize a zero-length {what}")
    return np.asarray(v, dtype=np.float64) / n


@dataclass(frozen=True)
class RigidTransform:
    origin: np.ndarray     # shape (3,)
    rotation: np.ndarray   # shape (3, 3), columns = local axes

    def __post_init__(self):
        origin = as_point(self.origin).copy()
        rotation = np.asarray(self.rotation, dtype=np.float64).reshape(3, 3).copy()
        origin.setflags(write=False)
        rotation.setflags(write=False)
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "rotation", rotation)

    # ---------- construction ----------
    @classmethod
    def identity(cls) -> RigidTransform:
        return cls(np.zeros(3), np.eye(3))

    @classmethod
    def from_axes(cls, origin, x_axis, y_axis, z_axis) -> RigidTransform:
        rot = np.column_stack([as_point(x_axis), as_point(y_axis), as_point(z_axis)])
        return cls(origin, rot)

    @classmethod
    def from_matrix(cls, m) -> RigidTransform:
        m = np.asarray(m, dtype=np.float64).reshape(4, 4)
        return cls(m[:3, 3], m[:3, :3])

    @classmethod
    def look_at(cls, target, origin, up=(0.0, 1.0, 0.0)) -> RigidTransform:
        """
        Transform at `origin` whose +Z points at `target` and whose +Y is as
        close to `up` as possible.

        Falls back to other up axes when forward is parallel to `up`, and to
        world +Z when target and origin coincide.
        """
        origin = as_point(origin)
        fwd = as_point(target) - origin
        if length(fwd) < EPS:
            z = np.array([0.0, 0.0, 1.0])
        else:
            z = fwd / length(fwd)

        x = None
        for cand in (as_point(up), np.array([0.0, 0.0, 1.0]), np.array([1.0, 0.0, 0.0])):
            xu = np.cross(cand, z)
            if length(xu) >= EPS:
                x = xu / length(xu)
                break
        y = np.cross(z, x)
        return cls.from_axes(origin, x, y, z)

    # ---------- accessors ----------
    @property
    def x_axis(self) -> np.ndarray:
        return self.rotation[:, 0]

    @property
    def y_axis(self) -> np.ndarray:
        return self.rotation[:, 1]

    @property
    def z_axis(self) -> np.ndarray:
        return self.rotation[:, 2]

    @property
    def matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rotation
        m[:3, 3] = self.origin
        return m

    # ---------- mapping ----------
    def inverse(self) -> RigidTransform:
        # Rigid: R^-1 == R^T
        rt = self.rotation.T
        return RigidTransform(-rt @ self.origin, rt)

    def transform_point(self, p) -> np.ndarray:
        """Local -> world."""
        return self.origin + self.rotation @ as_point(p)

    def transform_points(self, points) -> np.ndarray:
        pts = as_points(points)
        return pts @ self.rotation.T + self.origin

    def inverse_transform_point(self, p) -> np.ndarray:
        """World -> local."""
        return self.rotation.T @ (as_point(p) - self.origin)

    def inverse_transform_points(self, points) -> np.ndarray:
        pts = as_points(points)
        return (pts - self.origin) @ self.rotation

    def is_rigid(self, tol: float = 1e-5) -> bool:
        r = self.rotation
        return bool(np.allclose(r.T @ r, np.eye(3), atol=tol) and abs(np.linalg.det(r) - 1.0) < tol)


@dataclass(frozen=True)
class PanelPlacement:
    transform: RigidTransform
    width: float    # meters
    height: float   # meters

    @property
    def size(self) -> tuple[float, float]:
        return (float(self.width), float(self.height))
