# circle_store.py
# Id-keyed registry of gesture curves ("circles").
#
# - create_new_circle() hands out monotonically increasing ids, starting at 1
# - add_point() only appends to an open curve (CurveClosed otherwise)
# - mark_done() finalizes once; repeated calls are a logged no-op and never
#   notify on_done listeners a second time
# - curves are never removed; readers get read-only snapshots

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import numpy as np

from errors import CurveClosed
from geometry import as_point

logger = logging.getLogger(__name__)


@dataclass
class GestureCurve:
    id: int
    points: list = field(default_factory=list)   # list of (3,) float arrays, append-only
    done: bool = False

    def snapshot(self) -> np.ndarray:
        arr = np.array(self.points, dtype=np.float64).reshape(-1, 3)
        arr.setflags(write=False)
        return arr


class CircleStore:
    def __init__(self):
        self._curves: dict[int, GestureCurve] = {}
        self._next_id = 1
        self._last_id = None
        self._listeners = []

    def __len__(self):
        return len(self._curves)

    def __contains__(self, curve_id):
        return curve_id in self._curves

    def subscribe(self, callback) -> None:
        """callback(curve_id) runs once, right after a curve is finalized."""
        self._listeners.append(callback)

    def create_new_circle(self) -> int:
        cid = self._next_id
        self._next_id += 1
        self._curves[cid] = GestureCurve(id=cid)
        self._last_id = cid
        logger.debug("circle %d created", cid)
        return cid

    def add_point(self, curve_id: int, point) -> None:
        curve = self._curves[curve_id]
        if curve.done:
            raise CurveClosed(f"circle {curve_id} is already done")
        curve.points.append(as_point(point).copy())

    def mark_done(self, curve_id: int) -> bool:
        """
        Finalize a curve. Returns True the first time, False (and does nothing
        else) on every later call for the same id.
        """
        curve = self._curves[curve_id]
        if curve.done:
            logger.warning("mark_done called twice for circle %d; ignored", curve_id)
            return False
        curve.done = True
        logger.info("circle %d done (%d points)", curve_id, len(curve.points))
        for cb in list(self._listeners):
            try:
                cb(curve_id)
            except Exception:
                logger.exception("on_done listener failed for circle %d", curve_id)
        return True

    def last(self):
        return self._last_id

    def get(self, curve_id: int) -> GestureCurve:
        """Detached copy; changing it never touches the stored curve."""
        curve = self._curves[curve_id]
        return GestureCurve(curve.id, [p.copy() for p in curve.points], curve.done)

    def is_done(self, curve_id: int) -> bool:
        return self._curves[curve_id].done

    def points(self, curve_id: int) -> np.ndarray:
        return self._curves[curve_id].snapshot()
