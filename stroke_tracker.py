# stroke_tracker.py
# Per-frame fingertip input -> gesture curves.
# - Keeps ~0.1s of (position, t) samples for a smoothed speed estimate
# - Pinch starts a curve, release finalizes it and fades its visuals
# - Only one hand draws; the other is left free for UI interaction

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
import logging
import math
import numpy as np

from circle_store import CircleStore
from fade import FadeTask
from geometry import as_point
from params import Params

logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"


def truncated_mean(values, truncation: int = 2) -> float:
    """
    Mean after dropping up to `truncation` of the smallest and largest values.
    Never drops more than (n-1)//2 from each side, so at least one value is kept.
    """
    if len(values) == 0:
        return 0.0
    s = sorted(values)
    k = min((len(s) - 1) // 2, max(0, int(truncation)))
    kept = s[k:len(s) - k]
    return float(sum(kept) / len(kept))


@dataclass
class HandInput:
    thumb_tip: np.ndarray
    index_tip: np.ndarray
    pinch_dist: float = 0.015

    @property
    def brush_tip(self) -> np.ndarray:
        return (as_point(self.thumb_tip) + as_point(self.index_tip)) / 2.0

    @property
    def is_drawing(self) -> bool:
        d = np.linalg.norm(as_point(self.thumb_tip) - as_point(self.index_tip))
        return bool(d < self.pinch_dist)


class StrokeTracker:
    """
    Drives the circle lifecycle from per-tick samples.

    Callbacks (all optional, run on the calling thread except the fade ones):
      on_trace(position, speed)      every accepted drawing sample
      on_finish(curve_id)            after a curve is marked done
      on_fade(curve_id, opacity)     fade ticks (fade thread)
      on_fade_done(curve_id)         fade reached 0 (fade thread)
    """

    def __init__(self, store: CircleStore, params: Params | None = None,
                 on_trace=None, on_finish=None, on_fade=None, on_fade_done=None,
                 is_inside_canvas=None):
        self.store = store
        self.params = params or Params()
        self.on_trace = on_trace
        self.on_finish = on_finish
        self.on_fade = on_fade
        self.on_fade_done = on_fade_done
        self.is_inside_canvas = is_inside_canvas or (lambda p: True)

        self.history = deque()       # (position, t)
        self.current_id = None       # open curve, if any
        self.fade = None             # FadeTask of the last finished curve
        self.last_speed = 0.0

    @property
    def drawing(self) -> bool:
        return self.current_id is not None

    def receive_hand(self, hand: HandInput | None, chirality: str, t_now: float) -> None:
        if chirality != self.params.drawing_hand:
            return
        if hand is None:
            self.receive(None, False, t_now)
            return
        self.receive(hand.brush_tip, hand.is_drawing, t_now)

    def receive(self, position, is_active: bool, t_now: float) -> None:
        t_now = float(t_now)
        if position is not None:
            position = as_point(position)
            if not self.is_inside_canvas(position):
                position = None

        while self.history and (t_now - self.history[0][1] > self.params.speed_window_sec):
            self.history.popleft()

        if position is not None:
            prev = self.history[-1][0] if self.history else None
            self.history.append((position, t_now))
            # a release at the same spot must still finalize the curve
            if is_active and prev is not None and np.array_equal(prev, position):
                return

        speed = self.smoothed_speed()
        self.last_speed = speed

        if position is not None and is_active:
            self._draw(position, speed)
        elif self.current_id is not None:
            self._finish()

    def smoothed_speed(self) -> float:
        speeds = []
        items = list(self.history)
        for (p0, t0), (p1, t1) in zip(items, items[1:]):
            dt = abs(t1 - t0)
            if dt <= 0.0:
                continue
            speeds.append(float(np.linalg.norm(p1 - p0)) / dt)
        v = truncated_mean(speeds, self.params.speed_truncation)
        return v if math.isfinite(v) else 0.0

    # ---------- internals ----------
    def _draw(self, position, speed):
        if self.current_id is None:
            if self.fade is not None and self.fade.running:
                self.fade.cancel()
            self.current_id = self.store.create_new_circle()
            logger.debug("stroke started: circle %d", self.current_id)
        self.store.add_point(self.current_id, position)
        if self.on_trace:
            self.on_trace(position, speed)

    def _finish(self):
        cid = self.current_id
        self.current_id = None
        self.store.mark_done(cid)

        if self.fade is not None:
            self.fade.cancel()
        self.fade = FadeTask(
            cid,
            duration=self.params.fade_seconds,
            fps=self.params.fade_fps,
            on_step=self.on_fade,
            on_done=self.on_fade_done,
        ).start()

        if self.on_finish:
            self.on_finish(cid)
