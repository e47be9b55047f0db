# fade.py
# Cancelable fade-out of a finished stroke's visuals.
# Opacity goes 1 -> 0 over `duration` seconds, ticking at `fps`.

from __future__ import annotations
import logging
import threading
import time

logger = logging.getLogger(__name__)


def opacity_at(elapsed: float, duration: float) -> float:
    if duration <= 0.0:
        return 0.0
    progress = elapsed / duration
    return max(0.0, min(1.0, 1.0 - progress))


class FadeTask:
    """
    Handle for one running fade, keyed by the curve id it fades.

    on_step(curve_id, opacity) runs on every tick; on_done(curve_id) runs
    once when the fade reaches 0. Neither runs after cancel().
    """

    def __init__(self, curve_id: int, duration: float = 0.3, fps: float = 60.0,
                 on_step=None, on_done=None):
        self.curve_id = int(curve_id)
        self.duration = float(duration)
        self.tick = 1.0 / max(1.0, float(fps))
        self.on_step = on_step
        self.on_done = on_done

        self._cancel = threading.Event()
        self._finished = threading.Event()
        self._thread = None
        self.opacity = 1.0

    def start(self) -> FadeTask:
        if self._thread and self._thread.is_alive():
            return self

        def worker():
            start = time.monotonic()
            while not self._cancel.is_set():
                self.opacity = opacity_at(time.monotonic() - start, self.duration)
                if self.on_step:
                    self.on_step(self.curve_id, self.opacity)
                if self.opacity <= 0.0:
                    break
                self._cancel.wait(self.tick)

            if not self._cancel.is_set():
                logger.debug("fade done for circle %d", self.curve_id)
                if self.on_done:
                    self.on_done(self.curve_id)
            self._finished.set()

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()
        return self

    def cancel(self) -> None:
        # advisory: a tick already in flight may still report once
        if not self._cancel.is_set():
            logger.debug("fade canceled for circle %d", self.curve_id)
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._finished.is_set()

    def join(self, timeout=None) -> bool:
        return self._finished.wait(timeout)
