# pipeline.py
# Finalized circle -> cropped image + two panel placements.
#
# process_curve() is pure: it only reads a point snapshot and a CameraFrame.
# PipelineWorker runs it on background threads so the input loop never waits,
# and only lets through the result of the newest circle submitted so far.

from __future__ import annotations
from dataclasses import dataclass
import logging
import queue
import threading

from camera import CameraFrame
from curve_resample import resample
from errors import CircleCropError
from geometry import PanelPlacement, as_points
from panel_layout import panel_corners, place_companion
from params import Params
from perspective_crop import PlanarImage, crop_panel
from plane_fit import fit_curve
from plane_projection import bounding_box_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CircleResult:
    curve_id: int
    image: PlanarImage
    image_panel: PanelPlacement
    companion_panel: PanelPlacement


def process_curve(curve_id: int, raw_points, frame: CameraFrame, params: Params | None = None) -> CircleResult:
    """Run resample -> fit plane -> size -> crop -> place. Raises CircleCropError subclasses."""
    params = params or Params()
    raw = as_points(raw_points)

    # uniform spacing so each third of the curve weighs the same in the fit
    resampled = resample(raw, params.resample_count)
    plane = fit_curve(resampled, frame.viewer)

    width, height = bounding_box_size(raw, plane)
    image_panel = PanelPlacement(plane, width, height)
    logger.info("circle %d: panel %.3f x %.3f m", curve_id, width, height)

    image = crop_panel(
        panel_corners(image_panel),
        frame.project,
        frame.image,
        (width, height),
        params.crop_short_side,
    )
    companion = place_companion(
        image_panel,
        frame.viewer_position,
        size=params.companion_size,
        spacing=params.companion_spacing,
        up=params.world_up,
    )
    return CircleResult(curve_id, image, image_panel, companion)


class ResultGate:
    """
    Accepts a result only if no newer curve has been submitted and it is newer
    than the last accepted one. A newer curve that failed still counts.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.latest_id = 0
        self.newest_submitted = 0

    def note_submitted(self, curve_id: int) -> None:
        with self._lock:
            if curve_id > self.newest_submitted:
                self.newest_submitted = curve_id

    def offer(self, result: CircleResult) -> bool:
        with self._lock:
            if result.curve_id < self.newest_submitted or result.curve_id <= self.latest_id:
                logger.debug("dropping stale result for circle %d (newest %d, showing %d)",
                             result.curve_id, self.newest_submitted, self.latest_id)
                return False
            self.latest_id = result.curve_id
            return True


class PipelineWorker:
    """
    Background runner for process_curve().

    submit() never blocks; results come back through pop_result() (and the
    optional on_result callback, called on the worker thread). A failing
    circle is logged and produces nothing; the worker keeps going.
    """

    def __init__(self, params: Params | None = None, threads: int | None = None, on_result=None,
                 process=process_curve):
        self.params = params or Params()
        self.n_threads = int(threads or self.params.worker_threads)
        self.on_result = on_result
        self.process = process
        self.gate = ResultGate()

        self._jobs = queue.Queue()
        self._results = queue.Queue()
        self._stop = threading.Event()
        self._threads = []

    def start(self):
        if any(t.is_alive() for t in self._threads):
            return self
        self._stop.clear()

        def worker():
            while not self._stop.is_set():
                job = self._jobs.get()
                try:
                    if job is None:
                        return
                    self._run(*job)
                finally:
                    self._jobs.task_done()

        self._threads = [threading.Thread(target=worker, daemon=True) for _ in range(self.n_threads)]
        for t in self._threads:
            t.start()
        logger.info("pipeline worker started (%d threads)", self.n_threads)
        return self

    def stop(self, timeout: float = 1.0):
        self._stop.set()
        for _ in self._threads:
            self._jobs.put(None)
        for t in self._threads:
            t.join(timeout)
        self._threads = []

    def submit(self, curve_id: int, raw_points, frame: CameraFrame | None) -> bool:
        if frame is None:
            logger.warning("circle %d: camera frame not ready; skipped", curve_id)
            return False
        curve_id = int(curve_id)
        self.gate.note_submitted(curve_id)
        self._jobs.put((curve_id, as_points(raw_points).copy(), frame))
        return True

    def watch(self, store, frame_source):
        """Submit every curve `store` finalizes, with the frame current at that moment."""
        store.subscribe(lambda cid: self.submit(cid, store.points(cid), frame_source()))

    def pop_result(self, timeout: float | None = None):
        try:
            if timeout is None:
                return self._results.get_nowait()
            return self._results.get(timeout=timeout)
        except queue.Empty:
            return None

    def wait_idle(self):
        self._jobs.join()

    # -------- internals --------

    def _run(self, curve_id, points, frame):
        try:
            result = self.process(curve_id, points, frame, self.params)
        except CircleCropError as e:
            logger.warning("circle %d: no visuals (%s: %s)", curve_id, type(e).__name__, e)
            return
        except Exception:
            logger.exception("circle %d: pipeline crashed", curve_id)
            return

        if not self.gate.offer(result):
            return
        self._results.put(result)
        if self.on_result:
            try:
                self.on_result(result)
            except Exception:
                logger.exception("circle %d: on_result callback failed", curve_id)
