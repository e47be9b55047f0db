import threading
from types import SimpleNamespace

import numpy as np
import pytest

from circle_store import CircleStore
from errors import ColinearPoints, ProjectionFailure
from params import Params
from pipeline import PipelineWorker, ResultGate, process_curve

from conftest import circle_points


def test_process_curve_crops_the_circled_region(camera, center_patch_image):
    raw = circle_points((0.0, 0.0, -1.0), 0.1, n=64, z_wobble=0.002)
    frame = camera.frame(center_patch_image)
    result = process_curve(1, raw, frame)

    panel = result.image_panel
    assert np.allclose(panel.transform.z_axis, (0, 0, 1), atol=0.05)
    assert panel.width == pytest.approx(0.2, abs=1e-3)
    assert panel.height == pytest.approx(0.2, abs=1e-3)

    img = result.image
    assert min(img.width, img.height) == 1080
    cy, cx = img.height // 2, img.width // 2
    assert img.pixels[cy, cx].tolist() == [255, 255, 255]
    assert img.pixels[5, 5].tolist() == [0, 0, 0]

    comp = result.companion_panel
    assert comp.size == pytest.approx((0.3, 0.5))
    assert comp.transform.origin[0] > panel.transform.origin[0]
    assert np.dot(comp.transform.z_axis, frame.viewer_position - comp.transform.origin) > 0


def test_process_curve_colinear_stroke_fails(camera, center_patch_image):
    raw = [(x, 0.0, -1.0) for x in np.linspace(-0.1, 0.1, 20)]
    with pytest.raises(ColinearPoints):
        process_curve(1, raw, camera.frame(center_patch_image))


def test_process_curve_behind_camera_fails(camera, center_patch_image):
    raw = circle_points((0.0, 0.0, 1.0), 0.1)
    with pytest.raises(ProjectionFailure):
        process_curve(1, raw, camera.frame(center_patch_image))


def test_result_gate_drops_older_ids():
    gate = ResultGate()
    assert gate.offer(SimpleNamespace(curve_id=2))
    assert not gate.offer(SimpleNamespace(curve_id=1))
    assert not gate.offer(SimpleNamespace(curve_id=2))
    assert gate.offer(SimpleNamespace(curve_id=3))


def test_worker_swallows_failures_and_keeps_running(camera, center_patch_image):
    worker = PipelineWorker(Params(), threads=1).start()
    try:
        frame = camera.frame(center_patch_image)
        bad = [(x, 0.0, -1.0) for x in np.linspace(-0.1, 0.1, 20)]
        worker.submit(1, bad, frame)
        worker.submit(2, circle_points((0.0, 0.0, -1.0), 0.1), frame)
        result = worker.pop_result(timeout=10.0)
        assert result is not None
        assert result.curve_id == 2
        assert worker.pop_result() is None
    finally:
        worker.stop()


def test_worker_discards_stale_results():
    release_first = threading.Event()

    def fake_process(curve_id, points, frame, params):
        if curve_id == 1:
            release_first.wait(5.0)
        return SimpleNamespace(curve_id=curve_id)

    worker = PipelineWorker(Params(), threads=2, process=fake_process).start()
    try:
        worker.submit(1, [(0, 0, 0)], object())
        worker.submit(2, [(0, 0, 0)], object())
        newest = worker.pop_result(timeout=5.0)
        assert newest.curve_id == 2

        release_first.set()
        worker.wait_idle()
        assert worker.pop_result() is None
    finally:
        worker.stop()


def test_worker_skips_missing_frame():
    worker = PipelineWorker(Params(), threads=1)
    assert worker.submit(1, [(0, 0, 0)], None) is False


def test_watch_runs_pipeline_once_per_circle():
    calls = []

    def fake_process(curve_id, points, frame, params):
        calls.append((curve_id, len(points)))
        return SimpleNamespace(curve_id=curve_id)

    store = CircleStore()
    worker = PipelineWorker(Params(), threads=1, process=fake_process).start()
    try:
        worker.watch(store, lambda: object())
        cid = store.create_new_circle()
        for p in [(0, 0, 0), (1, 0, 0), (1, 1, 0)]:
            store.add_point(cid, p)
        store.mark_done(cid)
        store.mark_done(cid)
        worker.wait_idle()
        assert calls == [(cid, 3)]
    finally:
        worker.stop()


def test_result_gate_drops_result_older_than_newest_submission():
    gate = ResultGate()
    gate.note_submitted(1)
    gate.note_submitted(2)
    assert not gate.offer(SimpleNamespace(curve_id=1))
    assert gate.offer(SimpleNamespace(curve_id=2))


def test_worker_drops_older_result_when_newest_circle_failed():
    release_first = threading.Event()

    def fake_process(curve_id, points, frame, params):
        if curve_id == 1:
            release_first.wait(5.0)
            return SimpleNamespace(curve_id=curve_id)
        raise ColinearPoints("flat stroke")

    worker = PipelineWorker(Params(), threads=2, process=fake_process).start()
    try:
        worker.submit(1, [(0, 0, 0)], object())
        worker.submit(2, [(0, 0, 0)], object())
        release_first.set()
        worker.wait_idle()
        assert worker.pop_result() is None
    finally:
        worker.stop()


def test_worker_survives_failing_result_callback():
    seen = []

    def on_result(result):
        seen.append(result.curve_id)
        if result.curve_id == 1:
            raise RuntimeError("display went away")

    def fake_process(curve_id, points, frame, params):
        return SimpleNamespace(curve_id=curve_id)

    worker = PipelineWorker(Params(), threads=1, on_result=on_result, process=fake_process).start()
    try:
        worker.submit(1, [(0, 0, 0)], object())
        worker.wait_idle()
        worker.submit(2, [(0, 0, 0)], object())
        worker.wait_idle()
        assert seen == [1, 2]
        assert all(t.is_alive() for t in worker._threads)
        assert worker.pop_result().curve_id == 1
        assert worker.pop_result().curve_id == 2
    finally:
        worker.stop()
