import threading

import pytest

from fade import FadeTask, opacity_at


def test_opacity_ramp():
    assert opacity_at(0.0, 0.3) == 1.0
    assert opacity_at(0.15, 0.3) == pytest.approx(0.5)
    assert opacity_at(1.0, 0.3) == 0.0


def test_fade_runs_to_zero_and_reports_done():
    done = []
    steps = []
    finished = threading.Event()

    def on_done(cid):
        done.append(cid)
        finished.set()

    task = FadeTask(7, duration=0.05, fps=200, on_step=lambda cid, a: steps.append(a), on_done=on_done).start()
    assert task.join(timeout=2.0)
    assert finished.is_set()
    assert done == [7]
    assert steps[-1] == 0.0
    assert not task.running


def test_cancel_skips_done_callback():
    done = []
    task = FadeTask(3, duration=5.0, fps=60, on_done=done.append).start()
    task.cancel()
    assert task.join(timeout=2.0)
    assert task.cancelled
    assert done == []
