import numpy as np
import pytest

from circle_store import CircleStore
from errors import CurveClosed


def test_ids_are_monotonic_and_last_tracks_newest():
    store = CircleStore()
    assert store.last() is None
    a = store.create_new_circle()
    b = store.create_new_circle()
    assert b > a
    assert store.last() == b
    assert len(store) == 2


def test_points_keep_order_and_duplicates():
    store = CircleStore()
    cid = store.create_new_circle()
    for p in [(0, 0, 0), (1, 0, 0), (1, 0, 0)]:
        store.add_point(cid, p)
    assert np.allclose(store.points(cid), [(0, 0, 0), (1, 0, 0), (1, 0, 0)])


def test_snapshot_is_read_only():
    store = CircleStore()
    cid = store.create_new_circle()
    store.add_point(cid, (1, 2, 3))
    snap = store.points(cid)
    with pytest.raises(ValueError):
        snap[0, 0] = 5.0


def test_add_point_after_done_raises():
    store = CircleStore()
    cid = store.create_new_circle()
    store.add_point(cid, (0, 0, 0))
    store.mark_done(cid)
    with pytest.raises(CurveClosed):
        store.add_point(cid, (1, 0, 0))
    assert len(store.points(cid)) == 1


def test_double_mark_done_is_noop_and_notifies_once():
    store = CircleStore()
    seen = []
    store.subscribe(seen.append)
    cid = store.create_new_circle()
    assert store.mark_done(cid) is True
    assert store.mark_done(cid) is False
    assert seen == [cid]
    assert store.is_done(cid)


def test_unknown_id_raises_key_error():
    store = CircleStore()
    with pytest.raises(KeyError):
        store.add_point(42, (0, 0, 0))


def test_curves_are_never_removed():
    store = CircleStore()
    ids = [store.create_new_circle() for _ in range(3)]
    for cid in ids:
        store.mark_done(cid)
    assert all(cid in store for cid in ids)


def test_get_returns_detached_copy():
    store = CircleStore()
    cid = store.create_new_circle()
    store.add_point(cid, (1, 2, 3))
    copy = store.get(cid)
    copy.points.append(np.zeros(3))
    copy.points[0][0] = 9.0
    copy.done = True
    assert np.allclose(store.points(cid), [(1, 2, 3)])
    assert not store.is_done(cid)


def test_failing_listener_does_not_block_the_others():
    store = CircleStore()
    seen = []

    def broken(cid):
        raise RuntimeError("listener blew up")

    store.subscribe(broken)
    store.subscribe(seen.append)
    cid = store.create_new_circle()
    assert store.mark_done(cid) is True
    assert seen == [cid]
    assert store.is_done(cid)
