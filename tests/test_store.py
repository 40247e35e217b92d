import threading

import pytest

from globeframe.geometry import build_farm_overlay
from globeframe.store import EntityStore, StoreField

from helpers import make_marker, make_pose


def test_initial_state_is_empty(store):
    snapshot = store.snapshot()
    assert snapshot.markers == ()
    assert snapshot.rectangular_overlays == ()
    assert snapshot.camera_target is None
    assert snapshot.prevent_auto_frame is False


def test_setters_replace_wholesale(store):
    store.set_markers([make_marker(0, 0), make_marker(1, 1)])
    store.set_markers([make_marker(2, 2)])
    assert len(store.markers) == 1
    assert store.markers[0].position.lat == 2

    store.set_rectangular_overlays([build_farm_overlay(0, 0)])
    assert len(store.rectangular_overlays) == 1
    store.clear_rectangular_overlays()
    assert store.rectangular_overlays == ()


def test_snapshot_is_not_affected_by_later_writes(store):
    before = store.snapshot()
    store.set_markers([make_marker(0, 0)])
    assert before.markers == ()
    assert len(store.snapshot().markers) == 1


def test_listeners_receive_changed_fields(store):
    seen = []
    unsubscribe = store.subscribe(lambda snapshot, changed: seen.append(changed))
    store.set_markers([make_marker(0, 0)])
    store.set_prevent_auto_frame(True)
    store.set_prevent_auto_frame(True)
    unsubscribe()
    store.set_prevent_auto_frame(False)
    assert seen == [frozenset({StoreField.MARKERS}), frozenset({StoreField.PREVENT_AUTO_FRAME})]


def test_request_focus_raises_suppression_before_target(store):
    order = []
    store.subscribe(lambda snapshot, changed: order.append((set(changed), snapshot.prevent_auto_frame)))
    store.request_focus(make_pose())
    assert order == [
        ({StoreField.PREVENT_AUTO_FRAME}, True),
        ({StoreField.CAMERA_TARGET}, True),
    ]
    assert store.camera_target is not None


def test_take_camera_target_consumes_once(store):
    pose = make_pose(1, 2)
    store.set_camera_target(pose)
    assert store.take_camera_target() == pose
    assert store.take_camera_target() is None
    assert store.camera_target is None


def test_set_camera_target_overwrites_pending(store):
    store.set_camera_target(make_pose(1, 1))
    store.set_camera_target(make_pose(2, 2))
    assert store.take_camera_target().center.lat == 2


def test_concurrent_consumers_get_target_once():
    store = EntityStore()
    store.set_camera_target(make_pose())
    results = []
    barrier = threading.Barrier(8)

    def consume():
        barrier.wait()
        results.append(store.take_camera_target())

    threads = [threading.Thread(target=consume) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert sum(result is not None for result in results) == 1


def test_nested_writes_reach_every_listener_in_commit_order(store):
    def consume(snapshot, changed):
        if StoreField.CAMERA_TARGET in changed and snapshot.camera_target is not None:
            store.take_camera_target()
            store.set_prevent_auto_frame(False)

    seen = []
    store.subscribe(consume)
    store.subscribe(lambda snapshot, changed: seen.append((set(changed), snapshot)))
    store.request_focus(make_pose())

    assert [changed for changed, _ in seen] == [
        {StoreField.PREVENT_AUTO_FRAME},
        {StoreField.CAMERA_TARGET},
        {StoreField.CAMERA_TARGET},
        {StoreField.PREVENT_AUTO_FRAME},
    ]
    assert seen[1][1].camera_target is not None
    assert seen[-1][1] == store.snapshot()
    assert store.camera_target is None
    assert store.prevent_auto_frame is False


def test_failing_listener_does_not_block_later_notifications(store):
    calls = []

    def flaky(snapshot, changed):
        calls.append(changed)
        if len(calls) == 1:
            raise RuntimeError("listener failed")

    store.subscribe(flaky)
    with pytest.raises(RuntimeError):
        store.set_markers([make_marker(0, 0)])
    store.set_prevent_auto_frame(True)
    assert calls[-1] == frozenset({StoreField.PREVENT_AUTO_FRAME})
