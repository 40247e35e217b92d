import pytest

from globeframe.padding import Chrome, Edge, PaddingObserver, compute_padding


def test_no_chrome_gives_base_padding():
    padding = compute_padding(1280, 800, {})
    assert padding.as_tuple() == (0.05, 0.05, 0.05, 0.05)


def test_left_panel_reserves_its_width_plus_gutter():
    padding = compute_padding(1000, 800, {"console": Chrome(Edge.LEFT, 300)})
    assert padding.left == pytest.approx(0.32)
    assert padding.right == 0.05


def test_small_chrome_keeps_base():
    padding = compute_padding(1000, 800, {"tray": Chrome(Edge.BOTTOM, 10)})
    assert padding.bottom == pytest.approx(0.05)


def test_side_chrome_ignored_on_mobile():
    padding = compute_padding(600, 900, {"console": Chrome(Edge.LEFT, 300), "tray": Chrome(Edge.BOTTOM, 180)})
    assert padding.left == 0.05
    assert padding.bottom == pytest.approx(0.22)


def test_padding_is_capped():
    padding = compute_padding(1000, 800, {"huge": Chrome(Edge.RIGHT, 950)})
    assert padding.right == pytest.approx(0.45)


def test_observer_notifies_only_on_change():
    observer = PaddingObserver(1000, 800)
    seen = []
    observer.subscribe(seen.append)
    observer.observe("console", "left", 300)
    observer.observe("console", "left", 300)
    observer.resize_viewport(1000, 800)
    observer.unobserve("console")
    observer.unobserve("missing")
    assert [p.left for p in seen] == [pytest.approx(0.32), 0.05]
