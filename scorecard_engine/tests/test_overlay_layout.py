import pytest

from scorecard_engine.compositor.layout import (
    MIN_HEIGHT,
    MIN_WIDTH,
    OverlayLayout,
    PreviewViewport,
)
from scorecard_engine.types import (
    NativeRect,
    Point,
    PreviewRect,
    Size,
    preview_to_native,
)


def test_defaults():
    layout = OverlayLayout()
    assert layout.rect == PreviewRect(50, 50, 400, 175)
    assert layout.brightness == 100
    assert layout.is_neutral


def test_initial_size_follows_base_width():
    wide = OverlayLayout.for_base(1600)
    assert wide.size == Size(600, 262.5)
    narrow = OverlayLayout.for_base(500)
    assert narrow.size.width == pytest.approx(400)
    assert narrow.size.height == pytest.approx(175)


def test_grow_keeps_aspect_step():
    grown = OverlayLayout().grown()
    assert grown.size.width == 430
    assert grown.size.height == pytest.approx(188.125)
    assert grown.position == Point(50, 50)


def test_shrink_floors_each_axis_independently():
    layout = OverlayLayout(size=Size(110, 48)).shrunk()
    assert layout.size == Size(MIN_WIDTH, MIN_HEIGHT)
    for _ in range(20):
        layout = layout.shrunk()
    assert layout.size.width >= MIN_WIDTH
    assert layout.size.height >= MIN_HEIGHT


def test_move_clamps_only_at_origin():
    layout = OverlayLayout()
    assert layout.moved_to(-20, 30).position == Point(0, 30)
    assert layout.moved_to(5000, 4000).position == Point(5000, 4000)


def test_brightness_is_clamped():
    layout = OverlayLayout()
    assert layout.with_brightness(40).brightness == 50
    assert layout.with_brightness(200).brightness == 150
    assert layout.with_brightness(120).brightness == 120
    assert not layout.with_brightness(120).is_neutral


def test_hit_test_includes_edges():
    layout = OverlayLayout()
    assert layout.contains(Point(50, 50))
    assert layout.contains(Point(450, 225))
    assert not layout.contains(Point(49.9, 100))
    assert not layout.contains(Point(300, 226))


def test_viewport_maps_client_to_local():
    viewport = PreviewViewport(left=10, top=20, width=800, height=400)
    assert viewport.to_local(70, 80) == Point(60, 60)
    assert viewport.size == Size(800, 400)


def test_preview_rect_scales_to_native_pixels():
    native = preview_to_native(OverlayLayout().rect, Size(800, 400), Size(1600, 800))
    assert native == NativeRect(100, 100, 800, 350)
    assert native.rounded() == (100, 100, 800, 350)


def test_preview_to_native_requires_container():
    with pytest.raises(ValueError):
        preview_to_native(PreviewRect(0, 0, 1, 1), Size(0, 400), Size(10, 10))
