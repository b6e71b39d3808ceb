"""Overlay placement in preview pixel space."""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..types import Point, PreviewRect, Size

DEFAULT_POSITION = Point(50, 50)
DEFAULT_SIZE = Size(400, 175)
MIN_WIDTH = 100
MIN_HEIGHT = 44
SIZE_STEP = 30
OVERLAY_ASPECT = 350 / 800
INITIAL_MAX_WIDTH = 600
INITIAL_WIDTH_RATIO = 0.8

BRIGHTNESS_MIN = 50
BRIGHTNESS_MAX = 150
BRIGHTNESS_NEUTRAL = 100


@dataclass(frozen=True)
class PreviewViewport:
    """Where the preview container sits in client coordinates, and its size."""

    left: float
    top: float
    width: float
    height: float

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def to_local(self, client_x: float, client_y: float) -> Point:
        return Point(client_x - self.left, client_y - self.top)


@dataclass(frozen=True)
class OverlayLayout:
    position: Point = DEFAULT_POSITION
    size: Size = DEFAULT_SIZE
    brightness: int = BRIGHTNESS_NEUTRAL

    @classmethod
    def for_base(cls, base_width: float) -> "OverlayLayout":
        width = min(INITIAL_MAX_WIDTH, base_width * INITIAL_WIDTH_RATIO)
        return cls(size=Size(width, width * OVERLAY_ASPECT))

    @property
    def rect(self) -> PreviewRect:
        return PreviewRect(self.position.x, self.position.y, self.size.width, self.size.height)

    def contains(self, point: Point) -> bool:
        return self.rect.contains(point)

    def moved_to(self, x: float, y: float) -> "OverlayLayout":
        return replace(self, position=Point(max(0.0, x), max(0.0, y)))

    def resized(self, delta: float) -> "OverlayLayout":
        return replace(
            self,
            size=Size(
                max(MIN_WIDTH, self.size.width + delta),
                max(MIN_HEIGHT, self.size.height + delta * OVERLAY_ASPECT),
            ),
        )

    def grown(self) -> "OverlayLayout":
        return self.resized(SIZE_STEP)

    def shrunk(self) -> "OverlayLayout":
        return self.resized(-SIZE_STEP)

    def with_brightness(self, value: int) -> "OverlayLayout":
        return replace(self, brightness=int(min(BRIGHTNESS_MAX, max(BRIGHTNESS_MIN, value))))

    @property
    def is_neutral(self) -> bool:
        return self.brightness == BRIGHTNESS_NEUTRAL


__all__ = [
    "MIN_WIDTH",
    "MIN_HEIGHT",
    "SIZE_STEP",
    "OVERLAY_ASPECT",
    "BRIGHTNESS_MIN",
    "BRIGHTNESS_MAX",
    "BRIGHTNESS_NEUTRAL",
    "PreviewViewport",
    "OverlayLayout",
]
