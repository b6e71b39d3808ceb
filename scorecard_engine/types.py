from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class PreviewRect:
    """Rectangle in on-screen preview pixels (drag and resize math)."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )


@dataclass(frozen=True)
class NativeRect:
    """Rectangle in the base photo's native pixel space (drawing math)."""

    x: float
    y: float
    width: float
    height: float

    def rounded(self) -> Tuple[int, int, int, int]:
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.width)),
            int(round(self.height)),
        )


def preview_to_native(rect: PreviewRect, container: Size, native: Size) -> NativeRect:
    """Map a preview-space rectangle linearly into native pixel space."""

    if container.is_empty():
        raise ValueError("preview container must have a positive size")
    scale_x = native.width / container.width
    scale_y = native.height / container.height
    return NativeRect(
        x=rect.x * scale_x,
        y=rect.y * scale_y,
        width=rect.width * scale_x,
        height=rect.height * scale_y,
    )


__all__ = ["Point", "Size", "PreviewRect", "NativeRect", "preview_to_native"]
