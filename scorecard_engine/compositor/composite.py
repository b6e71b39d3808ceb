"""Flattening a base photo, a brightness pass and an optional overlay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from ..errors import AssetLoadFailure, PipelineError
from ..io.images import ImageSource, encode_image, is_svg_source, load_image
from ..render.layout import ScorecardLayout
from ..render.raster import rasterize
from ..render.svg import ScorecardGraphic
from ..types import NativeRect, PreviewRect, Size, preview_to_native
from .layout import BRIGHTNESS_NEUTRAL

OverlaySource = Union[ScorecardGraphic, ScorecardLayout, ImageSource]

COMPOSITE_FILENAME = "composite-image.png"


@dataclass(frozen=True)
class CompositeImage:
    data: bytes
    width: int
    height: int
    media_type: str = "image/png"
    filename: str = COMPOSITE_FILENAME


def apply_brightness(image: Image.Image, brightness: int) -> Image.Image:
    """Scale R, G and B by ``brightness / 100``; alpha is left alone.

    The neutral value returns ``image`` itself.
    """

    if brightness == BRIGHTNESS_NEUTRAL:
        return image
    pixels = np.array(image.convert("RGBA"), dtype=np.float32)
    factor = brightness / 100.0
    # clamp then round half to even, like a clamped 8-bit canvas buffer
    pixels[..., :3] = np.rint(np.minimum(255.0, pixels[..., :3] * factor))
    return Image.fromarray(pixels.astype(np.uint8))


Box = Tuple[int, int, int, int]


def visible_box(rect: NativeRect, canvas: Size) -> Optional[Box]:
    """Intersect the rounded ``rect`` with the canvas; ``None`` when nothing shows."""

    x, y, width, height = rect.rounded()
    if width <= 0 or height <= 0:
        return None
    left, top = max(0, x), max(0, y)
    right = min(int(canvas.width), x + width)
    bottom = min(int(canvas.height), y + height)
    if right <= left or bottom <= top:
        return None
    return (left, top, right, bottom)


def _scaled_part(overlay: Image.Image, rect: NativeRect, box: Box) -> Image.Image:
    # the slice of ``overlay`` (stretched over ``rect``) that lands inside ``box``
    x, y, width, height = rect.rounded()
    left, top, right, bottom = box
    overlay = overlay.convert("RGBA")
    src_w, src_h = overlay.size
    if (src_w, src_h) == (width, height):
        return overlay.crop((left - x, top - y, right - x, bottom - y))
    source_box = (
        (left - x) * src_w / width,
        (top - y) * src_h / height,
        (right - x) * src_w / width,
        (bottom - y) * src_h / height,
    )
    return overlay.resize((right - left, bottom - top), Image.Resampling.LANCZOS, box=source_box)


def _paste(canvas: Image.Image, part: Image.Image, box: Box) -> Image.Image:
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(part, box[:2])
    return Image.alpha_composite(canvas, layer)


def draw_overlay(base: Image.Image, overlay: Image.Image, rect: NativeRect) -> Image.Image:
    """Alpha-composite ``overlay`` stretched into ``rect``; off-canvas parts are clipped."""

    canvas = base.convert("RGBA")
    box = visible_box(rect, Size(*canvas.size))
    if box is None:
        return canvas
    return _paste(canvas, _scaled_part(overlay, rect, box), box)


async def load_overlay(
    source: OverlaySource, rect: NativeRect, canvas: Size, *, timeout: Optional[float] = None
) -> Optional[Tuple[Image.Image, Box]]:
    """Produce only the on-canvas part of the overlay, with its canvas box.

    Vector scorecards are drawn at the target size, or at the canvas size when
    the target is larger; rasters are decoded and resampled. Returns ``None``
    when the overlay lies entirely off the canvas.
    """

    if isinstance(source, (ScorecardGraphic, ScorecardLayout)) or is_svg_source(source):
        _, _, width, height = rect.rounded()
        if width <= 0 or height <= 0:
            raise AssetLoadFailure("overlay box collapsed to zero pixels")
        box = visible_box(rect, canvas)
        if box is None:
            return None
        limit = max(int(canvas.width), int(canvas.height))
        if max(width, height) <= limit:
            return rasterize(source, width, height, box=box), box  # type: ignore[arg-type]
        factor = limit / max(width, height)
        drawn = rasterize(source, max(1, width * factor), max(1, height * factor))  # type: ignore[arg-type]
        return _scaled_part(drawn, rect, box), box
    image = await load_image(source, timeout=timeout)
    box = visible_box(rect, canvas)
    if box is None:
        return None
    return _scaled_part(image, rect, box), box


async def composite_photo(
    base_source: ImageSource,
    *,
    brightness: int = BRIGHTNESS_NEUTRAL,
    overlay: Optional[OverlaySource] = None,
    overlay_rect: Optional[PreviewRect] = None,
    container: Optional[Size] = None,
    timeout: Optional[float] = None,
) -> CompositeImage:
    """Produce one flattened PNG at the base photo's native resolution.

    ``overlay_rect`` and ``container`` are preview-space values; the mapping
    into native pixels happens here and nowhere else.
    """

    base = await load_image(base_source, timeout=timeout)
    native = Size(*base.size)
    canvas = apply_brightness(base, brightness)

    if overlay is not None:
        if overlay_rect is None:
            raise ValueError("overlay_rect is required when an overlay is given")
        container = container or native
        if container.is_empty():
            raise PipelineError(f"preview container has no area: {container}")
        native_rect = preview_to_native(overlay_rect, container, native)
        loaded = await load_overlay(overlay, native_rect, native, timeout=timeout)
        if loaded is not None:
            part, box = loaded
            canvas = _paste(canvas.convert("RGBA"), part, box)

    data = await encode_image(canvas, "PNG")
    return CompositeImage(data=data, width=int(native.width), height=int(native.height))


__all__ = [
    "OverlaySource",
    "CompositeImage",
    "apply_brightness",
    "visible_box",
    "draw_overlay",
    "load_overlay",
    "composite_photo",
]
