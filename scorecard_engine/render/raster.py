"""Pillow rasterization of the scorecard layout.

The compositor needs the scorecard as a bitmap sized to the overlay box in
native pixels. Drawing the layout directly keeps the vector source sharp at
any output size without an SVG engine dependency.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from ..errors import AssetLoadFailure
from .layout import ScorecardLayout, TextElement
from .svg import ScorecardGraphic, layout_from_markup, markup_from_data_uri

_BOLD_FONTS = (
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
)
_REGULAR_FONTS = (
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "Arial.ttf",
    "arial.ttf",
)
_PIL_ANCHORS = {"start": "ls", "middle": "ms", "end": "rs"}

RasterSource = Union[ScorecardGraphic, ScorecardLayout, str]


@lru_cache(maxsize=64)
def _font(size: int, bold: bool):
    for name in _BOLD_FONTS if bold else _REGULAR_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    try:
        return ImageFont.load_default(size=size)
    except TypeError:  # Pillow < 10.1
        return ImageFont.load_default()


def _hex_to_rgba(value: str) -> Tuple[int, int, int, int]:
    s = value.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(ch * 2 for ch in s)
    if len(s) != 6 or any(ch not in "0123456789abcdefABCDEF" for ch in s):
        raise AssetLoadFailure(f"unsupported fill colour: {value!r}")
    return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), 255)


def _as_layout(source: RasterSource) -> ScorecardLayout:
    if isinstance(source, ScorecardGraphic):
        return source.layout
    if isinstance(source, ScorecardLayout):
        return source
    if source.startswith("data:"):
        return layout_from_markup(markup_from_data_uri(source))
    return layout_from_markup(source)


def _draw_text(draw: ImageDraw.ImageDraw, x: float, y: float, element: TextElement, font, fill) -> None:
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((x, y), element.text, font=font, fill=fill, anchor=_PIL_ANCHORS.get(element.anchor, "ls"))
        return
    # bitmap fallback font: no anchor support, position the box by hand
    width = draw.textlength(element.text, font=font)
    if element.anchor == "middle":
        x -= width / 2
    elif element.anchor == "end":
        x -= width
    left, top, right, bottom = font.getbbox(element.text)
    draw.text((x, y - (bottom - top)), element.text, font=font, fill=fill)


def rasterize(
    source: RasterSource,
    width: float,
    height: float,
    *,
    box: Optional[Tuple[int, int, int, int]] = None,
) -> Image.Image:
    """Draw the scorecard into a transparent RGBA image, scaled to fit (meet).

    ``box`` (left, top, right, bottom) in output pixels limits drawing to that
    window; the returned image then has the box's size.
    """

    out_w, out_h = int(round(width)), int(round(height))
    if out_w <= 0 or out_h <= 0:
        raise ValueError("raster size must be positive")
    layout = _as_layout(source)
    if layout.width <= 0 or layout.height <= 0:
        raise AssetLoadFailure("scorecard viewBox has no area")
    fill = _hex_to_rgba(layout.fill)
    left, top, right, bottom = box if box is not None else (0, 0, out_w, out_h)
    if right <= left or bottom <= top:
        raise ValueError("raster box must be non-empty")
    image = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
    scale = min(out_w / layout.width, out_h / layout.height)
    off_x = (out_w - layout.width * scale) / 2 - left
    off_y = (out_h - layout.height * scale) / 2 - top
    draw = ImageDraw.Draw(image)
    for element in layout.elements:
        size = max(1, int(round(element.font_size * scale)))
        x, y = off_x + element.x * scale, off_y + element.y * scale
        # rough extent check; glyphs wholly outside the window are skipped
        reach = size * max(1, len(element.text))
        if x + reach < 0 or x - reach > image.width or y + size < 0 or y - size > image.height:
            continue
        font = _font(size, element.font_weight >= 700)
        _draw_text(draw, x, y, element, font, fill)
    return image


__all__ = ["rasterize"]
