"""SVG serialization of the scorecard layout and its data-URI embedding."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from html import escape
from typing import Iterable, List, Optional, Sequence, Union
from urllib.parse import quote, unquote

from ..errors import AssetLoadFailure
from ..grid import ScoreGrid
from .layout import (
    FONT_FAMILY,
    RenderOptions,
    ScorecardLayout,
    TextElement,
    build_layout,
)

SVG_NS = "http://www.w3.org/2000/svg"
DATA_URI_PREFIX = "data:image/svg+xml;charset=utf-8,"
# encodeURIComponent leaves these unescaped
_URI_SAFE = "-_.!~*'()"
_HEX_FILL = re.compile(r"#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


@dataclass(frozen=True)
class ScorecardGraphic:
    markup: str
    data_uri: str
    layout: ScorecardLayout = field(compare=False, repr=False)


def _num(value: float) -> str:
    return format(float(value), "g")


def _text_markup(element: TextElement, fill: str) -> str:
    anchor = f' text-anchor="{element.anchor}"' if element.anchor != "start" else ""
    return (
        f'<text x="{_num(element.x)}" y="{_num(element.y)}" font-family="{FONT_FAMILY}" '
        f'font-size="{element.font_size}" font-weight="{element.font_weight}" '
        f'fill="{fill}"{anchor}>{escape(element.text)}</text>'
    )


def layout_to_markup(layout: ScorecardLayout) -> str:
    parts: List[str] = [
        f'<svg viewBox="0 0 {_num(layout.width)} {_num(layout.height)}" '
        f'xmlns="{SVG_NS}" preserveAspectRatio="xMidYMid meet">'
    ]
    parts.extend(_text_markup(element, layout.fill) for element in layout.elements)
    parts.append("</svg>")
    return "\n".join(parts)


def markup_to_data_uri(markup: str) -> str:
    return DATA_URI_PREFIX + quote(markup, safe=_URI_SAFE)


def markup_from_data_uri(data_uri: str) -> str:
    if not data_uri.startswith("data:image/svg+xml"):
        raise ValueError("not an SVG data URI")
    _, _, payload = data_uri.partition(",")
    return unquote(payload)


def _coerce_grid(scores: Union[ScoreGrid, Sequence[int]]) -> ScoreGrid:
    if isinstance(scores, ScoreGrid):
        return scores
    return ScoreGrid.from_scores(scores)


def render_scorecard(
    scores: Union[ScoreGrid, Sequence[int]], options: Optional[RenderOptions] = None
) -> ScorecardGraphic:
    """Render 18 scores to a scalable SVG graphic. Pure and deterministic."""

    layout = build_layout(_coerce_grid(scores), options or RenderOptions())
    markup = layout_to_markup(layout)
    return ScorecardGraphic(markup=markup, data_uri=markup_to_data_uri(markup), layout=layout)


def maybe_render(
    scores: Union[ScoreGrid, Sequence[int]], options: Optional[RenderOptions] = None
) -> Optional[ScorecardGraphic]:
    """Return the graphic, or ``None`` while no hole has a score yet."""

    grid = _coerce_grid(scores)
    if not grid.has_scores:
        return None
    return render_scorecard(grid, options)


def _strip_ns(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _elements_from_root(root: ET.Element) -> Iterable[TextElement]:
    for child in root:
        tag = _strip_ns(child.tag)
        if tag != "text":
            raise AssetLoadFailure(f"unsupported svg element: {tag}")
        yield TextElement(
            x=float(child.get("x", "0")),
            y=float(child.get("y", "0")),
            text=child.text or "",
            font_size=int(float(child.get("font-size", "16"))),
            font_weight=int(float(child.get("font-weight", "400"))),
            anchor=child.get("text-anchor", "start"),
        )


def layout_from_markup(markup: str) -> ScorecardLayout:
    """Re-derive a layout from scorecard markup produced by this module."""

    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise AssetLoadFailure(f"invalid svg markup: {exc}") from exc
    if _strip_ns(root.tag) != "svg":
        raise AssetLoadFailure("markup root is not <svg>")
    try:
        _x, _y, width, height = (float(v) for v in root.get("viewBox", "").split())
    except ValueError as exc:
        raise AssetLoadFailure("svg viewBox missing or malformed") from exc
    if width <= 0 or height <= 0:
        raise AssetLoadFailure("svg viewBox has no area")

    fills = {child.get("fill") or "#000000" for child in root}
    for value in fills:
        if not _HEX_FILL.fullmatch(value.strip()):
            raise AssetLoadFailure(f"unsupported fill colour: {value!r}")
    fill = fills.pop() if len(fills) == 1 else "#000000"
    try:
        elements = tuple(_elements_from_root(root))
    except ValueError as exc:
        raise AssetLoadFailure(f"malformed svg text element: {exc}") from exc
    return ScorecardLayout(width=width, height=height, fill=fill, elements=elements)


__all__ = [
    "DATA_URI_PREFIX",
    "ScorecardGraphic",
    "layout_to_markup",
    "markup_to_data_uri",
    "markup_from_data_uri",
    "render_scorecard",
    "maybe_render",
    "layout_from_markup",
]
