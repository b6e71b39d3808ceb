from .layout import (
    VIEWBOX_HEIGHT,
    VIEWBOX_WIDTH,
    RenderOptions,
    ScorecardLayout,
    TextColor,
    TextElement,
    build_layout,
)
from .raster import rasterize
from .svg import (
    ScorecardGraphic,
    layout_from_markup,
    markup_from_data_uri,
    maybe_render,
    render_scorecard,
)

__all__ = [
    "VIEWBOX_HEIGHT",
    "VIEWBOX_WIDTH",
    "RenderOptions",
    "ScorecardLayout",
    "TextColor",
    "TextElement",
    "build_layout",
    "rasterize",
    "ScorecardGraphic",
    "layout_from_markup",
    "markup_from_data_uri",
    "maybe_render",
    "render_scorecard",
]
