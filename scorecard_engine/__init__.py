"""Scorecard rendering, overlay compositing and export pipeline."""

from .grid import HOLES, Aggregate, ScoreGrid, format_to_par
from .render import RenderOptions, ScorecardGraphic, TextColor, maybe_render, render_scorecard

__all__ = [
    "HOLES",
    "Aggregate",
    "ScoreGrid",
    "format_to_par",
    "RenderOptions",
    "ScorecardGraphic",
    "TextColor",
    "maybe_render",
    "render_scorecard",
]
