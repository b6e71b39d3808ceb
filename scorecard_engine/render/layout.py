"""Scorecard layout on a fixed 800x380 logical canvas.

The layout is a flat list of text elements. Both the SVG serializer and the
Pillow rasterizer consume it, so the markup and the bitmap never drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from ..grid import HOLES, NINE, ScoreGrid, UNSET_DISPLAY

VIEWBOX_WIDTH = 800
VIEWBOX_HEIGHT = 380
LEFT = 40
CELL_WIDTH = (VIEWBOX_WIDTH - 120) / 10
TOTALS_X = LEFT + NINE * CELL_WIDTH
COURSE_NAME_OFFSET = 30
FONT_FAMILY = "Arial"


class TextColor(str, Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def fill(self) -> str:
        return "#FFFFFF" if self is TextColor.WHITE else "#000000"


@dataclass(frozen=True)
class RenderOptions:
    text_color: TextColor = TextColor.BLACK
    course_name: str = ""

    @classmethod
    def build(cls, text_color: str | TextColor = "black", course_name: str | None = None) -> "RenderOptions":
        return cls(text_color=TextColor(text_color), course_name=course_name or "")


@dataclass(frozen=True)
class TextElement:
    x: float
    y: float
    text: str
    font_size: int
    font_weight: int
    anchor: str = "start"  # start | middle | end


@dataclass(frozen=True)
class ScorecardLayout:
    width: float
    height: float
    fill: str
    elements: Tuple[TextElement, ...]


def _cell_center(column: int) -> float:
    return LEFT + column * CELL_WIDTH + CELL_WIDTH / 2


def _nine_row(
    scores: Sequence[int], first_hole: int, number_y: float, score_y: float
) -> List[TextElement]:
    row: List[TextElement] = []
    for i in range(NINE):
        value = scores[first_hole - 1 + i]
        x = _cell_center(i)
        row.append(TextElement(x, number_y, str(first_hole + i), 16, 800, "middle"))
        row.append(
            TextElement(x, score_y, str(value) if value else UNSET_DISPLAY, 24, 900, "middle")
        )
    return row


def build_layout(grid: ScoreGrid, options: RenderOptions) -> ScorecardLayout:
    scores = grid.scores
    if len(scores) != HOLES:
        raise ValueError("scorecard layout needs 18 scores")
    agg = grid.aggregate()
    y0 = COURSE_NAME_OFFSET if options.course_name else 0
    totals_x = TOTALS_X + CELL_WIDTH / 2

    elements: List[TextElement] = []
    if options.course_name:
        elements.append(TextElement(LEFT, 30, options.course_name, 24, 900))

    elements.append(TextElement(LEFT, 40 + y0, "FRONT 9", 20, 900))
    elements.extend(_nine_row(scores, 1, 75 + y0, 110 + y0))
    elements.append(TextElement(totals_x, 75 + y0, "OUT", 16, 800, "middle"))
    elements.append(TextElement(totals_x, 110 + y0, str(agg.front_nine or 0), 24, 900, "middle"))

    elements.append(TextElement(LEFT, 170 + y0, "BACK 9", 20, 900))
    elements.extend(_nine_row(scores, 10, 205 + y0, 240 + y0))
    elements.append(TextElement(totals_x, 205 + y0, "IN", 16, 800, "middle"))
    elements.append(TextElement(totals_x, 240 + y0, str(agg.back_nine or 0), 24, 900, "middle"))

    elements.append(TextElement(VIEWBOX_WIDTH - 190, 298 + y0, "TOTAL:", 18, 900))
    elements.append(TextElement(VIEWBOX_WIDTH - 35, 300 + y0, str(agg.total or 0), 32, 900, "end"))

    return ScorecardLayout(
        width=VIEWBOX_WIDTH,
        height=VIEWBOX_HEIGHT,
        fill=options.text_color.fill,
        elements=tuple(elements),
    )


__all__ = [
    "VIEWBOX_WIDTH",
    "VIEWBOX_HEIGHT",
    "CELL_WIDTH",
    "FONT_FAMILY",
    "TextColor",
    "RenderOptions",
    "TextElement",
    "ScorecardLayout",
    "build_layout",
]
