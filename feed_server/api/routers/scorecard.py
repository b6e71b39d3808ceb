"""Score entry and scorecard rendering endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from feed_server.security import require_api_key
from scorecard_engine.grid import HOLES, ScoreGrid, format_to_par, is_valid_score_input
from scorecard_engine.render import RenderOptions, TextColor, maybe_render

router = APIRouter(
    prefix="/api/scorecard",
    tags=["scorecard"],
    dependencies=[Depends(require_api_key)],
)


class AggregateOut(BaseModel):
    front_nine: int = Field(serialization_alias="frontNine")
    back_nine: int = Field(serialization_alias="backNine")
    total: int


class CellEditIn(BaseModel):
    scores: List[int] = Field(default_factory=lambda: [0] * HOLES)
    hole: int = Field(ge=0, lt=HOLES, description="0-based hole index")
    value: str

    model_config = ConfigDict(populate_by_name=True)


class CellEditOut(BaseModel):
    scores: List[int]
    accepted: bool
    aggregate: AggregateOut


class RenderIn(BaseModel):
    scores: List[int]
    text_color: TextColor = Field(
        default=TextColor.BLACK,
        validation_alias=AliasChoices("textColor", "text_color"),
    )
    course_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("courseName", "course_name"),
    )

    model_config = ConfigDict(populate_by_name=True)


class GraphicOut(BaseModel):
    svg: str
    data_uri: str = Field(serialization_alias="dataUri")
    width: int
    height: int


class RenderOut(BaseModel):
    aggregate: AggregateOut
    to_par: str = Field(serialization_alias="toPar")
    graphic: Optional[GraphicOut] = None


def _grid(scores: List[int]) -> ScoreGrid:
    try:
        return ScoreGrid.from_scores(scores)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _aggregate(grid: ScoreGrid) -> AggregateOut:
    agg = grid.aggregate()
    return AggregateOut(front_nine=agg.front_nine, back_nine=agg.back_nine, total=agg.total)


@router.post("/cell", response_model=CellEditOut)
def edit_cell(payload: CellEditIn) -> CellEditOut:
    grid = _grid(payload.scores).set_score(payload.hole, payload.value)
    return CellEditOut(
        scores=grid.to_list(),
        accepted=is_valid_score_input(payload.value),
        aggregate=_aggregate(grid),
    )


@router.post("/render", response_model=RenderOut)
def render(payload: RenderIn) -> RenderOut:
    grid = _grid(payload.scores)
    graphic = maybe_render(grid, RenderOptions.build(payload.text_color, payload.course_name))
    out = RenderOut(aggregate=_aggregate(grid), to_par=format_to_par(grid.total))
    if graphic is not None:
        out.graphic = GraphicOut(
            svg=graphic.markup,
            data_uri=graphic.data_uri,
            width=graphic.layout.width,
            height=graphic.layout.height,
        )
    return out


@router.get("/render.svg")
def render_svg(
    scores: str = Query(..., description="comma separated strokes, 18 values"),
    text_color: TextColor = Query(default=TextColor.BLACK, alias="textColor"),
    course_name: Optional[str] = Query(default=None, alias="courseName"),
) -> Response:
    try:
        values = [int(v) for v in scores.split(",")] if scores else []
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="scores must be integers") from exc
    graphic = maybe_render(_grid(values), RenderOptions.build(text_color, course_name))
    if graphic is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no scores entered")
    return Response(content=graphic.markup, media_type="image/svg+xml")


__all__ = ["router"]
