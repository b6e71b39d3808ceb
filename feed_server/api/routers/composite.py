"""Flatten brightness and a scorecard overlay into an uploaded photo."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from feed_server.api.deps import read_upload
from feed_server.config import get_settings
from feed_server.security import require_api_key
from scorecard_engine import telemetry
from scorecard_engine.compositor import OverlayLayout, composite_photo
from scorecard_engine.compositor.layout import BRIGHTNESS_MAX, BRIGHTNESS_MIN, BRIGHTNESS_NEUTRAL
from scorecard_engine.errors import PipelineError
from scorecard_engine.grid import ScoreGrid
from scorecard_engine.render import RenderOptions, TextColor, maybe_render
from scorecard_engine.types import Point, Size

logger = logging.getLogger(__name__)

# largest accepted preview-space coordinate or extent
MAX_PREVIEW_EDGE = 20_000.0

router = APIRouter(prefix="/api", tags=["composite"], dependencies=[Depends(require_api_key)])


def _parse_scores(raw: str) -> ScoreGrid:
    try:
        return ScoreGrid.from_scores(int(v) for v in raw.split(","))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="scores must be 18 comma separated non-negative integers",
        ) from exc


@router.post("/composite", response_model=None)
async def composite(
    base: UploadFile = File(...),
    overlay: Optional[UploadFile] = File(default=None),
    scores: Optional[str] = Form(default=None),
    text_color: TextColor = Form(default=TextColor.BLACK, alias="textColor"),
    course_name: Optional[str] = Form(default=None, alias="courseName"),
    x: float = Form(default=50.0, ge=0, le=MAX_PREVIEW_EDGE),
    y: float = Form(default=50.0, ge=0, le=MAX_PREVIEW_EDGE),
    width: float = Form(default=400.0, gt=0, le=MAX_PREVIEW_EDGE),
    height: float = Form(default=175.0, gt=0, le=MAX_PREVIEW_EDGE),
    brightness: int = Form(default=BRIGHTNESS_NEUTRAL, ge=BRIGHTNESS_MIN, le=BRIGHTNESS_MAX),
    container_width: Optional[float] = Form(
        default=None, gt=0, le=MAX_PREVIEW_EDGE, alias="containerWidth"
    ),
    container_height: Optional[float] = Form(
        default=None, gt=0, le=MAX_PREVIEW_EDGE, alias="containerHeight"
    ),
) -> Response:
    """Return the flattened PNG, or 204 when there is nothing to bake in.

    The overlay is either an uploaded raster or the scorecard rendered from
    ``scores``; position and size are preview-space values relative to the
    ``containerWidth`` x ``containerHeight`` preview (the photo's own size
    when omitted).
    """

    base_bytes = await read_upload(base, field="base")
    overlay_source = None
    if overlay is not None and overlay.filename:
        overlay_source = await read_upload(overlay, field="overlay")
    elif scores:
        overlay_source = maybe_render(_parse_scores(scores), RenderOptions.build(text_color, course_name))

    layout = OverlayLayout(position=Point(x, y), size=Size(width, height), brightness=brightness)
    if layout.is_neutral and overlay_source is None:
        telemetry.record_composite_skipped()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    container = None
    if container_width and container_height:
        container = Size(container_width, container_height)

    settings = get_settings()
    started = time.perf_counter()
    try:
        image = await composite_photo(
            base_bytes,
            brightness=layout.brightness,
            overlay=overlay_source,
            overlay_rect=layout.rect if overlay_source is not None else None,
            container=container,
            timeout=settings.load_timeout,
        )
    except PipelineError as exc:
        logger.exception("error saving composite")
        telemetry.record_composite_failed(str(exc))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.user_message
        ) from exc

    telemetry.record_composite_applied(
        width=image.width,
        height=image.height,
        brightness=layout.brightness,
        has_overlay=overlay_source is not None,
        duration_ms=(time.perf_counter() - started) * 1000.0,
    )
    return Response(
        content=image.data,
        media_type=image.media_type,
        headers={"Content-Disposition": f'inline; filename="{image.filename}"'},
    )


__all__ = ["router"]
