"""Watermark an image and return it as a download."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from feed_server.api.deps import read_upload
from feed_server.config import get_settings
from feed_server.security import require_api_key
from scorecard_engine.export import ExportPipeline, ExportStatus, MemoryDownloadSink

router = APIRouter(prefix="/api", tags=["export"], dependencies=[Depends(require_api_key)])


@router.post("/export", response_model=None)
async def export_image(
    image: UploadFile = File(...),
    label: Optional[str] = Form(default=None),
) -> Response:
    settings = get_settings()
    if not settings.watermark_path:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="watermark not configured",
        )

    data = await read_upload(image, field="image")
    sink = MemoryDownloadSink()
    pipeline = ExportPipeline(
        settings.watermark_path,
        download_sink=sink,
        prefix=settings.export_prefix,
        load_timeout=settings.load_timeout,
    )
    outcome = await pipeline.export(data, label)
    if outcome.status is ExportStatus.FAILED or sink.last is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=outcome.message or "export failed",
        )

    exported = sink.last
    return Response(
        content=exported.data,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


__all__ = ["router"]
