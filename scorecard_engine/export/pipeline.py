"""Watermark an image and hand it to the user: share sheet first, download otherwise."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .. import telemetry
from ..errors import PipelineError, ShareCancelled
from ..io.images import ImageSource, encode_image, load_image
from .share import DownloadSink, ExportFile, SharePayload, ShareTarget
from .watermark import DEFAULT_PREFIX, apply_watermark, export_filename

logger = logging.getLogger(__name__)

JPEG_QUALITY = 95


class ExportStatus(str, Enum):
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportOutcome:
    status: ExportStatus
    filename: Optional[str] = None
    path: Optional[Path] = None
    message: Optional[str] = None


def _log_alert(message: str) -> None:
    logger.warning("user alert: %s", message)


class ExportPipeline:
    def __init__(
        self,
        watermark: ImageSource,
        *,
        download_sink: DownloadSink,
        share_target: Optional[ShareTarget] = None,
        prefix: str = DEFAULT_PREFIX,
        alert: Optional[Callable[[str], None]] = None,
        load_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._watermark = watermark
        self._download_sink = download_sink
        self._share_target = share_target
        self._prefix = prefix
        self._alert = alert or _log_alert
        self._load_timeout = load_timeout
        self._clock = clock

    async def render(self, image: ImageSource, label: Optional[str]) -> ExportFile:
        """Load, watermark and encode; raises ``PipelineError`` on failure."""

        base, mark = await asyncio.gather(
            load_image(image, timeout=self._load_timeout),
            load_image(self._watermark, timeout=self._load_timeout),
        )
        stamped = apply_watermark(base, mark)
        data = await encode_image(stamped, "JPEG", quality=JPEG_QUALITY)
        filename = export_filename(label, prefix=self._prefix, now_ms=int(self._clock() * 1000))
        return ExportFile(filename=filename, data=data, media_type="image/jpeg")

    async def export(self, image: ImageSource, label: Optional[str]) -> ExportOutcome:
        try:
            file = await self.render(image, label)
            return await self._deliver(file)
        except PipelineError as exc:
            logger.exception("error saving image")
            telemetry.record_export(ExportStatus.FAILED.value, error=str(exc))
            self._alert(exc.user_message)
            return ExportOutcome(ExportStatus.FAILED, message=exc.user_message)

    async def _deliver(self, file: ExportFile) -> ExportOutcome:
        target = self._share_target
        payload = SharePayload(files=(file,))
        shared = False
        if target is not None:
            try:
                if target.can_share(payload):
                    await target.share(payload)
                    shared = True
            except ShareCancelled:
                telemetry.record_export(ExportStatus.CANCELLED.value, filename=file.filename)
                return ExportOutcome(ExportStatus.CANCELLED, filename=file.filename)
            except Exception as exc:
                logger.error("share failed, falling back to download: %s", exc)
        if not shared:
            return await self._download(file)
        telemetry.record_export(ExportStatus.DELIVERED.value, filename=file.filename)
        return ExportOutcome(ExportStatus.DELIVERED, filename=file.filename)

    async def _download(self, file: ExportFile) -> ExportOutcome:
        try:
            path = await self._download_sink.save(file)
        except OSError as exc:
            raise PipelineError(f"download failed: {exc}") from exc
        telemetry.record_export(ExportStatus.DOWNLOADED.value, filename=file.filename)
        return ExportOutcome(ExportStatus.DOWNLOADED, filename=file.filename, path=path)


__all__ = ["JPEG_QUALITY", "ExportStatus", "ExportOutcome", "ExportPipeline"]
