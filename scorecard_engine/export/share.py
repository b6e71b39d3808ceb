"""Delivery channels for exported images: native share and direct download."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, runtime_checkable

logger = logging.getLogger(__name__)

SHARE_TITLE = "Shared from Looped"
SHARE_TEXT = "Check out my round!"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    data: bytes
    media_type: str = "image/jpeg"


@dataclass(frozen=True)
class SharePayload:
    files: Tuple[ExportFile, ...]
    title: str = SHARE_TITLE
    text: str = SHARE_TEXT


@runtime_checkable
class ShareTarget(Protocol):
    def can_share(self, payload: SharePayload) -> bool: ...

    async def share(self, payload: SharePayload) -> None:
        """Raise ``ShareCancelled`` when the user dismisses the sheet and
        ``ShareFailure`` when the platform cannot share; the latter falls
        back to a download.
        """


@runtime_checkable
class DownloadSink(Protocol):
    async def save(self, file: ExportFile) -> Optional[Path]: ...


class DirectoryDownloadSink:
    """Saves into a directory through a temp file released within the call."""

    def __init__(self, directory: Path | str):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    async def save(self, file: ExportFile) -> Optional[Path]:
        return await asyncio.to_thread(self._write, file)

    def _write(self, file: ExportFile) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self._directory / Path(file.filename).name
        fd, tmp = tempfile.mkstemp(prefix=".download-", dir=self._directory)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(file.data)
            os.replace(tmp, target)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)
        logger.info("saved export %s (%d bytes)", target, len(file.data))
        return target


@dataclass
class MemoryDownloadSink:
    files: List[ExportFile] = field(default_factory=list)

    async def save(self, file: ExportFile) -> Optional[Path]:
        self.files.append(file)
        return None

    @property
    def last(self) -> Optional[ExportFile]:
        return self.files[-1] if self.files else None


__all__ = [
    "SHARE_TITLE",
    "SHARE_TEXT",
    "ExportFile",
    "SharePayload",
    "ShareTarget",
    "DownloadSink",
    "DirectoryDownloadSink",
    "MemoryDownloadSink",
]
