from .pipeline import ExportOutcome, ExportPipeline, ExportStatus
from .share import (
    DirectoryDownloadSink,
    DownloadSink,
    ExportFile,
    MemoryDownloadSink,
    SharePayload,
    ShareTarget,
)
from .watermark import apply_watermark, export_filename, sanitize_label, watermark_rect

__all__ = [
    "ExportOutcome",
    "ExportPipeline",
    "ExportStatus",
    "DirectoryDownloadSink",
    "DownloadSink",
    "ExportFile",
    "MemoryDownloadSink",
    "SharePayload",
    "ShareTarget",
    "apply_watermark",
    "export_filename",
    "sanitize_label",
    "watermark_rect",
]
