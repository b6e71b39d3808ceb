"""Telemetry hooks for composite and export outcomes."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Mapping, MutableMapping, Optional

PipelineTelemetryEmitter = Callable[[str, Mapping[str, object]], None]

_emitter: Optional[PipelineTelemetryEmitter] = None
_logger = logging.getLogger("scorecard_engine.telemetry")


def set_pipeline_telemetry_emitter(candidate: PipelineTelemetryEmitter | None) -> None:
    """Register the callable receiving pipeline events (``None`` disables)."""

    global _emitter
    _emitter = candidate if callable(candidate) else None


def _safe_emit(event: str, payload: MutableMapping[str, object]) -> None:
    if not _emitter:
        _logger.debug("telemetry emitter not configured for event %s", event)
        return
    try:
        _emitter(event, dict(payload))
    except Exception:  # pragma: no cover - emitter bugs must not break the pipeline
        _logger.exception("failed to emit telemetry event %s", event)


def record_composite_applied(
    *, width: int, height: int, brightness: int, has_overlay: bool, duration_ms: float
) -> None:
    _safe_emit(
        "composite.applied",
        {
            "width": int(width),
            "height": int(height),
            "brightness": int(brightness),
            "hasOverlay": bool(has_overlay),
            "durationMs": int(max(0, round(duration_ms))),
            "ts": _now_ms(),
        },
    )


def record_composite_skipped() -> None:
    _safe_emit("composite.skipped", {"ts": _now_ms()})


def record_composite_failed(error: str) -> None:
    _safe_emit("composite.failed", {"error": error, "ts": _now_ms()})


def record_export(status: str, *, filename: str | None = None, error: str | None = None) -> None:
    payload: Dict[str, object] = {"ts": _now_ms()}
    if filename:
        payload["filename"] = filename
    if error:
        payload["error"] = error
    _safe_emit(f"export.{status}", payload)


def _now_ms() -> int:
    return int(time.time() * 1000)


__all__ = [
    "set_pipeline_telemetry_emitter",
    "record_composite_applied",
    "record_composite_skipped",
    "record_composite_failed",
    "record_export",
]
