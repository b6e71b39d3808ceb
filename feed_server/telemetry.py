"""Route pipeline telemetry into Prometheus counters and the service log."""

from __future__ import annotations

import logging
from typing import Mapping

from scorecard_engine.telemetry import set_pipeline_telemetry_emitter

from .metrics import PIPELINE_DURATION, PIPELINE_EVENTS

logger = logging.getLogger(__name__)


def emit_pipeline_event(event: str, payload: Mapping[str, object]) -> None:
    PIPELINE_EVENTS.labels(event=event).inc()
    duration_ms = payload.get("durationMs")
    if event == "composite.applied" and isinstance(duration_ms, (int, float)):
        PIPELINE_DURATION.observe(duration_ms / 1000.0)
    if event.endswith(".failed"):
        logger.warning("pipeline event %s: %s", event, payload.get("error"))
    else:
        logger.info("pipeline event %s", event)


def install_pipeline_telemetry() -> None:
    set_pipeline_telemetry_emitter(emit_pipeline_event)


__all__ = ["emit_pipeline_event", "install_pipeline_telemetry"]
