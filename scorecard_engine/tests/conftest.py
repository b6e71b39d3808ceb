from __future__ import annotations

import pytest

from scorecard_engine import telemetry


@pytest.fixture
def telemetry_events():
    events = []
    telemetry.set_pipeline_telemetry_emitter(lambda name, payload: events.append((name, payload)))
    yield events
    telemetry.set_pipeline_telemetry_emitter(None)
