"""Shared pytest fixtures for feed server tests."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from feed_server.app import app
from feed_server.baas import client as baas_client
from feed_server.config import reset_settings_cache
from feed_server.telemetry import install_pipeline_telemetry
from scorecard_engine.telemetry import set_pipeline_telemetry_emitter

from .fakes import FakeBackend, png_bytes

_ENV_KEYS = (
    "API_KEY",
    "REQUIRE_API_KEY",
    "WATERMARK_PATH",
    "EXPORT_PREFIX",
    "MAX_UPLOAD_BYTES",
    "ASSET_LOAD_TIMEOUT_S",
    "BAAS_BASE_URL",
    "BAAS_APP_ID",
    "BAAS_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_settings_cache()
    install_pipeline_telemetry()
    yield
    reset_settings_cache()
    set_pipeline_telemetry_emitter(None)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def set_env(monkeypatch):
    def _set(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        reset_settings_cache()

    return _set


@pytest.fixture
def watermark(tmp_path, set_env):
    path = tmp_path / "watermark.png"
    path.write_bytes(png_bytes((255, 0, 0, 255), size=(20, 10)))
    set_env(WATERMARK_PATH=str(path))
    return path


@pytest.fixture
def backend(monkeypatch, set_env) -> FakeBackend:
    fake = FakeBackend()
    set_env(BAAS_BASE_URL="http://baas.test/api", BAAS_APP_ID="looped", BAAS_API_KEY="svc-token")
    monkeypatch.setattr(
        baas_client,
        "_http_client_factory",
        lambda **kwargs: httpx.Client(transport=httpx.MockTransport(fake)),
    )
    return fake
