from __future__ import annotations

import logging
import platform
import time
from typing import Any, Dict

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from feed_server.api.routers import composite, export, posts, scorecard
from feed_server.config import get_settings
from feed_server.metrics import BUILD_VERSION, GIT_SHA, MetricsMiddleware, metrics_app
from feed_server.telemetry import install_pipeline_telemetry

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title="Looped feed server")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(MetricsMiddleware)

    application.include_router(scorecard.router)
    application.include_router(composite.router)
    application.include_router(export.router)
    application.include_router(posts.router)

    application.add_api_route("/health", health, methods=["GET"], tags=["health"])

    metrics_router = APIRouter()

    @metrics_router.get("/metrics", include_in_schema=False)
    async def _metrics_endpoint(request: Request):
        return await metrics_app(request)

    application.include_router(metrics_router)
    install_pipeline_telemetry()
    return application


async def health() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "status": "ok",
        "version": BUILD_VERSION,
        "git": GIT_SHA,
        "ts": time.time(),
        "watermark": bool(settings.watermark_path),
        "runtime": {"python": platform.python_version()},
    }


app = create_app()

__all__ = ["app", "create_app", "health"]
