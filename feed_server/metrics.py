from __future__ import annotations

import os
import time
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()
REQUESTS = Counter(
    "feed_requests_total", "HTTP requests", ["route", "method", "status"], registry=REGISTRY
)
LATENCY = Histogram(
    "feed_request_latency_seconds",
    "Request latency (seconds)",
    ["route", "method"],
    registry=REGISTRY,
)
PIPELINE_EVENTS = Counter(
    "feed_pipeline_events_total",
    "Composite and export outcomes",
    ["event"],
    registry=REGISTRY,
)
PIPELINE_DURATION = Histogram(
    "feed_composite_duration_seconds",
    "Time spent flattening a composite (seconds)",
    registry=REGISTRY,
)

BUILD_VERSION = os.getenv("BUILD_VERSION", "dev")
GIT_SHA = os.getenv("GIT_SHA", "unknown")


async def metrics_app(_req: Request | None = None) -> Response:
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


def _route_label(scope: dict[str, Any]) -> str:
    # templated path keeps label cardinality bounded
    route = scope.get("route")
    template = getattr(route, "path", None)
    return template or scope.get("path", "")


class MetricsMiddleware:
    def __init__(self, app: Callable[..., Awaitable[Any]]):
        self.app = app

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Awaitable[Any]],
        send: Callable[..., Awaitable[Any]],
    ) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        start = time.perf_counter()
        status_code = 500

        async def _send(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = message.get("status", 200)
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            route = _route_label(scope)
            LATENCY.labels(route=route, method=method).observe(time.perf_counter() - start)
            REQUESTS.labels(route=route, method=method, status=str(status_code)).inc()


__all__ = [
    "REGISTRY",
    "REQUESTS",
    "LATENCY",
    "PIPELINE_EVENTS",
    "PIPELINE_DURATION",
    "BUILD_VERSION",
    "GIT_SHA",
    "metrics_app",
    "MetricsMiddleware",
]
