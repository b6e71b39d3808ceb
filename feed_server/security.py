"""API key guard for the pipeline routes."""

from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, Query, status

from feed_server.config import get_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="x-api-key"),
    api_key_query: str | None = Query(default=None, alias="apiKey"),
) -> str | None:
    """Require a matching API key when ``REQUIRE_API_KEY`` is on.

    Returns the presented key (header first, then query) so downstream
    dependencies can use it.
    """

    candidate = x_api_key or api_key_query
    settings = get_settings()
    if not settings.require_api_key:
        return candidate

    expected = settings.api_key
    if not expected or not candidate or not hmac.compare_digest(candidate, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid api key",
        )
    return candidate


__all__ = ["require_api_key"]
