from __future__ import annotations

from fastapi import HTTPException, UploadFile, status

from feed_server.baas import BaasClients, BaasConfig
from feed_server.config import get_settings


def get_baas_clients() -> BaasClients:
    return BaasClients.from_config(BaasConfig.from_settings(get_settings()))


async def read_upload(upload: UploadFile, *, field: str) -> bytes:
    """Read an upload fully, enforcing ``MAX_UPLOAD_BYTES``."""

    limit = get_settings().max_upload_bytes
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"{field} exceeds {limit} bytes",
        )
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} is empty")
    return data


__all__ = ["get_baas_clients", "read_upload"]
