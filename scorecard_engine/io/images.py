"""Asynchronous image loading and encoding.

Decoding and encoding run off the event loop via ``asyncio.to_thread``; a
load is the only place the pipeline waits on the network or the disk.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import AssetLoadFailure, EncodingFailure

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path, Image.Image]


def _http_client_factory(**kwargs: Any) -> httpx.AsyncClient:
    timeout = kwargs.pop("timeout", 30.0)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True, **kwargs)


def is_svg_source(source: object) -> bool:
    if isinstance(source, str):
        head = source.lstrip()[:64].lower()
        return head.startswith("data:image/svg+xml") or head.startswith("<svg")
    return False


def _decode(data: bytes) -> Image.Image:
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            decoded = ImageOps.exif_transpose(img)
            return decoded.copy() if decoded is img else decoded
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise AssetLoadFailure(f"could not decode image: {exc}") from exc


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise AssetLoadFailure("malformed data URI")
    if not header.endswith(";base64"):
        raise AssetLoadFailure("only base64 raster data URIs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AssetLoadFailure("invalid base64 payload in data URI") from exc


async def _fetch(url: str) -> bytes:
    try:
        async with _http_client_factory() as client:
            response = await client.get(url)
    except httpx.RequestError as exc:
        raise AssetLoadFailure(f"image request failed: {exc}") from exc
    if response.status_code != 200:
        raise AssetLoadFailure(f"image request failed: {response.status_code}")
    return response.content


async def _read_bytes(source: ImageSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str):
        if source.startswith("data:"):
            return _decode_data_uri(source)
        if source.startswith(("http://", "https://")):
            return await _fetch(source)
        source = Path(source)
    try:
        return await asyncio.to_thread(Path(source).expanduser().read_bytes)
    except OSError as exc:
        raise AssetLoadFailure(f"could not read image file {source}: {exc}") from exc


async def _load(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source.copy()
    if is_svg_source(source):
        raise AssetLoadFailure("vector sources must be rasterized before loading")
    data = await _read_bytes(source)
    if not data:
        raise AssetLoadFailure("image source is empty")
    return await asyncio.to_thread(_decode, data)


async def load_image(source: ImageSource, *, timeout: Optional[float] = None) -> Image.Image:
    """Load an image at native resolution.

    ``timeout`` bounds the whole load in seconds; ``None`` waits forever.
    """

    if timeout is None or timeout <= 0:
        return await _load(source)
    try:
        return await asyncio.wait_for(_load(source), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("image load timed out after %.1fs", timeout)
        raise AssetLoadFailure(f"image load timed out after {timeout}s") from exc


def _encode(image: Image.Image, fmt: str, quality: Optional[int]) -> bytes:
    buffer = BytesIO()
    params: dict[str, Any] = {}
    target = image
    if fmt.upper() in {"JPEG", "JPG"}:
        fmt = "JPEG"
        target = image.convert("RGB") if image.mode != "RGB" else image
        params["quality"] = quality or 95
    elif quality is not None:
        params["quality"] = quality
    try:
        target.save(buffer, format=fmt, **params)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodingFailure(f"could not encode image as {fmt}: {exc}") from exc
    return buffer.getvalue()


async def encode_image(image: Image.Image, fmt: str = "PNG", *, quality: Optional[int] = None) -> bytes:
    data = await asyncio.to_thread(_encode, image, fmt, quality)
    if not data:
        raise EncodingFailure(f"{fmt} encoder produced no output")
    return data


__all__ = ["ImageSource", "is_svg_source", "load_image", "encode_image"]
