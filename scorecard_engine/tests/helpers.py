from __future__ import annotations

from io import BytesIO

from PIL import Image


def png_bytes(color=(0, 0, 255, 255), size=(4, 2), mode="RGBA") -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def decode(data: bytes) -> Image.Image:
    with Image.open(BytesIO(data)) as img:
        img.load()
        return img.copy()
