"""Watermark placement and export file naming."""

from __future__ import annotations

import re
import time
from typing import Optional

from PIL import Image

from ..types import NativeRect, Size

WATERMARK_WIDTH_RATIO = 0.15
RIGHT_MARGIN_RATIO = 0.05
BOTTOM_MARGIN_RATIO = 0.02
DEFAULT_PREFIX = "looped"
DEFAULT_LABEL = "round"

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")


def watermark_rect(image: Size, mark: Size) -> NativeRect:
    """Bottom-right box at 15% of the image width, mark aspect preserved."""

    if mark.is_empty():
        raise ValueError("watermark has no size")
    width = image.width * WATERMARK_WIDTH_RATIO
    height = width * mark.height / mark.width
    return NativeRect(
        x=image.width - width - image.width * RIGHT_MARGIN_RATIO,
        y=image.height - height - image.height * BOTTOM_MARGIN_RATIO,
        width=width,
        height=height,
    )


def apply_watermark(image: Image.Image, mark: Image.Image) -> Image.Image:
    canvas = image.convert("RGBA")
    rect = watermark_rect(Size(*canvas.size), Size(*mark.size))
    x, y, width, height = rect.rounded()
    if width <= 0 or height <= 0:
        return canvas
    scaled = mark.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(scaled, (x, y))
    return Image.alpha_composite(canvas, layer)


def sanitize_label(label: Optional[str]) -> str:
    cleaned = _NON_ALNUM_RE.sub("-", label or "").strip("-")
    return cleaned or DEFAULT_LABEL


def export_filename(
    label: Optional[str],
    *,
    prefix: str = DEFAULT_PREFIX,
    now_ms: Optional[int] = None,
    extension: str = "jpg",
) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{prefix}-{sanitize_label(label)}-{stamp}.{extension}"


__all__ = [
    "watermark_rect",
    "apply_watermark",
    "sanitize_label",
    "export_filename",
]
