import asyncio
import base64

import httpx
import pytest
from PIL import Image

from scorecard_engine.errors import AssetLoadFailure
from scorecard_engine.io import images
from scorecard_engine.io.images import encode_image, is_svg_source, load_image

from .helpers import decode, png_bytes


def test_load_from_bytes_path_and_data_uri(tmp_path):
    data = png_bytes((10, 20, 30, 255), size=(6, 3))
    path = tmp_path / "photo.png"
    path.write_bytes(data)
    uri = "data:image/png;base64," + base64.b64encode(data).decode("ascii")

    for source in (data, path, str(path), uri):
        image = asyncio.run(load_image(source))
        assert image.size == (6, 3)
        assert image.getpixel((0, 0)) == (10, 20, 30, 255)


def test_load_pil_image_returns_copy():
    original = Image.new("RGB", (2, 2), (1, 2, 3))
    loaded = asyncio.run(load_image(original))
    assert loaded is not original
    assert loaded.getpixel((1, 1)) == (1, 2, 3)


def test_load_over_http(monkeypatch):
    data = png_bytes(size=(5, 5))
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.path == "/missing.png":
            return httpx.Response(404)
        return httpx.Response(200, content=data, headers={"content-type": "image/png"})

    monkeypatch.setattr(
        images,
        "_http_client_factory",
        lambda **kwargs: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    image = asyncio.run(load_image("https://cdn.example.com/photo.png"))
    assert image.size == (5, 5)
    with pytest.raises(AssetLoadFailure):
        asyncio.run(load_image("https://cdn.example.com/missing.png"))
    assert seen == ["https://cdn.example.com/photo.png", "https://cdn.example.com/missing.png"]


@pytest.mark.parametrize(
    "source",
    [b"not an image", b"", "data:image/png;base64,@@@", "data:image/png,raw", "/nonexistent/photo.png"],
)
def test_load_failures_raise_asset_load_failure(source):
    with pytest.raises(AssetLoadFailure):
        asyncio.run(load_image(source))


def test_vector_sources_are_rejected_by_raster_loader():
    assert is_svg_source("<svg viewBox='0 0 1 1'></svg>")
    assert is_svg_source("data:image/svg+xml;charset=utf-8,%3Csvg")
    assert not is_svg_source(b"<svg")
    with pytest.raises(AssetLoadFailure):
        asyncio.run(load_image("data:image/svg+xml;charset=utf-8,%3Csvg%3E"))


def test_load_timeout(monkeypatch):
    async def slow(source):
        await asyncio.sleep(5)

    monkeypatch.setattr(images, "_load", slow)
    with pytest.raises(AssetLoadFailure, match="timed out"):
        asyncio.run(load_image(b"ignored", timeout=0.05))


def test_encode_png_and_jpeg():
    image = Image.new("RGBA", (8, 4), (255, 0, 0, 128))
    png = asyncio.run(encode_image(image))
    assert png.startswith(b"\x89PNG")
    assert decode(png).getpixel((0, 0)) == (255, 0, 0, 128)

    jpeg = asyncio.run(encode_image(image, "JPEG"))
    assert jpeg.startswith(b"\xff\xd8")
    assert decode(jpeg).mode == "RGB"
