import re

from .fakes import decode, png_bytes


def _export(client, image, label="Pebble Beach"):
    return client.post(
        "/api/export",
        files={"image": ("round.png", image, "image/png")},
        data={"label": label},
    )


def test_export_requires_watermark(client):
    assert _export(client, png_bytes()).status_code == 503


def test_export_returns_watermarked_attachment(client, watermark):
    res = _export(client, png_bytes((255, 255, 255, 255), size=(200, 100)))
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/jpeg"
    disposition = res.headers["content-disposition"]
    assert re.fullmatch(r'attachment; filename="looped-Pebble-Beach-\d+\.jpg"', disposition)
    image = decode(res.content)
    assert image.size == (200, 100)
    r, g, b = image.getpixel((175, 90))
    assert r > 200 and g < 60 and b < 60


def test_export_prefix_and_empty_label(client, watermark, set_env):
    set_env(EXPORT_PREFIX="card")
    res = _export(client, png_bytes(), label="")
    assert re.search(r'filename="card-round-\d+\.jpg"', res.headers["content-disposition"])


def test_export_failure_is_422(client, watermark):
    res = _export(client, b"garbage")
    assert res.status_code == 422
    assert res.json()["detail"] == "Failed to save image. Please try again."


def test_health(client, watermark):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["watermark"] is True
