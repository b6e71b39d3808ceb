from scorecard_engine.errors import GENERIC_FAILURE_MESSAGE

from .fakes import decode, png_bytes

ROUND_72 = ",".join(str(s) for s in [4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 4, 5, 4, 3, 5, 4, 4])


def _post(client, base, data=None, overlay=None):
    files = {"base": ("photo.png", base, "image/png")}
    if overlay is not None:
        files["overlay"] = ("overlay.png", overlay, "image/png")
    return client.post("/api/composite", files=files, data=data or {})


def test_nothing_to_bake_passes_through(client):
    assert _post(client, png_bytes()).status_code == 204
    zeros = ",".join("0" * 18)
    assert _post(client, png_bytes(), {"scores": zeros}).status_code == 204


def test_brightness_only(client):
    res = _post(client, png_bytes((200, 200, 200, 255)), {"brightness": "150"})
    assert res.status_code == 200
    assert res.headers["content-type"] == "image/png"
    assert 'filename="composite-image.png"' in res.headers["content-disposition"]
    assert decode(res.content).getpixel((0, 0))[:3] == (255, 255, 255)


def test_raster_overlay_scaled_from_preview(client):
    base = png_bytes((0, 0, 255, 255), size=(1600, 800))
    overlay = png_bytes((255, 0, 0, 255), size=(10, 10))
    res = _post(
        client,
        base,
        {"containerWidth": "800", "containerHeight": "400"},
        overlay=overlay,
    )
    assert res.status_code == 200
    out = decode(res.content).convert("RGBA")
    assert out.size == (1600, 800)
    assert out.getpixel((100, 100))[0] > 250
    assert out.getpixel((899, 449))[0] > 250
    assert out.getpixel((99, 99)) == (0, 0, 255, 255)
    assert out.getpixel((900, 450)) == (0, 0, 255, 255)


def test_scorecard_overlay_from_scores(client):
    base = png_bytes((0, 0, 255, 255), size=(800, 400))
    res = _post(client, base, {"scores": ROUND_72, "textColor": "white", "x": "0", "y": "0", "width": "800", "height": "380"})
    assert res.status_code == 200
    out = decode(res.content).convert("RGB")
    assert out.getpixel((799, 399)) == (0, 0, 255)
    assert (255, 255, 255) in {color for _, color in out.getcolors(maxcolors=800 * 400)}


def test_broken_photo_is_422(client):
    res = _post(client, b"not an image", {"brightness": "120"})
    assert res.status_code == 422
    assert res.json()["detail"] == GENERIC_FAILURE_MESSAGE


def test_out_of_range_form_values_rejected(client):
    assert _post(client, png_bytes(), {"brightness": "200"}).status_code == 422
    assert _post(client, png_bytes(), {"scores": "1,2,3", "brightness": "120"}).status_code == 422


def test_oversized_preview_geometry_rejected(client):
    overlay = png_bytes((255, 0, 0, 255))
    for field in ("x", "y", "width", "height", "containerWidth", "containerHeight"):
        res = _post(client, png_bytes(), {field: "200000"}, overlay=overlay)
        assert res.status_code == 422, field


def test_overlay_far_larger_than_photo_is_clipped(client):
    data = {"x": "0", "y": "0", "width": "20000", "height": "20000", "scores": ROUND_72}
    res = _post(client, png_bytes((0, 0, 255, 255), size=(64, 32)), data)
    assert res.status_code == 200
    assert decode(res.content).size == (64, 32)


def test_upload_limit(client, set_env):
    set_env(MAX_UPLOAD_BYTES="16")
    assert _post(client, png_bytes(), {"brightness": "120"}).status_code == 413


def test_pipeline_events_are_counted(client):
    _post(client, png_bytes((10, 10, 10, 255)), {"brightness": "120"})
    _post(client, png_bytes())
    metrics = client.get("/metrics").text
    assert 'feed_pipeline_events_total{event="composite.applied"}' in metrics
    assert 'feed_pipeline_events_total{event="composite.skipped"}' in metrics
    assert 'route="/api/composite"' in metrics
