import asyncio

import pytest

from scorecard_engine.errors import GENERIC_FAILURE_MESSAGE, ShareCancelled, ShareFailure
from scorecard_engine.export import (
    DirectoryDownloadSink,
    ExportPipeline,
    ExportStatus,
    MemoryDownloadSink,
)
from scorecard_engine.export.share import SHARE_TEXT, SHARE_TITLE
from scorecard_engine.export.watermark import export_filename, sanitize_label, watermark_rect
from scorecard_engine.types import NativeRect, Size

from .helpers import decode, png_bytes

WHITE = png_bytes((255, 255, 255, 255), size=(200, 100))
MARK = png_bytes((255, 0, 0, 255), size=(20, 10))


class FakeShareTarget:
    def __init__(self, *, available=True, error=None, check_error=None):
        self.available = available
        self.error = error
        self.check_error = check_error
        self.payloads = []

    def can_share(self, payload):
        if self.check_error is not None:
            raise self.check_error
        return self.available

    async def share(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error


def _pipeline(share_target=None, sink=None, **kwargs):
    return ExportPipeline(
        MARK,
        download_sink=sink if sink is not None else MemoryDownloadSink(),
        share_target=share_target,
        clock=lambda: 1.5,
        **kwargs,
    )


def test_watermark_rect_bottom_right():
    rect = watermark_rect(Size(1000, 800), Size(200, 100))
    assert rect == NativeRect(800, 709, 150, 75)


def test_export_filename():
    assert export_filename("Pebble Beach  G.L.", now_ms=123) == "looped-Pebble-Beach-G-L-123.jpg"
    assert export_filename("", now_ms=5) == "looped-round-5.jpg"
    assert export_filename(None, prefix="card", now_ms=5) == "card-round-5.jpg"
    assert sanitize_label("--") == "round"


def test_download_when_no_share_target(telemetry_events):
    sink = MemoryDownloadSink()
    outcome = asyncio.run(_pipeline(sink=sink).export(WHITE, "St Andrews"))

    assert outcome.status is ExportStatus.DOWNLOADED
    assert outcome.filename == "looped-St-Andrews-1500.jpg"
    assert sink.last.filename == outcome.filename
    assert sink.last.media_type == "image/jpeg"
    assert sink.last.data[:3] == b"\xff\xd8\xff"
    image = decode(sink.last.data)
    assert image.size == (200, 100)
    r, g, b = image.getpixel((175, 90))
    assert r > 200 and g < 60 and b < 60
    assert image.getpixel((10, 10))[0] > 240
    name, payload = telemetry_events[-1]
    assert name == "export.downloaded"
    assert payload["filename"] == outcome.filename


def test_share_delivers_without_download():
    sink, target = MemoryDownloadSink(), FakeShareTarget()
    outcome = asyncio.run(_pipeline(target, sink).export(WHITE, "Round"))

    assert outcome.status is ExportStatus.DELIVERED
    assert sink.files == []
    payload = target.payloads[0]
    assert payload.title == SHARE_TITLE
    assert payload.text == SHARE_TEXT
    assert [f.filename for f in payload.files] == ["looped-Round-1500.jpg"]


def test_cancelled_share_is_silent():
    alerts, sink = [], MemoryDownloadSink()
    target = FakeShareTarget(error=ShareCancelled())
    outcome = asyncio.run(_pipeline(target, sink, alert=alerts.append).export(WHITE, "x"))
    assert outcome.status is ExportStatus.CANCELLED
    assert sink.files == []
    assert alerts == []


@pytest.mark.parametrize(
    "target",
    [
        FakeShareTarget(available=False),
        FakeShareTarget(error=ShareFailure("no share sheet")),
        FakeShareTarget(error=RuntimeError("unexpected")),
        FakeShareTarget(check_error=TypeError("files not supported")),
    ],
    ids=["unavailable", "share-failure", "share-error", "capability-error"],
)
def test_unavailable_or_broken_share_falls_back_to_download(target):
    sink = MemoryDownloadSink()
    outcome = asyncio.run(_pipeline(target, sink).export(WHITE, "x"))
    assert outcome.status is ExportStatus.DOWNLOADED
    assert len(sink.files) == 1
    if not target.available:
        assert target.payloads == []


def test_load_failure_alerts_and_delivers_nothing(telemetry_events):
    alerts, sink = [], MemoryDownloadSink()
    pipeline = ExportPipeline(b"broken", download_sink=sink, alert=alerts.append)
    outcome = asyncio.run(pipeline.export(WHITE, "x"))
    assert outcome.status is ExportStatus.FAILED
    assert outcome.message == GENERIC_FAILURE_MESSAGE
    assert alerts == [GENERIC_FAILURE_MESSAGE]
    assert sink.files == []
    assert telemetry_events[-1][0] == "export.failed"


def test_directory_sink_leaves_only_the_export(tmp_path):
    outcome = asyncio.run(_pipeline(sink=DirectoryDownloadSink(tmp_path)).export(WHITE, "Links"))
    assert outcome.status is ExportStatus.DOWNLOADED
    assert outcome.path == tmp_path / "looped-Links-1500.jpg"
    assert [p.name for p in tmp_path.iterdir()] == ["looped-Links-1500.jpg"]


def test_directory_sink_failure_is_reported(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    alerts = []
    pipeline = _pipeline(sink=DirectoryDownloadSink(blocker / "sub"), alert=alerts.append)
    outcome = asyncio.run(pipeline.export(WHITE, "x"))
    assert outcome.status is ExportStatus.FAILED
    assert alerts == [GENERIC_FAILURE_MESSAGE]
