import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .compositor.composite import composite_photo
from .compositor.layout import BRIGHTNESS_NEUTRAL, OverlayLayout
from .errors import PipelineError
from .export.pipeline import ExportPipeline, ExportStatus
from .export.share import DirectoryDownloadSink
from .grid import HOLES, ScoreGrid
from .render.layout import RenderOptions
from .render.svg import maybe_render
from .types import Point, Size


def _parse_scores(raw: str) -> ScoreGrid:
    grid = ScoreGrid.empty()
    cells = [c.strip() for c in raw.split(",")] if raw else []
    if len(cells) > HOLES:
        raise SystemExit(f"at most {HOLES} scores")
    for index, cell in enumerate(cells):
        grid = grid.set_score(index, cell)
    return grid


def _parse_size(raw: str) -> Size:
    width, _, height = raw.lower().partition("x")
    return Size(float(width), float(height))


def _cmd_render(args: argparse.Namespace) -> int:
    grid = _parse_scores(args.scores)
    graphic = maybe_render(grid, RenderOptions.build(args.color, args.course))
    print(json.dumps(grid.aggregate().to_dict()))
    if graphic is None:
        print("no scores entered, nothing rendered", file=sys.stderr)
        return 1
    Path(args.out).write_text(graphic.markup, encoding="utf-8")
    return 0


def _cmd_composite(args: argparse.Namespace) -> int:
    overlay = None
    if args.overlay:
        overlay = Path(args.overlay).read_bytes()
    elif args.scores:
        overlay = maybe_render(_parse_scores(args.scores), RenderOptions.build(args.color, args.course))
    layout = OverlayLayout(position=Point(args.x, args.y), size=Size(args.width, args.height))
    image = asyncio.run(
        composite_photo(
            args.base,
            brightness=args.brightness,
            overlay=overlay,
            overlay_rect=layout.rect if overlay is not None else None,
            container=_parse_size(args.container) if args.container else None,
        )
    )
    Path(args.out).write_bytes(image.data)
    print({"width": image.width, "height": image.height, "bytes": len(image.data)})
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    pipeline = ExportPipeline(args.watermark, download_sink=DirectoryDownloadSink(args.out_dir))
    outcome = asyncio.run(pipeline.export(args.image, args.label))
    print({"status": outcome.status.value, "filename": outcome.filename})
    return 0 if outcome.status is not ExportStatus.FAILED else 1


def main(argv=None):
    ap = argparse.ArgumentParser(prog="scorecard-engine")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="render scores to SVG")
    render.add_argument("--scores", default="", help="comma separated strokes, e.g. 4,3,5")
    render.add_argument("--color", choices=["black", "white"], default="black")
    render.add_argument("--course", default="")
    render.add_argument("--out", default="scorecard.svg")
    render.set_defaults(func=_cmd_render)

    comp = sub.add_parser("composite", help="bake brightness and an overlay into a photo")
    comp.add_argument("base")
    comp.add_argument("--overlay", help="raster overlay file (PNG)")
    comp.add_argument("--scores", help="render the scorecard as overlay instead")
    comp.add_argument("--color", choices=["black", "white"], default="black")
    comp.add_argument("--course", default="")
    comp.add_argument("--x", type=float, default=50.0)
    comp.add_argument("--y", type=float, default=50.0)
    comp.add_argument("--width", type=float, default=400.0)
    comp.add_argument("--height", type=float, default=175.0)
    comp.add_argument("--brightness", type=int, default=BRIGHTNESS_NEUTRAL)
    comp.add_argument("--container", help="preview size WxH; defaults to the photo size")
    comp.add_argument("--out", default="composite-image.png")
    comp.set_defaults(func=_cmd_composite)

    exp = sub.add_parser("export", help="watermark an image and save it")
    exp.add_argument("image")
    exp.add_argument("--watermark", required=True)
    exp.add_argument("--label", default="")
    exp.add_argument("--out-dir", default=".")
    exp.set_defaults(func=_cmd_export)

    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        return args.func(args)
    except PipelineError as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
