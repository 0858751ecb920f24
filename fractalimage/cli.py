from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

from fractalimage.config import (
    build_render_config,
    build_viewport,
    load_config,
    normalise_config,
    to_jsonable,
)
from fractalimage.errors import FractalError
from fractalimage.palette import build_palette
from fractalimage.pipeline import render, render_palette_strip, render_sequence, save_image
from fractalimage.util.logging_setup import configure_root_logging, get_logger, queue_logging
from fractalimage.util.manifest import build_manifest, git_commit, write_manifest
from fractalimage.video.opencv_writer import encode_with_opencv

# CLI option dest -> config key, applied on top of the loaded config.
_OVERRIDES = {
    "width": "width",
    "height": "height",
    "zoom": "zoom",
    "center": "center",
    "max_iterations": "max_iterations",
    "coloring": "coloring",
    "palette": "palette",
    "palette_image": "palette_image",
    "in_set_color": "in_set_color",
    "workers": "workers",
    "output": "output",
    "frames": "frames",
    "zoom_factor": "zoom_factor",
    "frames_dir": "frames_dir",
}

def _add_view_options(p: argparse.ArgumentParser, *, zoom: bool = True) -> None:
    p.add_argument("--width", type=int, default=None, help="Image width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Image height in pixels.")
    p.add_argument("--center", type=float, nargs=2, metavar=("RE", "IM"), default=None, help="Centre of the view.")
    if zoom:
        p.add_argument("--zoom", type=float, default=None, help="Zoom; the view spans 2/zoom vertically.")
    p.add_argument("--max-iterations", type=int, default=None, help="Iteration budget per pixel.")
    p.add_argument("--coloring", type=str, default=None,
                   choices=["linear", "reclog", "bleasdale", "bleasdale_inv"], help="Colour index shaping.")
    p.add_argument("--palette", type=str, default=None,
                   choices=["grayscale", "hue", "prism", "image_lookup"], help="Palette kind.")
    p.add_argument("--palette-image", type=str, default=None, help="Reference image for the image_lookup palette.")
    p.add_argument("--in-set-color", type=str, default=None, help="Colour of points inside the set (e.g. '#000000').")
    p.add_argument("--discrete", action="store_true", help="Use the integer escape count instead of the smoothed one.")

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fractalimage", description="Mandelbrot set image and zoom-sequence renderer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    p.add_argument("--workers", type=int, default=None, help="Worker processes per frame (1 renders in-process).")
    p.add_argument("--manifest", type=str, default="artifacts/run.json", help="Where render/zoom write the run manifest. Empty disables it.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render a single image.")
    _add_view_options(r)
    r.add_argument("--output", type=str, default=None, help="Output PNG (defaults to config.output).")

    # Frame i is rendered at zoom_factor**i, so a starting zoom would be ignored.
    z = sub.add_parser("zoom", help="Render a zoom sequence; frame i uses zoom = zoom_factor**i.")
    _add_view_options(z, zoom=False)
    z.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    z.add_argument("--frames", type=int, default=None, help="Number of frames.")
    z.add_argument("--zoom-factor", type=float, default=None, help="Per-frame zoom multiplier.")

    e = sub.add_parser("encode", help="Encode frames into an MP4 video using OpenCV.")
    e.add_argument("--input-dir", type=str, default=None, help="Frames directory (defaults to config.frames_dir).")
    e.add_argument("--output", type=str, default=None, help="Output MP4 file (defaults to config.output_video).")
    e.add_argument("--fps", type=int, default=None, help="Frames per second (defaults to config.fps).")

    s = sub.add_parser("palette", help="Write a strip image previewing a palette over [0, 1].")
    s.add_argument("--palette", type=str, default=None,
                   choices=["grayscale", "hue", "prism", "image_lookup"], help="Palette kind.")
    s.add_argument("--palette-image", type=str, default=None, help="Reference image for the image_lookup palette.")
    s.add_argument("--output", type=str, default="palette.png", help="Output PNG.")
    s.add_argument("--width", type=int, default=512, help="Strip width in pixels.")
    s.add_argument("--height", type=int, default=64, help="Strip height in pixels.")

    return p

def _apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    out = dict(cfg)
    for dest, key in _OVERRIDES.items():
        value = getattr(args, dest, None)
        if value is not None:
            out[key] = value
    if getattr(args, "discrete", False):
        out["continuous"] = False
    return out

def _palette_overrides(args: argparse.Namespace) -> argparse.Namespace:
    return argparse.Namespace(palette=args.palette, palette_image=args.palette_image)

def _write_manifest(path: str, command: str, cfg: Dict[str, Any], outputs: List[Dict[str, Any]]) -> None:
    if not path:
        return
    manifest = build_manifest(command=command, config=to_jsonable(cfg), outputs=outputs, commit=git_commit())
    write_manifest(path, manifest)
    get_logger().info("Run manifest written: %s", path)

def _run(args: argparse.Namespace, log_queue, log_level: int) -> int:
    logger = get_logger()

    if args.cmd == "palette":
        # The strip size and output are the sub-command's own, not the config's.
        cfg = normalise_config(_apply_overrides(load_config(args.config), _palette_overrides(args)))
        palette = build_palette(cfg["palette"], cfg["palette_image"])
        path = save_image(render_palette_strip(palette, args.width, args.height), args.output)
        logger.info("Palette %s written: %s", cfg["palette"].name, path)
        return 0

    cfg = normalise_config(_apply_overrides(load_config(args.config), args))

    if args.cmd == "render":
        img = render(build_viewport(cfg), build_render_config(cfg), workers=cfg["workers"],
                     log_queue=log_queue, log_level=log_level)
        path = save_image(img, cfg["output"])
        logger.info("Image written: %s", path)
        _write_manifest(args.manifest, "render", cfg, [{"path": path}])
        return 0

    if args.cmd == "zoom":
        results = render_sequence(
            build_viewport(cfg), build_render_config(cfg),
            num_frames=cfg["frames"], per_frame_zoom_factor=cfg["zoom_factor"], frames_dir=cfg["frames_dir"],
            workers=cfg["workers"], log_queue=log_queue, log_level=log_level, progress=True,
        )
        _write_manifest(args.manifest, "zoom", cfg,
                        [{"index": r.index, "zoom": r.zoom, "path": r.path, "error": r.error} for r in results])
        failed = [r.index for r in results if not r.ok]
        if failed:
            logger.error("%s of %s frames failed: %s", len(failed), len(results), failed)
            return 2
        return 0

    if args.cmd == "encode":
        input_dir = args.input_dir or cfg["frames_dir"]
        output = args.output or cfg["output_video"]
        fps = args.fps or cfg["fps"]
        encode_with_opencv(input_dir=input_dir, output_file=output, fps=fps)
        return 0

    raise RuntimeError("Unknown command.")

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    with queue_logging(listener_logger) as queue:
        try:
            return _run(args, queue, log_level)
        except FractalError as e:
            get_logger().error("%s", e)
            return 1

if __name__ == "__main__":
    raise SystemExit(main())
