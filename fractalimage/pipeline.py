from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from PIL import Image
from tqdm import tqdm

from fractalimage.errors import FractalError, InvalidConfigError
from fractalimage.palette import Palette, build_palette
from fractalimage.render_config import RenderConfig
from fractalimage.renderers.cpu import render_frame_cpu
from fractalimage.util.logging_setup import get_logger
from fractalimage.viewport import Viewport

@dataclass(frozen=True)
class FrameResult:
    index: int
    zoom: float
    path: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

def _ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def frame_path(frames_dir: str, frame_index: int) -> str:
    return os.path.join(frames_dir, f"frame_{frame_index:06d}.png")

def save_image(img: Image.Image, path: str) -> str:
    parent = os.path.dirname(path)
    if parent:
        _ensure_dir(parent)
    img.save(path, format="PNG", optimize=True)
    return path

def render(
    viewport: Viewport,
    config: RenderConfig,
    *,
    palette: Optional[Palette] = None,
    workers: Optional[int] = None,
    frame_id: str = "single",
    log_queue=None,
    log_level: int = logging.INFO,
) -> Image.Image:
    if not isinstance(viewport, Viewport) or not isinstance(config, RenderConfig):
        raise InvalidConfigError("render() needs a Viewport and a RenderConfig.")

    if palette is None:
        palette = build_palette(config.palette, config.palette_image)

    return render_frame_cpu(
        bounds=viewport.bounds, config=config, palette=palette, frame_id=frame_id,
        workers=workers, log_queue=log_queue, log_level=log_level,
    )

def zoom_sequence(num_frames: int, per_frame_zoom_factor: float) -> List[float]:
    if num_frames <= 0:
        raise InvalidConfigError("num_frames must be positive.")
    if per_frame_zoom_factor <= 0:
        raise InvalidConfigError("per_frame_zoom_factor must be > 0.")
    return [float(per_frame_zoom_factor) ** i for i in range(num_frames)]

def render_sequence(
    viewport: Viewport,
    config: RenderConfig,
    *,
    num_frames: int,
    per_frame_zoom_factor: float,
    frames_dir: str,
    workers: Optional[int] = None,
    log_queue=None,
    log_level: int = logging.INFO,
    progress: bool = False,
) -> List[FrameResult]:
    """Render frames at zoom factor**i around a fixed centre into ``frames_dir``.

    A failing frame is logged and recorded in its FrameResult; the remaining
    frames still render.
    """
    logger = get_logger()
    zooms = zoom_sequence(num_frames, per_frame_zoom_factor)
    _ensure_dir(frames_dir)

    logger.info("Sequence start frames=%s size=%sx%s factor=%s center=(%s, %s)",
                num_frames, config.width, config.height, per_frame_zoom_factor,
                viewport.center_re, viewport.center_im)

    results: List[FrameResult] = []
    for i, zoom in enumerate(tqdm(zooms, desc="frames", unit="frame", disable=not progress)):
        frame_id = f"{i:06d}"
        try:
            img = render(
                viewport.with_zoom(zoom), config, workers=workers, frame_id=frame_id,
                log_queue=log_queue, log_level=log_level,
            )
            path = save_image(img, frame_path(frames_dir, i))
        except (FractalError, OSError) as e:
            logger.exception("[Frame %s] failed at zoom=%s", frame_id, zoom)
            results.append(FrameResult(index=i, zoom=zoom, path=None, error=str(e)))
            continue
        logger.info("Saved frame %s -> %s (zoom=%s)", i, path, zoom)
        results.append(FrameResult(index=i, zoom=zoom, path=path))

    failed = sum(1 for r in results if not r.ok)
    logger.info("Sequence complete frames_dir=%s rendered=%s failed=%s", frames_dir, len(results) - failed, failed)
    return results

def render_palette_strip(palette: Palette, width: int, height: int) -> Image.Image:
    """Preview image: column x shows palette.color_at(x / width)."""
    if width <= 0 or height <= 0:
        raise InvalidConfigError("width/height must be positive.")
    row = np.array([palette.color_at(x / width) for x in range(width)], dtype=np.uint8)
    buf = np.repeat(row[np.newaxis, :, :], height, axis=0)
    return Image.fromarray(buf)
