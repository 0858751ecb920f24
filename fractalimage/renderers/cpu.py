from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from fractalimage.coloring import clamp01, map_to_index
from fractalimage.escape import IN_SET, evaluate
from fractalimage.palette import Palette
from fractalimage.render_config import RenderConfig
from fractalimage.util.logging_setup import configure_worker_logging, get_logger
from fractalimage.viewport import Bounds, PixelMapper

_G: Dict[str, Any] = {}

def _init_worker(bounds, config, palette, frame_id, log_queue, log_level):
    _G["mapper"] = PixelMapper(bounds, config.width, config.height)
    _G["config"] = config
    _G["palette"] = palette
    _G["frame_id"] = frame_id
    if log_queue is not None:
        configure_worker_logging(log_queue, level=log_level)

def _pixel_color(x: int, y: int) -> Tuple[int, int, int]:
    config: RenderConfig = _G["config"]
    c = _G["mapper"].map(x, y)
    count = evaluate(c, config.max_iterations, config.continuous)
    if count is IN_SET:
        return config.in_set_color
    index = clamp01(map_to_index(count, config.max_iterations, config.coloring))
    return _G["palette"].color_at(index)

def _render_band(y0_y1: Tuple[int, int]) -> Tuple[int, np.ndarray]:
    y0, y1 = y0_y1
    width = _G["config"].width
    height = _G["config"].height
    frame_id = _G["frame_id"]

    logger = get_logger()
    band = np.zeros((y1 - y0, width, 3), dtype=np.uint8)

    for yi, y in enumerate(range(y0, y1)):
        for x in range(width):
            band[yi, x] = _pixel_color(x, y)
        if y % 50 == 0:
            logger.debug("[Frame %s] Rendered row %s/%s", frame_id, y, height)

    return y0, band

def split_bands(height: int, band_height: int) -> List[Tuple[int, int]]:
    bands: List[Tuple[int, int]] = []
    y = 0
    while y < height:
        y1 = min(height, y + band_height)
        bands.append((y, y1))
        y = y1
    return bands

def render_frame_cpu(
    *,
    bounds: Bounds,
    config: RenderConfig,
    palette: Palette,
    frame_id: str,
    workers: Optional[int] = None,
    log_queue=None,
    log_level: int = logging.INFO,
    band_height: int = 32,
) -> Image.Image:
    logger = get_logger()
    width, height = config.width, config.height

    logger.info("[Frame %s] CPU render start re=(%s, %s) im=(%s, %s) iter=%s",
                frame_id, bounds.min_re, bounds.max_re, bounds.min_im, bounds.max_im, config.max_iterations)

    buf = np.zeros((height, width, 3), dtype=np.uint8)
    bands = split_bands(height, band_height)

    if workers == 1:
        # In-process: the worker state lives in this process' globals.
        _init_worker(bounds, config, palette, frame_id, None, log_level)
        try:
            for y0, band in map(_render_band, bands):
                buf[y0:y0 + band.shape[0]] = band
        finally:
            _G.clear()
    else:
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(bounds, config, palette, frame_id, log_queue, log_level),
        ) as pool:
            for y0, band in pool.map(_render_band, bands):
                buf[y0:y0 + band.shape[0]] = band

    img = Image.fromarray(buf)
    logger.info("[Frame %s] CPU render done", frame_id)
    return img
