from __future__ import annotations

import enum
import math
from typing import Callable, Optional, Tuple

import numpy as np
from matplotlib import colormaps
from PIL import Image

from fractalimage.coloring import clamp01
from fractalimage.errors import PaletteLoadError

RGB = Tuple[int, int, int]

NUM_STOPS = 256
SAMPLE_ROW = 10


class PaletteKind(enum.Enum):
    GRAYSCALE = "grayscale"
    HUE = "hue"
    PRISM = "prism"
    IMAGE_LOOKUP = "image_lookup"


_COLORMAP_NAMES = {
    PaletteKind.GRAYSCALE: "gray",
    PaletteKind.HUE: "hsv",
    PaletteKind.PRISM: "prism",
}

ImageReader = Callable[[str], np.ndarray]


class Palette:
    """Colour lookup over [0, 1], interpolating linearly between RGB stops."""

    def __init__(self, kind: PaletteKind, stops: np.ndarray) -> None:
        stops = np.asarray(stops, dtype=np.float64)
        if stops.ndim != 2 or stops.shape[1] != 3 or stops.shape[0] < 2:
            raise ValueError("stops must be an (N, 3) array with N >= 2")
        self.kind = kind
        self.stops = stops

    def color_at(self, index: float) -> RGB:
        last = self.stops.shape[0] - 1
        pos = clamp01(index) * last
        lo = min(int(math.floor(pos)), last)
        hi = min(lo + 1, last)
        t = pos - lo
        rgb = self.stops[lo] + (self.stops[hi] - self.stops[lo]) * t
        return int(round(rgb[0])), int(round(rgb[1])), int(round(rgb[2]))

    def __repr__(self) -> str:
        return f"Palette(kind={self.kind.name}, stops={self.stops.shape[0]})"


def read_rgb_image(path: str) -> np.ndarray:
    with Image.open(path) as img:
        return np.asarray(img.convert("RGB"))


def colormap_stops(name: str, n: int = NUM_STOPS) -> np.ndarray:
    rgba = colormaps[name](np.linspace(0.0, 1.0, n))
    return np.asarray(rgba)[:, :3] * 255.0


def image_stops(pixels: np.ndarray, path: str) -> np.ndarray:
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise PaletteLoadError(f"Reference image {path} is not an RGB image.")
    height, width = pixels.shape[:2]
    if height <= SAMPLE_ROW:
        raise PaletteLoadError(f"Reference image {path} has {height} rows; row {SAMPLE_ROW} is required.")
    if width < NUM_STOPS:
        raise PaletteLoadError(f"Reference image {path} is {width}px wide; {NUM_STOPS} samples are required.")
    return pixels[SAMPLE_ROW, :NUM_STOPS, :3].astype(np.float64)


def build_palette(
    kind: PaletteKind,
    reference_image_path: Optional[str] = None,
    image_reader: ImageReader = read_rgb_image,
) -> Palette:
    if kind in _COLORMAP_NAMES:
        return Palette(kind, colormap_stops(_COLORMAP_NAMES[kind]))

    if kind is not PaletteKind.IMAGE_LOOKUP:
        raise ValueError(f"Unknown palette kind: {kind!r}")
    if not reference_image_path:
        raise PaletteLoadError("IMAGE_LOOKUP palette requires a reference image path.")

    try:
        pixels = image_reader(reference_image_path)
    except OSError as e:
        raise PaletteLoadError(f"Failed to read reference image {reference_image_path}: {e}") from e
    return Palette(kind, image_stops(pixels, reference_image_path))
