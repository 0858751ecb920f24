from __future__ import annotations

import math
from dataclasses import dataclass, replace

from fractalimage.complex_number import ComplexNumber
from fractalimage.errors import InvalidConfigError

ASPECT = 16.0 / 9.0


@dataclass(frozen=True)
class Bounds:
    min_re: float
    max_re: float
    min_im: float
    max_im: float


def derive_bounds(center_re: float, center_im: float, zoom: float) -> Bounds:
    """Plane rectangle for a centre and zoom: height 2/zoom, width scaled to 16:9."""
    plane_height = 2.0 / zoom
    plane_width = plane_height * ASPECT

    half_re = plane_width / 2.0
    half_im = plane_height / 2.0
    return Bounds(
        min_re=center_re - half_re,
        max_re=center_re + half_re,
        min_im=center_im - half_im,
        max_im=center_im + half_im,
    )


@dataclass(frozen=True)
class Viewport:
    center_re: float = 0.0
    center_im: float = 0.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        for name in ("center_re", "center_im", "zoom"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidConfigError(f"{name} must be finite.")
        if self.zoom <= 0:
            raise InvalidConfigError("zoom must be > 0.")

    @property
    def bounds(self) -> Bounds:
        return derive_bounds(self.center_re, self.center_im, self.zoom)

    def with_center(self, center_re: float, center_im: float) -> Viewport:
        return replace(self, center_re=float(center_re), center_im=float(center_im))

    def with_zoom(self, zoom: float) -> Viewport:
        return replace(self, zoom=float(zoom))


class PixelMapper:
    """Affine map from pixel coordinates (top-left origin) to the complex plane."""

    def __init__(self, bounds: Bounds, width: int, height: int) -> None:
        self.bounds = bounds
        self.width = width
        self.height = height
        self._re_step = (bounds.max_re - bounds.min_re) / width
        self._im_step = (bounds.min_im - bounds.max_im) / height

    @classmethod
    def for_viewport(cls, viewport: Viewport, width: int, height: int) -> PixelMapper:
        return cls(viewport.bounds, width, height)

    def map(self, x: int, y: int) -> ComplexNumber:
        return ComplexNumber(
            self.bounds.min_re + x * self._re_step,
            self.bounds.max_im + y * self._im_step,
        )
