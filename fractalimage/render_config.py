from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from fractalimage.coloring import ColoringFunction
from fractalimage.errors import InvalidConfigError
from fractalimage.palette import PaletteKind


@dataclass(frozen=True)
class RenderConfig:
    """Parameters that stay fixed for the duration of one render."""

    width: int
    height: int
    max_iterations: int = 2000
    continuous: bool = True
    coloring: ColoringFunction = ColoringFunction.BLEASDALE_INV
    palette: PaletteKind = PaletteKind.HUE
    in_set_color: Tuple[int, int, int] = (0, 0, 0)
    palette_image: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("width", "height", "max_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigError(f"{name} must be an integer, got {value!r}.")
            if value <= 0:
                raise InvalidConfigError(f"{name} must be positive, got {value}.")

        if not isinstance(self.coloring, ColoringFunction):
            raise InvalidConfigError(f"Unknown coloring function: {self.coloring!r}")
        if not isinstance(self.palette, PaletteKind):
            raise InvalidConfigError(f"Unknown palette: {self.palette!r}")

        color = tuple(self.in_set_color)
        if len(color) != 3 or not all(isinstance(c, int) and 0 <= c <= 255 for c in color):
            raise InvalidConfigError(f"in_set_color must be three ints in 0..255, got {self.in_set_color!r}.")
        object.__setattr__(self, "in_set_color", color)

        if self.palette is PaletteKind.IMAGE_LOOKUP and not self.palette_image:
            raise InvalidConfigError("palette 'image_lookup' requires palette_image.")
