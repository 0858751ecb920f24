import json
from typing import Any, Dict, Optional, Tuple

from PIL import ImageColor

from fractalimage.coloring import ColoringFunction
from fractalimage.errors import InvalidConfigError
from fractalimage.palette import PaletteKind
from fractalimage.render_config import RenderConfig
from fractalimage.viewport import Viewport

DEFAULTS: Dict[str, Any] = {
    "width": 1920,
    "height": 1080,
    "center": [0.3602, -0.6413],
    "zoom": 1.0,
    "max_iterations": 1000,
    "continuous": True,
    "coloring": "bleasdale_inv",
    "palette": "hue",
    "palette_image": None,
    "in_set_color": "#000000",
    "frames": 100,
    "zoom_factor": 1.1,
    "frames_dir": "frames",
    "output": "mandelbrot.png",
    "output_video": "mandelbrot_zoom.mp4",
    "fps": 30,
    "workers": None,
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULTS)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except OSError as e:
        raise InvalidConfigError(f"Cannot read config {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Config {config_path} is not valid JSON: {e}") from e
    if not isinstance(cfg, dict):
        raise InvalidConfigError("Config JSON must be an object.")
    return cfg

def _enum_value(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls[str(value).strip().upper()]
    except KeyError:
        choices = ", ".join(m.name.lower() for m in enum_cls)
        raise InvalidConfigError(f"{field} must be one of: {choices} (got {value!r}).") from None

def parse_color(value: Any) -> Tuple[int, int, int]:
    if isinstance(value, str):
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError as e:
            raise InvalidConfigError(f"Unknown colour {value!r}.") from e
        return rgb[0], rgb[1], rgb[2]
    if isinstance(value, (list, tuple)) and len(value) == 3:
        return int(value[0]), int(value[1]), int(value[2])
    raise InvalidConfigError(f"Colour must be a string or [r, g, b], got {value!r}.")

def _as_int(cfg: Dict[str, Any], key: str) -> int:
    value = cfg[key]
    # int() would silently truncate 8.9 and accept True as 1.
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidConfigError(f"{key} must be an integer, got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidConfigError(f"{key} must be an integer, got {value!r}.") from e

def _as_float(cfg: Dict[str, Any], key: str) -> float:
    try:
        return float(cfg[key])
    except (TypeError, ValueError) as e:
        raise InvalidConfigError(f"{key} must be a number, got {cfg[key]!r}.") from e

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        raise InvalidConfigError(f"Unknown config field(s): {', '.join(unknown)}")

    out = dict(DEFAULTS)
    out.update(cfg)

    for key in ("width", "height", "max_iterations", "frames", "fps"):
        out[key] = _as_int(out, key)
        if out[key] <= 0:
            raise InvalidConfigError(f"{key} must be positive.")
    for key in ("zoom", "zoom_factor"):
        out[key] = _as_float(out, key)
        if out[key] <= 0:
            raise InvalidConfigError(f"{key} must be > 0.")

    center = out["center"]
    if not (isinstance(center, (list, tuple)) and len(center) == 2):
        raise InvalidConfigError("center must be [re, im].")
    try:
        out["center"] = [float(center[0]), float(center[1])]
    except (TypeError, ValueError) as e:
        raise InvalidConfigError(f"center must be numeric, got {center!r}.") from e

    out["continuous"] = bool(out["continuous"])
    out["coloring"] = _enum_value(ColoringFunction, out["coloring"], "coloring")
    out["palette"] = _enum_value(PaletteKind, out["palette"], "palette")
    out["in_set_color"] = parse_color(out["in_set_color"])
    out["palette_image"] = str(out["palette_image"]) if out["palette_image"] else None
    if out["workers"] is not None:
        out["workers"] = _as_int(out, "workers")
        if out["workers"] <= 0:
            raise InvalidConfigError("workers must be positive.")
    for key in ("frames_dir", "output", "output_video"):
        out[key] = str(out[key])
    return out

def build_viewport(cfg: Dict[str, Any]) -> Viewport:
    return Viewport(center_re=cfg["center"][0], center_im=cfg["center"][1], zoom=cfg["zoom"])

def build_render_config(cfg: Dict[str, Any]) -> RenderConfig:
    return RenderConfig(
        width=cfg["width"],
        height=cfg["height"],
        max_iterations=cfg["max_iterations"],
        continuous=cfg["continuous"],
        coloring=cfg["coloring"],
        palette=cfg["palette"],
        in_set_color=cfg["in_set_color"],
        palette_image=cfg["palette_image"],
    )

def to_jsonable(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(cfg)
    for key in ("coloring", "palette"):
        if key in out and hasattr(out[key], "value"):
            out[key] = out[key].value
    if "in_set_color" in out:
        out["in_set_color"] = list(out["in_set_color"])
    return out
