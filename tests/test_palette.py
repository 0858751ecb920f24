import numpy as np
import pytest
from PIL import Image

from fractalimage.errors import PaletteLoadError
from fractalimage.palette import NUM_STOPS, Palette, PaletteKind, build_palette, read_rgb_image


def _gradient_pixels(width=256, height=20):
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    ramp = np.arange(width) % 256
    pixels[:, :, 0] = ramp
    pixels[:, :, 1] = 255 - ramp
    pixels[:, :, 2] = 7
    # Only row 10 is sampled; make the other rows distinguishable.
    pixels[:10, :, 2] = 200
    return pixels


def test_image_lookup_endpoints_from_injected_reader():
    palette = build_palette(PaletteKind.IMAGE_LOOKUP, "gradient.png", image_reader=lambda path: _gradient_pixels())
    assert palette.kind is PaletteKind.IMAGE_LOOKUP
    assert palette.stops.shape == (NUM_STOPS, 3)
    assert palette.color_at(0.0) == (0, 255, 7)
    assert palette.color_at(1.0) == (255, 0, 7)


def test_image_lookup_interpolates_between_stops():
    palette = build_palette(PaletteKind.IMAGE_LOOKUP, "gradient.png", image_reader=lambda path: _gradient_pixels())
    # 0.5 lands halfway between stops 127 and 128.
    assert palette.color_at(0.5) == (128, 128, 7)
    assert palette.color_at(10 / 255) == (10, 245, 7)


def test_image_lookup_from_file(tmp_path):
    path = tmp_path / "match.png"
    Image.fromarray(_gradient_pixels(width=300)).save(path)
    palette = build_palette(PaletteKind.IMAGE_LOOKUP, str(path))
    assert palette.color_at(0.0) == (0, 255, 7)
    assert palette.color_at(1.0) == (255, 0, 7)


def test_read_rgb_image_converts_mode(tmp_path):
    path = tmp_path / "gray.png"
    Image.new("L", (4, 3), color=9).save(path)
    pixels = read_rgb_image(str(path))
    assert pixels.shape == (3, 4, 3)
    assert (pixels == 9).all()


def test_missing_reference_image(tmp_path):
    with pytest.raises(PaletteLoadError) as exc:
        build_palette(PaletteKind.IMAGE_LOOKUP, str(tmp_path / "nope.png"))
    assert isinstance(exc.value.__cause__, OSError)


def test_unreadable_reference_image(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    with pytest.raises(PaletteLoadError):
        build_palette(PaletteKind.IMAGE_LOOKUP, str(path))


def test_narrow_reference_image():
    with pytest.raises(PaletteLoadError):
        build_palette(PaletteKind.IMAGE_LOOKUP, "x.png", image_reader=lambda path: _gradient_pixels(width=255))


def test_short_reference_image():
    with pytest.raises(PaletteLoadError):
        build_palette(PaletteKind.IMAGE_LOOKUP, "x.png", image_reader=lambda path: _gradient_pixels(height=10))


def test_image_lookup_requires_path():
    with pytest.raises(PaletteLoadError):
        build_palette(PaletteKind.IMAGE_LOOKUP)


def test_grayscale_runs_black_to_white():
    palette = build_palette(PaletteKind.GRAYSCALE)
    assert palette.color_at(0.0) == (0, 0, 0)
    assert palette.color_at(1.0) == (255, 255, 255)
    r, g, b = palette.color_at(0.5)
    assert r == g == b
    assert 120 <= r <= 135


def test_hue_starts_at_red():
    palette = build_palette(PaletteKind.HUE)
    assert palette.color_at(0.0) == (255, 0, 0)


@pytest.mark.parametrize("kind", [PaletteKind.GRAYSCALE, PaletteKind.HUE, PaletteKind.PRISM])
def test_procedural_palettes_return_bytes(kind):
    palette = build_palette(kind)
    for i in range(0, 101):
        rgb = palette.color_at(i / 100)
        assert len(rgb) == 3
        assert all(isinstance(c, int) and 0 <= c <= 255 for c in rgb)


def test_color_at_clamps_out_of_range_index():
    palette = build_palette(PaletteKind.GRAYSCALE)
    assert palette.color_at(-2.0) == palette.color_at(0.0)
    assert palette.color_at(3.0) == palette.color_at(1.0)
    assert palette.color_at(float("nan")) == palette.color_at(0.0)


def test_palette_rejects_bad_stops():
    with pytest.raises(ValueError):
        Palette(PaletteKind.GRAYSCALE, np.zeros((1, 3)))
