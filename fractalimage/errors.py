class FractalError(Exception):
    """Base class for errors that abort a render."""


class InvalidConfigError(FractalError, ValueError):
    pass


class PaletteLoadError(FractalError):
    pass


class VideoEncodeError(FractalError, RuntimeError):
    pass
