"""Exception hierarchy for sdfatlas."""


class SdfAtlasError(Exception):
    """Base exception for all sdfatlas errors."""

    pass


class ConfigurationError(SdfAtlasError):
    """Invalid options, detected before any work begins."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class FontError(SdfAtlasError):
    """Errors related to font loading."""

    pass


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class FontFormatError(FontError):
    """Unsupported or invalid font format."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid font format '{path}': {details}")


class GlyphError(SdfAtlasError):
    """Errors related to glyph processing."""

    pass


class RasterizationError(GlyphError):
    """The external rasterizer failed for a glyph."""

    def __init__(self, char: str, reason: str) -> None:
        self.char = char
        self.reason = reason
        super().__init__(f"Rasterization failed for {char!r}: {reason}")


class InvalidRasterError(RasterizationError):
    """The rasterizer returned pixel data that does not match the canvas size."""

    def __init__(self, char: str, value_count: int, width: int, height: int) -> None:
        self.value_count = value_count
        self.width = width
        self.height = height
        super().__init__(
            char,
            f"rasterizer returned {value_count} values for a {width}x{height} image",
        )


class PackingError(SdfAtlasError):
    """A glyph rectangle could not be placed on any page."""

    def __init__(self, char: str, reason: str) -> None:
        self.char = char
        self.reason = reason
        super().__init__(f"Cannot pack glyph {char!r}: {reason}")


class ResumeError(SdfAtlasError):
    """A previous atlas could not be resumed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot resume from '{path}': {reason}")
