"""Glyph images and their BMFont metrics.

This module defines the output of rasterization: a pixel buffer plus the
placement-independent metrics of the glyph. Packing fills in the page
placement afterwards.
"""

from dataclasses import dataclass, field
from typing import Any

from sdfatlas.domain.contour import BoundingBox, PathCommand

# All four channels of the page hold glyph data
CHANNEL_ALL = 15


@dataclass
class GlyphMetrics:
    """BMFont character record.

    Attributes:
        id: Unicode code point
        index: Glyph index in the font
        char: The character itself
        width: Image width in pixels (0 for blank glyphs)
        height: Image height in pixels (0 for blank glyphs)
        xoffset: Horizontal offset from the cursor to the image
        yoffset: Vertical offset from the line top to the image
        xadvance: Cursor advance after drawing
        chnl: Texture channel mask
        x: Left edge on the page
        y: Top edge on the page
        page: Page index
    """

    id: int
    index: int
    char: str
    width: int
    height: int
    xoffset: float
    yoffset: float
    xadvance: float
    chnl: int = CHANNEL_ALL
    x: int = 0
    y: int = 0
    page: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a BMFont char dictionary, in BMFont key order."""
        return {
            "id": self.id,
            "index": self.index,
            "char": self.char,
            "width": self.width,
            "height": self.height,
            "xoffset": self.xoffset,
            "yoffset": self.yoffset,
            "xadvance": self.xadvance,
            "chnl": self.chnl,
            "x": self.x,
            "y": self.y,
            "page": self.page,
        }


@dataclass
class GlyphImage:
    """A rasterized glyph.

    Pixels are RGBA, row-major, four bytes per pixel. Blank glyphs carry
    no pixels and have 0x0 size.

    Attributes:
        metrics: Character record (placement filled in by packing)
        pixels: RGBA pixel buffer, or None for blank glyphs
        filtered_contours: Number of contours dropped by the tolerance filter
        degenerate: Whether normalization left a single-command contour
    """

    metrics: GlyphMetrics
    pixels: bytes | None = None
    filtered_contours: int = 0
    degenerate: bool = field(default=False)

    @property
    def char(self) -> str:
        return self.metrics.char

    @property
    def width(self) -> int:
        return self.metrics.width

    @property
    def height(self) -> int:
        return self.metrics.height

    def is_blank(self) -> bool:
        """Check if the glyph occupies no area on a page.

        Returns:
            True for glyphs without pixel data (e.g. space)
        """
        return self.pixels is None or self.width == 0 or self.height == 0


@dataclass
class GlyphOutline:
    """A character's outline as read from the font, in pixel space.

    Attributes:
        char: The character
        index: Glyph index in the font
        commands: Path commands scaled to the font size, y growing downward
        bounds: Exact bounds of the outline (curve extrema included)
        advance_width: Horizontal advance in pixels
    """

    char: str
    index: int
    commands: list[PathCommand]
    bounds: BoundingBox
    advance_width: float

    @property
    def code(self) -> int:
        return ord(self.char)
