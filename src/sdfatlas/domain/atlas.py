"""Atlas pages, placements and the font descriptor document."""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sdfatlas.domain.glyph import GlyphImage


@dataclass(frozen=True, slots=True)
class PackedRect:
    """A glyph image placed on a page.

    Attributes:
        glyph: The rasterized glyph
        page: Page index
        x: Left edge on the page
        y: Top edge on the page
    """

    glyph: GlyphImage
    page: int
    x: int
    y: int


@dataclass
class AtlasPage:
    """One texture page of the atlas.

    Attributes:
        index: Page index
        filename: Output path of the page image
        width: Page width in pixels
        height: Page height in pixels
        image: Encoded PNG data
        svg: Outline overlay (vector debug mode only)
    """

    index: int
    filename: Path
    width: int
    height: int
    image: bytes = b""
    svg: str | None = None


@dataclass(frozen=True, slots=True)
class KerningPair:
    """Advance adjustment between two characters.

    Attributes:
        first: Code point of the left character
        second: Code point of the right character
        amount: Adjustment in pixels
    """

    first: int
    second: int
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return {"first": self.first, "second": self.second, "amount": self.amount}


@dataclass(frozen=True)
class FontDescriptor:
    """The BMFont descriptor document.

    Created once at the end of a run. Use to_dict() to get a mutable copy.

    Attributes:
        pages: Page image file names
        chars: Character records
        info: BMFont info block
        common: BMFont common block
        distance_field: Distance field parameters
        kernings: Kerning records
    """

    pages: tuple[str, ...]
    chars: tuple[dict[str, Any], ...]
    info: dict[str, Any]
    common: dict[str, Any]
    distance_field: dict[str, Any]
    kernings: tuple[dict[str, Any], ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the BMFont JSON layout."""
        return copy.deepcopy(
            {
                "pages": list(self.pages),
                "chars": list(self.chars),
                "info": self.info,
                "common": self.common,
                "distanceField": self.distance_field,
                "kernings": list(self.kernings),
            }
        )


@dataclass
class FontFile:
    """The serialized descriptor plus the settings needed to resume.

    Attributes:
        filename: Output path of the descriptor
        data: Serialized descriptor text
        settings: Resume settings (JSON-compatible dictionary)
        descriptor: The descriptor document
    """

    filename: Path
    data: str
    settings: dict[str, Any]
    descriptor: FontDescriptor


@dataclass
class GenerationResult:
    """Everything a run produces.

    Attributes:
        pages: Atlas pages with encoded images
        font_file: Descriptor file and resume settings
    """

    pages: list[AtlasPage]
    font_file: FontFile
