"""Domain models for sdfatlas.

This module contains the core domain models representing glyph outlines,
rasterized glyphs, atlas pages and persisted packer state. Models are:

- Immutable where possible (using frozen dataclasses)
- Serializable to plain dictionaries
- Independent of fontTools and Pillow

Key classes:
- PathCommand / Contour: Glyph outline in pixel space
- GlyphMetrics / GlyphImage: Rasterized glyph and its BMFont record
- PackedRect / AtlasPage: Placement on texture pages
- KerningPair / FontDescriptor: The descriptor document
- PackerState / ResumeSettings: Persisted state for resuming an atlas
"""

from sdfatlas.domain.atlas import (
    AtlasPage,
    FontDescriptor,
    FontFile,
    GenerationResult,
    KerningPair,
    PackedRect,
)
from sdfatlas.domain.contour import BoundingBox, CommandType, Contour, PathCommand
from sdfatlas.domain.glyph import CHANNEL_ALL, GlyphImage, GlyphMetrics, GlyphOutline
from sdfatlas.domain.state import (
    PACKER_STATE_VERSION,
    BinState,
    FreeRect,
    PackerState,
    PlacedRect,
    ResumeSettings,
)

__all__: list[str] = [
    "CHANNEL_ALL",
    "PACKER_STATE_VERSION",
    # Enums
    "CommandType",
    # Outline types
    "BoundingBox",
    "Contour",
    "PathCommand",
    # Glyphs
    "GlyphImage",
    "GlyphMetrics",
    "GlyphOutline",
    # Atlas
    "AtlasPage",
    "FontDescriptor",
    "FontFile",
    "GenerationResult",
    "KerningPair",
    "PackedRect",
    # Persisted state
    "BinState",
    "FreeRect",
    "PackerState",
    "PlacedRect",
    "ResumeSettings",
]
