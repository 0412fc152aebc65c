"""Font and atlas I/O layer for sdfatlas.

This module handles reading fonts with fontTools and writing atlas
output files. It provides a clean abstraction layer between fontTools
and the domain models.

Key responsibilities:
- Load TTF/OTF/WOFF fonts and validate their outline format
- Convert glyph outlines to pixel-space path commands
- Look up kerning from GPOS or the legacy kern table
- Serialize BMFont descriptors (xml, json)
- Write page images, descriptors and resume settings

Key classes:
- FontReader: Load fonts and extract glyph data
- KerningTable: Pair kerning lookup
- AtlasWriter: Save generation results
"""

from sdfatlas.io.descriptor import (
    DESCRIPTOR_EXTENSIONS,
    parse_descriptor,
    serialize_descriptor,
)
from sdfatlas.io.kerning import KerningTable
from sdfatlas.io.reader import FontReader
from sdfatlas.io.writer import AtlasWriter, load_resume_settings, save_resume_settings

__all__ = [
    "DESCRIPTOR_EXTENSIONS",
    "AtlasWriter",
    "FontReader",
    "KerningTable",
    "load_resume_settings",
    "parse_descriptor",
    "save_resume_settings",
    "serialize_descriptor",
]
