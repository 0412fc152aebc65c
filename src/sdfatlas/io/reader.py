"""Font reader for loading TTF/OTF fonts.

This module provides the FontReader class for loading font files and
extracting glyph outlines, metrics and kerning into domain models.
"""

from pathlib import Path

from fontTools.ttLib import TTFont

from sdfatlas.domain.glyph import GlyphOutline
from sdfatlas.exceptions import FontFormatError
from sdfatlas.io.converter import glyph_bounds, glyph_to_commands, glyph_to_svg_path
from sdfatlas.io.kerning import KerningTable

NOTDEF = ".notdef"


class FontReader:
    """Loads TTF/OTF fonts and extracts glyph data.

    Characters missing from the font map to the .notdef glyph.

    Example:
        with FontReader(Path("font.ttf")) as reader:
            outline = reader.get_outline("A", font_size=42)
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF, OTF or WOFF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None
        self._cmap: dict[int, str] = {}
        self._kerning: KerningTable | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            FileNotFoundError: If font file does not exist
            FontFormatError: If the font has no vector outlines
            Exception: If font file is invalid or cannot be loaded
        """
        if not self._font_path.exists():
            raise FileNotFoundError(f"Font file not found: {self._font_path}")

        self._font = TTFont(str(self._font_path))

        if self.outlines_format is None:
            self.close()
            raise FontFormatError(
                str(self._font_path),
                "must be a vector outline font (ttf, otf, woff)",
            )

        self._cmap = self._font.getBestCmap() or {}

    def _require_font(self) -> TTFont:
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def outlines_format(self) -> str | None:
        """Return the outline format.

        Returns:
            'truetype' for glyf outlines, 'cff' for CFF/CFF2 outlines,
            None for bitmap-only fonts

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        if "glyf" in font:
            return "truetype"
        if "CFF " in font or "CFF2" in font:
            return "cff"
        return None

    @property
    def format(self) -> str:
        """Return font format ('TrueType' or 'OpenType')."""
        return "OpenType" if self.outlines_format == "cff" else "TrueType"

    @property
    def face_name(self) -> str:
        """Return the font face name used for output files."""
        return self._font_path.stem

    @property
    def units_per_em(self) -> int:
        """Return font's units per em.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["head"].unitsPerEm  # type: ignore[attr-defined]

    @property
    def glyph_count(self) -> int:
        """Return total number of glyphs in the font."""
        return self._require_font()["maxp"].numGlyphs

    @property
    def vertical_metrics(self) -> tuple[int, int, int]:
        """Return (ascender, descender, line gap) in font units.

        Uses the OS/2 typographic metrics, falling back to hhea for
        fonts without an OS/2 table.
        """
        font = self._require_font()
        if "OS/2" in font:
            os2 = font["OS/2"]
            return os2.sTypoAscender, os2.sTypoDescender, os2.sTypoLineGap
        hhea = font["hhea"]
        return hhea.ascent, hhea.descent, hhea.lineGap

    def scale(self, font_size: float) -> float:
        """Font units to pixels factor for a font size."""
        return font_size / self.units_per_em

    def glyph_name(self, char: str) -> str:
        """Get the glyph name mapped to a character (.notdef if unmapped)."""
        self._require_font()
        return self._cmap.get(ord(char), NOTDEF)

    def glyph_index(self, char: str) -> int:
        """Get the glyph index of a character."""
        return self._require_font().getGlyphID(self.glyph_name(char))

    def advance_width(self, char: str) -> int:
        """Get the advance width of a character in font units."""
        advance, _lsb = self._require_font()["hmtx"][self.glyph_name(char)]
        return advance

    def get_outline(self, char: str, font_size: float) -> GlyphOutline:
        """Extract a character's outline in pixel space.

        Args:
            char: Character to extract
            font_size: Target font size in pixels

        Returns:
            Outline with path commands, bounds and advance in pixels
        """
        font = self._require_font()
        glyph_set = font.getGlyphSet()
        name = self.glyph_name(char)
        scale = self.scale(font_size)

        return GlyphOutline(
            char=char,
            index=font.getGlyphID(name),
            commands=glyph_to_commands(glyph_set, name, scale),
            bounds=glyph_bounds(glyph_set, name, scale),
            advance_width=self.advance_width(char) * scale,
        )

    def get_svg_path(self, char: str, font_size: float, x: float, y: float) -> str:
        """Render a character outline as an SVG path with its baseline origin at (x, y)."""
        font = self._require_font()
        return glyph_to_svg_path(
            font.getGlyphSet(), self.glyph_name(char), self.scale(font_size), x, y
        )

    def get_kerning(self, first: str, second: str) -> int:
        """Get the kerning between two characters in font units.

        Args:
            first: Left character
            second: Right character

        Returns:
            Advance adjustment (0 if the pair is not kerned)
        """
        font = self._require_font()
        if self._kerning is None:
            self._kerning = KerningTable(font)
        return self._kerning.get(self.glyph_name(first), self.glyph_name(second))

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None
            self._cmap = {}
            self._kerning = None

    def __enter__(self) -> "FontReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
