"""Unit tests for the font and file I/O layer.

Tests for FontReader, KerningTable and the atlas writer.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
from fontTools.ttLib import TTFont

from sdfatlas.domain import (
    AtlasPage,
    BoundingBox,
    CommandType,
    FontDescriptor,
    FontFile,
    GenerationResult,
)
from sdfatlas.exceptions import FontFormatError, ResumeError
from sdfatlas.io.kerning import KerningTable
from sdfatlas.io.reader import FontReader
from sdfatlas.io.writer import AtlasWriter, load_resume_settings, save_resume_settings


class TestFontReader:
    """Tests for FontReader class."""

    def test_init(self):
        """Test FontReader initialization."""
        path = Path("test.ttf")
        reader = FontReader(path)
        assert reader._font_path == path
        assert reader._font is None

    def test_load_nonexistent_file(self):
        """Test loading a nonexistent file raises FileNotFoundError."""
        reader = FontReader(Path("nonexistent.ttf"))
        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_units_per_em_before_load(self):
        """Test accessing units_per_em before loading raises RuntimeError."""
        reader = FontReader(Path("test.ttf"))
        with pytest.raises(RuntimeError, match="Font not loaded"):
            _ = reader.units_per_em

    def test_outline_before_load(self):
        """Test extracting an outline before loading raises RuntimeError."""
        reader = FontReader(Path("test.ttf"))
        with pytest.raises(RuntimeError, match="Font not loaded"):
            reader.get_outline("A", font_size=42)

    @patch("sdfatlas.io.reader.TTFont")
    @patch.object(Path, "exists", return_value=True)
    def test_format_opentype(self, _mock_exists, mock_ttfont):  # noqa: ARG002
        """Test format property for CFF fonts."""
        mock_font = MagicMock()
        mock_font.__contains__ = Mock(side_effect=lambda x: x == "CFF ")
        mock_ttfont.return_value = mock_font

        reader = FontReader(Path("test.otf"))
        reader.load()

        assert reader.outlines_format == "cff"
        assert reader.format == "OpenType"

    @patch("sdfatlas.io.reader.TTFont")
    @patch.object(Path, "exists", return_value=True)
    def test_bitmap_font_rejected(self, _mock_exists, mock_ttfont):  # noqa: ARG002
        """Test fonts without vector outlines are rejected."""
        mock_font = MagicMock()
        mock_font.__contains__ = Mock(return_value=False)
        mock_ttfont.return_value = mock_font

        reader = FontReader(Path("bitmap.ttf"))
        with pytest.raises(FontFormatError, match="vector outline"):
            reader.load()
        mock_font.close.assert_called_once()

    def test_built_font_properties(self, test_font: Path):
        """Test font-wide properties of a real font."""
        with FontReader(test_font) as reader:
            assert reader.format == "TrueType"
            assert reader.face_name == "AtlasTest"
            assert reader.units_per_em == 1000
            assert reader.glyph_count == 5
            assert reader.vertical_metrics == (800, -200, 0)
            assert reader.scale(42) == pytest.approx(0.042)

    def test_outline_in_pixel_space(self, test_font: Path):
        """Test outlines are scaled and flipped so y grows downward."""
        with FontReader(test_font) as reader:
            outline = reader.get_outline("A", font_size=42)

        assert outline.char == "A"
        assert outline.index == 2
        assert outline.advance_width == pytest.approx(25.2)
        assert outline.bounds.x1 == pytest.approx(4.2)
        assert outline.bounds.y1 == pytest.approx(-29.4)
        assert outline.bounds.x2 == pytest.approx(21.0)
        assert outline.bounds.y2 == pytest.approx(0.0)
        assert outline.commands[0].type == CommandType.MOVE
        assert outline.commands[-1].type == CommandType.CLOSE

    def test_empty_glyph(self, test_font: Path):
        """Test a glyph without contours has no commands and empty bounds."""
        with FontReader(test_font) as reader:
            outline = reader.get_outline(" ", font_size=42)

        assert outline.commands == []
        assert outline.bounds == BoundingBox()
        assert outline.advance_width == pytest.approx(25.2)

    def test_unmapped_character_uses_notdef(self, test_font: Path):
        """Test characters missing from the font use .notdef."""
        with FontReader(test_font) as reader:
            assert reader.glyph_name("Z") == ".notdef"
            assert reader.glyph_index("Z") == 0
            outline = reader.get_outline("Z", font_size=42)

        assert outline.char == "Z"
        assert outline.bounds.x1 == pytest.approx(2.1)

    def test_svg_path(self, test_font: Path):
        """Test SVG outlines are placed at the given origin."""
        with FontReader(test_font) as reader:
            path = reader.get_svg_path("A", font_size=42, x=10, y=40)
            empty = reader.get_svg_path(" ", font_size=42, x=10, y=40)

        assert path.startswith('<path d="M')
        assert path.endswith("Z\"/>")
        assert empty == ""

    def test_kerning(self, test_font: Path):
        """Test kerning between characters comes from GPOS."""
        with FontReader(test_font) as reader:
            assert reader.get_kerning("A", "B") == -50
            assert reader.get_kerning("B", "A") == 0

    def test_close_releases_font(self, test_font: Path):
        """Test close() drops the loaded font."""
        reader = FontReader(test_font)
        reader.load()
        reader.close()
        assert reader._font is None


class TestKerningTable:
    """Tests for KerningTable class."""

    def test_gpos_pairs(self, test_font: Path):
        """Test pair adjustments from the GPOS kern feature."""
        font = TTFont(str(test_font))
        table = KerningTable(font)
        assert table.source == "GPOS"
        assert table.get("A", "B") == -50
        assert table.get("A", "C") == 0
        font.close()

    def test_no_kerning(self, unkerned_font: Path):
        """Test fonts without kerning data report zero."""
        font = TTFont(str(unkerned_font))
        table = KerningTable(font)
        assert table.source is None
        assert table.get("A", "B") == 0
        font.close()

    def test_legacy_kern_table(self):
        """Test the legacy kern table is used when there is no GPOS table."""
        subtable = MagicMock()
        subtable.kernTable = {("A", "C"): -30}
        kern = MagicMock()
        kern.kernTables = [subtable]
        font = MagicMock()
        font.__contains__ = Mock(side_effect=lambda tag: tag == "kern")
        font.__getitem__ = Mock(return_value=kern)

        table = KerningTable(font)

        assert table.source == "kern"
        assert table.get("A", "C") == -30
        assert table.get("C", "A") == 0


def make_result(tmp_path: Path, svg: bool = False) -> GenerationResult:
    descriptor = FontDescriptor(
        pages=("font.png",), chars=(), info={}, common={}, distance_field={}
    )
    page = AtlasPage(
        index=0,
        filename=tmp_path / "out" / "font.png",
        width=4,
        height=4,
        image=b"\x89PNG",
        svg="<svg/>" if svg else None,
    )
    font_file = FontFile(
        filename=tmp_path / "out" / "font.fnt",
        data="<font/>",
        settings={"opt": {"font_size": 42}, "pages": ["font.png"], "packer": {"bins": []}},
        descriptor=descriptor,
    )
    return GenerationResult(pages=[page], font_file=font_file)


class TestAtlasWriter:
    """Tests for AtlasWriter class."""

    def test_save_pages_and_descriptor(self, tmp_path: Path):
        """Test pages and descriptor are written."""
        written = AtlasWriter(make_result(tmp_path)).save()

        assert written == [tmp_path / "out" / "font.png", tmp_path / "out" / "font.fnt"]
        assert (tmp_path / "out" / "font.png").read_bytes() == b"\x89PNG"
        assert (tmp_path / "out" / "font.fnt").read_text() == "<font/>"

    def test_save_svg_overlay(self, tmp_path: Path):
        """Test outline overlays are written beside their page."""
        written = AtlasWriter(make_result(tmp_path, svg=True)).save()
        assert tmp_path / "out" / "font.svg" in written
        assert (tmp_path / "out" / "font.svg").read_text() == "<svg/>"

    def test_save_resume_settings(self, tmp_path: Path):
        """Test resume settings are written when a path is given."""
        resume = tmp_path / "font.cfg"
        written = AtlasWriter(make_result(tmp_path)).save(resume_path=resume)

        assert written[-1] == resume
        assert json.loads(resume.read_text())["opt"] == {"font_size": 42}


class TestResumeSettings:
    """Tests for resume settings files."""

    def test_missing_file(self, tmp_path: Path):
        """Test a settings file that does not exist yet gives None."""
        assert load_resume_settings(tmp_path / "new.cfg") is None

    def test_round_trip(self, tmp_path: Path):
        """Test saved settings load back."""
        path = tmp_path / "sub" / "font.cfg"
        save_resume_settings(path, {"opt": {"font_size": 42}, "pages": ["font.png"]})

        settings = load_resume_settings(path)
        assert settings.opt == {"font_size": 42}
        assert settings.pages == ["font.png"]
        assert settings.packer is None

    def test_invalid_json(self, tmp_path: Path):
        """Test a file that is not JSON cannot be resumed."""
        path = tmp_path / "font.cfg"
        path.write_text("{not json")
        with pytest.raises(ResumeError) as exc_info:
            load_resume_settings(path)
        assert exc_info.value.path == str(path)

    def test_schema_mismatch(self, tmp_path: Path):
        """Test a file with the wrong layout cannot be resumed."""
        path = tmp_path / "font.cfg"
        path.write_text(json.dumps({"pages": "font.png"}))
        with pytest.raises(ResumeError):
            load_resume_settings(path)

    def test_unsupported_packer_version(self, tmp_path: Path):
        """Test packer state from another version is rejected."""
        path = tmp_path / "font.cfg"
        path.write_text(json.dumps({"packer": {"version": 99, "bins": []}}))
        with pytest.raises(ResumeError, match="version"):
            load_resume_settings(path)
